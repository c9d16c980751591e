"""
Selective recursive merge used by update commits.

Only nested field-sets (mappings) are patched key by key; every other
value kind is an atomic unit:
- mapping change over a mapping: recurse
- mapping change over anything else: recurse into a fresh empty mapping
- anything else (reference, list, tuple, date, pattern, callable, None,
  primitive): assigned wholesale, replacing whatever was there

The merge is pure. It never mutates its inputs and returns the original
object when the changes leave it as it was, so unchanged records keep
their identity all the way up to the store.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .values import Reference, ValueKind, classify

_MISSING = object()


def merge_changes(original: Mapping[str, Any], changes: Mapping[str, Any]) -> Mapping[str, Any]:
    """Merge changes into original, returning original when nothing changed.

    Example:
        >>> merge_changes({"name": "Alice", "tags": ["a", "b"]}, {"tags": ["c"]})
        {'name': 'Alice', 'tags': ['c']}
    """
    merged: dict[str, Any] | None = None
    for key, change in changes.items():
        current = original.get(key, _MISSING)
        if classify(change) is ValueKind.STRUCTURED:
            base = current if classify(current) is ValueKind.STRUCTURED else {}
            updated = merge_changes(base, change)
            if updated is current:
                continue
        else:
            if _unchanged_leaf(current, change):
                continue
            updated = change

        if merged is None:
            merged = dict(original)
        merged[key] = updated

    return original if merged is None else merged


def _unchanged_leaf(current: Any, change: Any) -> bool:
    if current is change:
        return True
    if current is _MISSING or type(current) is not type(change):
        return False
    # Equal immutable leaves are the same value; containers are always replaced
    if isinstance(change, (str, bytes, int, float, bool, Reference)):
        return bool(current == change)
    return False
