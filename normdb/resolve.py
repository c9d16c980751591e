"""
Deep resolution: depth-bounded expansion of references.

Traversal state is (current_table, remaining_depth), starting at
(root_table, max_depth) on the root record:
- remaining_depth < 0: the value is returned as-is
- Reference into current_table: returned unresolved, always
- Reference into another table: replaced by the target's data, resolved
  with (target_table, remaining_depth - 1); a missing target is logged
  and the reference returned unresolved
- Record: unwrapped to its data with remaining_depth - 1
- list / tuple: resolved element-wise, same state
- mapping: resolved field-by-field, same state
- anything else: returned as-is

Same-table edges are the only ones that can recurse structurally, so
never following them makes resolution terminate on cyclic data. Depth
counts cross-table hops actually followed, not nesting.

Invariants:
    - Only the root lookup can fail hard (NotFoundError)
    - A store is never modified by resolution
"""

from __future__ import annotations

import logging
from typing import Any

from .config import Settings, get_settings
from .errors import NotFoundError, UnresolvedReferenceError
from .store import Store
from .values import Record, Reference, ValueKind, classify, map_sequence

logger = logging.getLogger(__name__)


def fetch_ref(store: Store, ref: Reference) -> Record:
    """Look up the record a reference points to.

    Raises:
        UnresolvedReferenceError: If the table or record does not exist
    """
    table = store.get(ref.table)
    record = table.get(ref.id) if table is not None else None
    if record is None:
        raise UnresolvedReferenceError(ref.table, ref.id)
    return record


def resolve_value(
    store: Store,
    value: Any,
    current_table: str,
    remaining_depth: int,
    *,
    warn_unresolved: bool = True,
) -> Any:
    """Resolve references inside value.

    Args:
        store: Snapshot to read from
        value: Value to walk (a Record, its data, or any part of it)
        current_table: Table whose edges are never followed
        remaining_depth: Cross-table hops still allowed
        warn_unresolved: Log a warning for references that cannot be followed

    Returns:
        Value with references expanded as far as the depth allows
    """
    if remaining_depth < 0:
        return value

    def walk(item: Any, table: str, depth: int) -> Any:
        return resolve_value(store, item, table, depth, warn_unresolved=warn_unresolved)

    kind = classify(value)
    if kind is ValueKind.REFERENCE:
        if value.table == current_table:
            return value
        try:
            record = fetch_ref(store, value)
        except UnresolvedReferenceError as e:
            if warn_unresolved:
                logger.warning(f"Could not resolve reference: {e}", extra=e.details)
            return value
        return walk(record.data, value.table, remaining_depth - 1)

    if kind is ValueKind.WRAPPED_RECORD:
        return walk(value.data, current_table, remaining_depth - 1)

    if kind is ValueKind.SEQUENCE:
        return map_sequence(value, lambda item: walk(item, current_table, remaining_depth))

    if kind is ValueKind.STRUCTURED:
        return {key: walk(item, current_table, remaining_depth) for key, item in value.items()}

    return value


def _resolve_root(
    store: Store, table: str, record: Record, max_depth: int | None, settings: Settings | None
) -> Any:
    settings = settings or get_settings()
    depth = settings.default_depth if max_depth is None else max_depth
    return resolve_value(
        store, record, table, depth, warn_unresolved=settings.warn_unresolved
    )


def resolve(
    store: Store,
    table: str,
    record_id: str,
    max_depth: int | None = None,
    settings: Settings | None = None,
) -> Any:
    """Resolve the record with record_id in table.

    Args:
        store: Snapshot to read from
        table: Root table
        record_id: Root record id
        max_depth: Cross-table hops to follow (settings default when None)
        settings: Settings for the default depth and warnings

    Returns:
        The root record's data with references expanded

    Raises:
        NotFoundError: If the root record does not exist
    """
    record = store.table(table).get(record_id)
    if record is None:
        raise NotFoundError(
            f'Record with id "{record_id}" not found in table "{table}".',
            resource_type=table,
            resource_id=record_id,
        )
    return _resolve_root(store, table, record, max_depth, settings)


def resolve_or_none(
    store: Store,
    table: str,
    record_id: str,
    max_depth: int | None = None,
    settings: Settings | None = None,
) -> Any | None:
    """Like resolve(), but None when the root record does not exist."""
    record = store.table(table).get(record_id)
    if record is None:
        return None
    return _resolve_root(store, table, record, max_depth, settings)


def resolve_all(
    store: Store,
    table: str,
    max_depth: int | None = None,
    settings: Settings | None = None,
) -> list[Any]:
    """Resolve every record of table, in table order."""
    return [
        _resolve_root(store, table, record, max_depth, settings) for record in store.table(table)
    ]


def resolve_entities(
    store: Store,
    table: str,
    max_depth: int | None = None,
    settings: Settings | None = None,
) -> dict[str, Any]:
    """Resolve every record of table, keyed by id."""
    return {
        record.id: _resolve_root(store, table, record, max_depth, settings)
        for record in store.table(table)
    }
