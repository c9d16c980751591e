"""
Value model and structural classifier for normdb.

Every value stored in a record's data is one of five kinds:
- REFERENCE: a Reference(table, id) pointer into a table
- WRAPPED_RECORD: a whole Record(id, label, data) met mid-traversal
- SEQUENCE: a list or tuple, walked element-wise
- STRUCTURED: a plain mapping of nested fields, walked key-wise
- SCALAR: anything else (strings, numbers, None, dates, patterns, callables)

The materializer, the merge and the resolver all dispatch on classify(),
so adding a kind means touching all three.

Invariants:
    - Reference, SymbolicRef and Record are immutable value objects
    - There is one runtime Reference kind; self-reference is schema-only
    - Strings and bytes are scalars, never sequences
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable


class ValueKind(Enum):
    """Structural category of a stored value."""

    REFERENCE = "reference"
    WRAPPED_RECORD = "wrapped_record"
    SEQUENCE = "sequence"
    STRUCTURED = "structured"
    SCALAR = "scalar"


@dataclass(frozen=True)
class Reference:
    """Identifier-based pointer to a record.

    Attributes:
        table: Target table name
        id: Target record id
    """

    table: str
    id: str

    def to_dict(self) -> dict[str, str]:
        """Convert to the wire shape."""
        return {"table": self.table, "id": self.id}


@dataclass(frozen=True)
class SymbolicRef:
    """Population-time pointer naming a record by its population key.

    Only valid inside population data; the materializer rewrites every
    SymbolicRef into a Reference.
    """

    table: str
    key: str


@dataclass(frozen=True)
class Record:
    """The normalized unit of storage.

    Attributes:
        id: Unique id within the owning table
        label: Human-readable label
        data: Field data, possibly nested, possibly holding References
    """

    id: str
    label: str
    data: Any

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (data left as-is)."""
        return {"id": self.id, "label": self.label, "data": self.data}


def classify(value: Any) -> ValueKind:
    """Structurally categorize a value.

    Order matters: References and Records are checked before the
    container kinds, strings and bytes are scalars.
    """
    if isinstance(value, Reference):
        return ValueKind.REFERENCE
    if isinstance(value, Record):
        return ValueKind.WRAPPED_RECORD
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    if isinstance(value, Mapping):
        return ValueKind.STRUCTURED
    return ValueKind.SCALAR


def is_structured(value: Any) -> bool:
    """Whether value is a plain nested field-set."""
    return classify(value) is ValueKind.STRUCTURED


def map_sequence(value: list | tuple, fn: Callable[[Any], Any]) -> list | tuple:
    """Apply fn element-wise, keeping the sequence type."""
    if isinstance(value, tuple):
        return tuple(fn(item) for item in value)
    return [fn(item) for item in value]
