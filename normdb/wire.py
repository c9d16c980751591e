"""
Wire shape for stores.

A store serializes as:

    {
        "<table>": {
            "ids": ["<id>", ...],
            "entities": {"<id>": {"id": "<id>", "label": "...", "data": ...}}
        }
    }

References inside data serialize as {"table": ..., "id": ...}. On the way
back in, any mapping with exactly those two string keys is decoded as a
Reference, so plain data should not use that exact shape.

Incoming payloads are validated with pydantic models before a store is
built from them.

Invariants:
    - ids has no duplicates and equals the entity keys
    - Each entity's id equals its key
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, TypeAdapter, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import to_jsonable_python

from .errors import ValidationError
from .store import Store
from .table import Table
from .values import Record, Reference, ValueKind, classify

_REFERENCE_KEYS = frozenset({"table", "id"})


class WireRecord(BaseModel):
    """Serialized record."""

    id: str
    label: str
    data: Any = None


class WireTable(BaseModel):
    """Serialized table."""

    ids: list[str]
    entities: dict[str, WireRecord]

    @model_validator(mode="after")
    def _check_consistency(self) -> WireTable:
        if len(set(self.ids)) != len(self.ids):
            raise ValueError("ids contain duplicates")
        if set(self.ids) != set(self.entities):
            raise ValueError("ids do not match entity keys")
        for key, entity in self.entities.items():
            if entity.id != key:
                raise ValueError(f"entity key {key!r} does not match its id {entity.id!r}")
        return self


_store_adapter = TypeAdapter(dict[str, WireTable])


def encode_value(value: Any) -> Any:
    """Convert References (and nested records) to plain wire values."""
    kind = classify(value)
    if kind is ValueKind.REFERENCE:
        return value.to_dict()
    if kind is ValueKind.WRAPPED_RECORD:
        return {"id": value.id, "label": value.label, "data": encode_value(value.data)}
    if kind is ValueKind.SEQUENCE:
        return [encode_value(item) for item in value]
    if kind is ValueKind.STRUCTURED:
        return {key: encode_value(item) for key, item in value.items()}
    return value


def decode_value(value: Any) -> Any:
    """Convert wire references back into Reference objects."""
    if isinstance(value, Mapping):
        if (
            set(value) == _REFERENCE_KEYS
            and isinstance(value["table"], str)
            and isinstance(value["id"], str)
        ):
            return Reference(value["table"], value["id"])
        return {key: decode_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [decode_value(item) for item in value]
    return value


def to_wire(store: Store) -> dict[str, Any]:
    """Convert a store to its wire shape."""
    return {
        name: {
            "ids": list(table.ids),
            "entities": {
                record.id: {
                    "id": record.id,
                    "label": record.label,
                    "data": encode_value(record.data),
                }
                for record in table
            },
        }
        for name, table in store.items()
    }


def from_wire(payload: Mapping[str, Any]) -> Store:
    """Build a store from its wire shape.

    Raises:
        ValidationError: If the payload does not have the wire shape
    """
    try:
        tables = _store_adapter.validate_python(payload)
    except PydanticValidationError as e:
        errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        raise ValidationError(
            f"Invalid store payload: {'; '.join(errors)}", errors=errors
        ) from e

    return Store(
        {
            name: Table(
                tuple(wire_table.ids),
                {
                    record_id: Record(entity.id, entity.label, decode_value(entity.data))
                    for record_id, entity in wire_table.entities.items()
                },
            )
            for name, wire_table in tables.items()
        }
    )


def dumps(store: Store, indent: int | None = None) -> str:
    """Serialize a store to JSON.

    Dates and other values pydantic knows how to serialize are converted;
    values it does not know (callables, for example) raise.
    """
    return json.dumps(to_jsonable_python(to_wire(store)), indent=indent)


def loads(text: str) -> Store:
    """Deserialize a store from JSON."""
    return from_wire(json.loads(text))
