"""
Schema types for normdb.

This module provides the table declarations the store needs:
- FieldDef: A field, either a plain value or a reference to a table
- TableDef: A named table with its fields
- Schema: The ordered set of tables of one model
- RefBuilders: Per-table reference constructors handed to data builders

The store only needs to know which fields hold references and to which
table; plain fields are declared so that population entries can be
checked for typos.

Invariants:
    - Table names are unique within a schema
    - Field names are unique within a table
    - Every reference field targets a table of the same schema
    - The SELF marker never survives registration

Example:
    >>> People = TableDef(
    ...     name="People",
    ...     fields=(
    ...         field("name"),
    ...         field("age"),
    ...         self_ref("favouriteCoWorker"),
    ...     ),
    ... )
    >>> Tasks = TableDef(
    ...     name="Tasks",
    ...     fields=(field("title"), ref("assignedTo", "People")),
    ... )
    >>> schema = Schema().with_tables(People, Tasks)
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, replace
from dataclasses import field as dataclass_field
from enum import Enum
from typing import Any

from .errors import SchemaError

# Placeholder target for references into the declaring table
SELF = "$self"


class FieldKind(Enum):
    """Supported field kinds."""

    VALUE = "value"
    REFERENCE = "ref"
    LIST_REFERENCE = "list_ref"

    @classmethod
    def from_str(cls, value: str) -> FieldKind:
        """Convert string to FieldKind."""
        for kind in cls:
            if kind.value == value:
                return kind
        raise ValueError(f"Invalid field kind: {value}")


@dataclass(frozen=True)
class FieldDef:
    """Field definition within a table.

    Attributes:
        name: Field name in the record data
        kind: Plain value or reference kind
        ref_table: Target table for reference kinds
        description: Documentation
    """

    name: str
    kind: FieldKind = FieldKind.VALUE
    ref_table: str | None = None
    description: str = ""

    def __post_init__(self) -> None:
        """Validate field definition."""
        if not self.name:
            raise ValueError("Field name cannot be empty")
        if self.is_reference and not self.ref_table:
            raise ValueError(f"ref_table required for reference field '{self.name}'")
        if not self.is_reference and self.ref_table is not None:
            raise ValueError(f"ref_table given for value field '{self.name}'")

    @property
    def is_reference(self) -> bool:
        """Whether the field holds references."""
        return self.kind in (FieldKind.REFERENCE, FieldKind.LIST_REFERENCE)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        result: dict[str, Any] = {"name": self.name, "kind": self.kind.value}
        if self.ref_table is not None:
            result["ref_table"] = self.ref_table
        if self.description:
            result["description"] = self.description
        return result


def field(name: str, *, description: str = "") -> FieldDef:
    """Declare a plain value field."""
    return FieldDef(name=name, description=description)


def ref(name: str, table: str, *, description: str = "") -> FieldDef:
    """Declare a field holding one reference into table."""
    return FieldDef(name=name, kind=FieldKind.REFERENCE, ref_table=table, description=description)


def ref_list(name: str, table: str, *, description: str = "") -> FieldDef:
    """Declare a field holding a list of references into table."""
    return FieldDef(
        name=name, kind=FieldKind.LIST_REFERENCE, ref_table=table, description=description
    )


def self_ref(name: str, *, description: str = "") -> FieldDef:
    """Declare a field referencing another record of the declaring table.

    Example:
        >>> Employees = TableDef("Employees", fields=(field("name"), self_ref("manager")))
    """
    return ref(name, SELF, description=description)


@dataclass(frozen=True)
class TableDef:
    """Definition of a table.

    Attributes:
        name: Table name, used as the store key and in references
        fields: Field definitions
        description: Documentation
    """

    name: str
    fields: tuple[FieldDef, ...] = dataclass_field(default_factory=tuple)
    description: str = ""

    def __post_init__(self) -> None:
        """Validate table definition."""
        if not self.name:
            raise ValueError("Table name cannot be empty")

        names = [f.name for f in self.fields]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate field name in table '{self.name}'")

    def get_field(self, name: str) -> FieldDef | None:
        """Get field by name."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def get_field_names(self) -> list[str]:
        """Get list of field names."""
        return [f.name for f in self.fields]

    def reference_fields(self) -> dict[str, str]:
        """Map each reference field name to its target table."""
        return {f.name: f.ref_table for f in self.fields if f.is_reference and f.ref_table}

    def bind_self(self) -> TableDef:
        """Replace the SELF marker with this table's name."""
        fields = tuple(
            replace(f, ref_table=self.name) if f.ref_table == SELF else f for f in self.fields
        )
        return replace(self, fields=fields)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "fields": [f.to_dict() for f in self.fields],
            "description": self.description,
        }


class Schema:
    """Ordered, immutable set of table definitions.

    with_tables() returns a new Schema; the receiver is left untouched so a
    partially built schema can be shared.

    Example:
        >>> schema = Schema().with_tables(People).with_tables(Tasks)
        >>> schema.table_names
        ['People', 'Tasks']
    """

    def __init__(self, tables: Iterable[TableDef] = ()) -> None:
        """Initialize from already-bound table definitions."""
        self._tables: dict[str, TableDef] = {t.name: t for t in tables}

    def with_tables(self, *table_defs: TableDef) -> Schema:
        """Add tables, binding SELF references.

        Tables may reference tables already in the schema or added in the
        same call.

        Raises:
            SchemaError: On duplicate names or unknown reference targets
        """
        tables = dict(self._tables)
        added: list[TableDef] = []
        for table_def in table_defs:
            if table_def.name in tables:
                raise SchemaError(
                    f"Table '{table_def.name}' already declared", table=table_def.name
                )
            bound = table_def.bind_self()
            tables[bound.name] = bound
            added.append(bound)

        for table_def in added:
            for field_name, target in table_def.reference_fields().items():
                if target not in tables:
                    raise SchemaError(
                        f"Field '{table_def.name}.{field_name}' references unknown table "
                        f"'{target}'",
                        table=table_def.name,
                    )
        return Schema(tables.values())

    @property
    def table_names(self) -> list[str]:
        """Table names in declaration order."""
        return list(self._tables)

    def get_table(self, name: str) -> TableDef | None:
        """Get table definition by name."""
        return self._tables.get(name)

    def require_table(self, name: str) -> TableDef:
        """Get table definition by name or raise SchemaError."""
        table_def = self._tables.get(name)
        if table_def is None:
            raise SchemaError(f"Unknown table '{name}'", table=name)
        return table_def

    def reference_fields(self, name: str) -> dict[str, str]:
        """Reference fields of a table, field name -> target table."""
        return self.require_table(name).reference_fields()

    def __contains__(self, name: object) -> bool:
        return name in self._tables

    def __iter__(self) -> Iterator[TableDef]:
        yield from self._tables.values()

    def __len__(self) -> int:
        return len(self._tables)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"tables": [t.to_dict() for t in self._tables.values()]}

    def to_json(self, indent: int | None = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)

    @property
    def fingerprint(self) -> str:
        """SHA-256 fingerprint of the canonical schema JSON."""
        canonical = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))
        return f"sha256:{hashlib.sha256(canonical.encode('utf-8')).hexdigest()}"


class RefBuilders:
    """Per-table reference constructors.

    Data builders receive an instance and call refs.People("bob") or
    refs["People"]("bob"). What the call produces depends on make:
    SymbolicRef during population, Reference for ad-hoc records.
    """

    def __init__(self, table_names: Iterable[str], make: Callable[[str, str], Any]) -> None:
        self._table_names = frozenset(table_names)
        self._make = make

    def __getitem__(self, table: str) -> Callable[[str], Any]:
        if table not in self._table_names:
            raise SchemaError(f"Unknown table '{table}'", table=table)
        make = self._make
        return lambda key: make(table, key)

    def __getattr__(self, table: str) -> Callable[[str], Any]:
        if table.startswith("_"):
            raise AttributeError(table)
        return self[table]

    def __contains__(self, table: object) -> bool:
        return table in self._table_names
