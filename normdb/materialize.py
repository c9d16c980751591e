"""
Materialization of symbolic population data into a normalized store.

Population data is organized per table as population key -> field data.
Links between entries are written with symbolic references built by
RefBuilders (refs.People("bob")), naming the target by its population key.

Materialization runs two linear passes:
1. Assign ids: every population key gets an id from the id generator.
2. Rewrite and assemble: field data is deep-walked, every SymbolicRef
   becomes a Reference carrying the generated id, and each entry becomes
   a Record(id, label, data).

Invariants:
    - Every SymbolicRef resolves to a population key of its target table
    - Generated ids are unique within each table
    - Table order follows population order
    - Every schema table exists in the store, populated or not
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from .config import Settings, get_settings
from .errors import MaterializationError, SchemaError
from .options import TableOptions
from .schema import RefBuilders, Schema
from .store import Store
from .table import Table
from .validate import validate_or_raise
from .values import Record, Reference, SymbolicRef, ValueKind, classify, map_sequence

logger = logging.getLogger(__name__)

Population = Mapping[str, Mapping[str, Any]]
IdIndex = Mapping[str, Mapping[str, str]]


@dataclass(frozen=True)
class Materialized:
    """Result of materialization.

    Attributes:
        store: The initial store
        id_index: table -> population key -> generated id
    """

    store: Store
    id_index: IdIndex


def population_refs(schema: Schema) -> RefBuilders:
    """Reference builders handed to population data builders."""
    return RefBuilders(schema.table_names, SymbolicRef)


def build_id_index(population: Population, id_gen: Callable[[str], str]) -> dict[str, dict[str, str]]:
    """Assign an id to every population key.

    Raises:
        MaterializationError: If id_gen yields the same id twice in a table
    """
    id_index: dict[str, dict[str, str]] = {}
    for table, entries in population.items():
        ids: dict[str, str] = {}
        seen: dict[str, str] = {}
        for key in entries:
            record_id = id_gen(key)
            if record_id in seen:
                raise MaterializationError(
                    f"Id generator produced duplicate id {record_id!r} for "
                    f"'{table}.{seen[record_id]}' and '{table}.{key}'",
                    table=table,
                    key=key,
                )
            seen[record_id] = key
            ids[key] = record_id
        id_index[table] = ids
    return id_index


def rewrite_refs(value: Any, id_index: IdIndex, *, table: str, key: str) -> Any:
    """Replace every SymbolicRef in value with a concrete Reference.

    Args:
        value: Field data to walk
        id_index: Ids assigned in the first pass
        table: Table of the entry being rewritten (for error context)
        key: Population key of the entry being rewritten (for error context)

    Raises:
        MaterializationError: If a SymbolicRef cannot be resolved
    """
    if isinstance(value, SymbolicRef):
        return _concrete(value, id_index, table, key)

    kind = classify(value)
    if kind is ValueKind.SEQUENCE:
        return map_sequence(value, lambda item: rewrite_refs(item, id_index, table=table, key=key))
    if kind is ValueKind.STRUCTURED:
        return {
            name: rewrite_refs(item, id_index, table=table, key=key)
            for name, item in value.items()
        }
    # References, records and scalars pass through untouched
    return value


def _concrete(symbolic: SymbolicRef, id_index: IdIndex, table: str, key: str) -> Reference:
    target_ids = id_index.get(symbolic.table)
    if target_ids is None or symbolic.key not in target_ids:
        raise MaterializationError(
            f"'{table}.{key}' references unknown population key "
            f"'{symbolic.key}' in table '{symbolic.table}'",
            table=table,
            key=key,
            target_table=symbolic.table,
            target_key=symbolic.key,
        )
    return Reference(symbolic.table, target_ids[symbolic.key])


def materialize(
    schema: Schema,
    population: Population,
    options: TableOptions | None = None,
    settings: Settings | None = None,
) -> Materialized:
    """Build the initial store from schema and population data.

    Args:
        schema: Tables of the model
        population: table -> population key -> field data
        options: Id and label generators
        settings: Store settings (validation toggle)

    Returns:
        Materialized store and id index

    Raises:
        SchemaError: If population names a table outside the schema
        MaterializationError: If a symbolic reference cannot be resolved
        UnknownFieldError: If an entry has an undeclared field (validation on)
        ValidationError: If a reference field is malformed (validation on)
    """
    options = options or TableOptions()
    settings = settings or get_settings()

    for table in population:
        if table not in schema:
            raise SchemaError(f"Population for unknown table '{table}'", table=table)

    id_index = build_id_index(population, options.id)
    for table_name in schema.table_names:
        id_index.setdefault(table_name, {})

    tables: dict[str, Table] = {}
    record_count = 0
    for table_def in schema:
        entries = population.get(table_def.name, {})
        records = []
        for key, data in entries.items():
            if settings.validate_population:
                validate_or_raise(table_def, key, data)
            records.append(
                Record(
                    id=id_index[table_def.name][key],
                    label=options.label(key),
                    data=rewrite_refs(data, id_index, table=table_def.name, key=key),
                )
            )
        tables[table_def.name] = Table.from_records(records)
        record_count += len(records)

    logger.info(
        "Materialized store",
        extra={"tables": len(tables), "records": record_count},
    )
    return Materialized(store=Store(tables), id_index=id_index)
