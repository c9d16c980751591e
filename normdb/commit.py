"""
Commit engine: pure structural updates over a store.

Every operation takes a store, a table name and a payload, and returns a
store. Nothing is mutated; the returned store shares every untouched
table with its input.

Operations:
    add_one / add_many        insert absent ids, skip present ones
    upsert_one / upsert_many  insert, or replace label and data
    set_one / set_many        insert or fully replace
    set_all                   table becomes exactly the given records
    update_one / update_many  selective recursive merge into present ids
    remove_one / remove_many  drop present ids
    remove_all                empty the table

Invariants:
    - When an operation changes nothing, the input store itself is returned
    - set and upsert replace unconditionally; handing back the stored Record
      object is the only no-op
    - Cost is proportional to the touched table, never the whole store
    - Unknown record ids degrade to no-ops; unknown table names raise

Upsert and set are observably identical: payloads are complete records,
so the shallow merge an upsert performs replaces label and data entirely.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from .merge import merge_changes
from .store import Store
from .table import Table
from .values import Record

logger = logging.getLogger(__name__)

_RECORD_FIELDS = frozenset({"label", "data"})


@dataclass(frozen=True)
class Update:
    """Partial change to one record.

    Attributes:
        id: Id of the record to update
        changes: Deep-partial record, keyed by "label" and/or "data"
    """

    id: str
    changes: Mapping[str, Any] = field(default_factory=dict)


def apply_update(record: Record, changes: Mapping[str, Any]) -> Record:
    """Merge changes into a record, returning the same record if nothing changed.

    Raises:
        ValueError: If changes try to change the id or name unknown record fields
    """
    if "id" in changes and changes["id"] != record.id:
        raise ValueError(f"Cannot change id of record {record.id!r} through an update")
    unknown = set(changes) - _RECORD_FIELDS - {"id"}
    if unknown:
        raise ValueError(f"Unknown record fields in update: {sorted(unknown)}")

    current = {"label": record.label, "data": record.data}
    merged = merge_changes(current, {k: v for k, v in changes.items() if k != "id"})
    if merged is current:
        return record
    return Record(record.id, merged["label"], merged["data"])


def _commit(store: Store, table_name: str, op: str, fn: Callable[[Table], Table]) -> Store:
    table = store.table(table_name)
    updated = fn(table)
    if updated is table:
        return store
    logger.debug(
        f"Committed {op} to table {table_name}",
        extra={"table": table_name, "op": op, "before": len(table), "after": len(updated)},
    )
    return store.with_table(table_name, updated)


def add_one(store: Store, table_name: str, record: Record) -> Store:
    """Insert record unless its id is already present."""
    return _commit(store, table_name, "add_one", lambda t: t.with_added([record]))


def add_many(store: Store, table_name: str, records: Iterable[Record]) -> Store:
    """Insert each record whose id is absent; present ids are skipped one by one."""
    records = list(records)
    return _commit(store, table_name, "add_many", lambda t: t.with_added(records))


def upsert_one(store: Store, table_name: str, record: Record) -> Store:
    """Insert record, or replace label and data of the stored one."""
    return _commit(store, table_name, "upsert_one", lambda t: t.with_upserted([record]))


def upsert_many(store: Store, table_name: str, records: Iterable[Record]) -> Store:
    """upsert_one for each record."""
    records = list(records)
    return _commit(store, table_name, "upsert_many", lambda t: t.with_upserted(records))


def set_one(store: Store, table_name: str, record: Record) -> Store:
    """Insert or fully replace record by id."""
    return _commit(store, table_name, "set_one", lambda t: t.with_set([record]))


def set_many(store: Store, table_name: str, records: Iterable[Record]) -> Store:
    """set_one for each record."""
    records = list(records)
    return _commit(store, table_name, "set_many", lambda t: t.with_set(records))


def set_all(store: Store, table_name: str, records: Iterable[Record]) -> Store:
    """Replace the table content and order with exactly records."""
    replacement = Table.empty().with_set(records)

    def _replace(table: Table) -> Table:
        return table if len(table) == 0 and len(replacement) == 0 else replacement

    return _commit(store, table_name, "set_all", _replace)


def update_one(store: Store, table_name: str, update: Update) -> Store:
    """Selectively merge update.changes into the record with update.id.

    A missing id is a no-op.
    """
    return update_many(store, table_name, [update])


def update_many(store: Store, table_name: str, updates: Iterable[Update]) -> Store:
    """Apply updates in order; updates to missing ids are skipped."""
    updates = list(updates)

    def _apply(table: Table) -> Table:
        changed: dict[str, Record] = {}
        for update in updates:
            record = changed.get(update.id) or table.get(update.id)
            if record is None:
                continue
            updated = apply_update(record, update.changes)
            if updated is not record:
                changed[update.id] = updated
        if not changed:
            return table
        return table.with_set(changed.values())

    return _commit(store, table_name, "update_many", _apply)


def remove_one(store: Store, table_name: str, record_id: str) -> Store:
    """Remove the record with record_id if present."""
    return _commit(store, table_name, "remove_one", lambda t: t.with_removed([record_id]))


def remove_many(store: Store, table_name: str, record_ids: Iterable[str]) -> Store:
    """Remove every present record among record_ids."""
    record_ids = list(record_ids)
    return _commit(store, table_name, "remove_many", lambda t: t.with_removed(record_ids))


def remove_all(store: Store, table_name: str) -> Store:
    """Empty the table."""
    return _commit(
        store, table_name, "remove_all", lambda t: t if len(t) == 0 else Table.empty()
    )


class TableCommit:
    """Commit operations bound to one table name.

    Example:
        >>> people = TableCommit("People")
        >>> store = people.add_one(store, record)
    """

    def __init__(self, table_name: str) -> None:
        self.table_name = table_name

    def add_one(self, store: Store, record: Record) -> Store:
        return add_one(store, self.table_name, record)

    def add_many(self, store: Store, records: Iterable[Record]) -> Store:
        return add_many(store, self.table_name, records)

    def upsert_one(self, store: Store, record: Record) -> Store:
        return upsert_one(store, self.table_name, record)

    def upsert_many(self, store: Store, records: Iterable[Record]) -> Store:
        return upsert_many(store, self.table_name, records)

    def set_one(self, store: Store, record: Record) -> Store:
        return set_one(store, self.table_name, record)

    def set_many(self, store: Store, records: Iterable[Record]) -> Store:
        return set_many(store, self.table_name, records)

    def set_all(self, store: Store, records: Iterable[Record]) -> Store:
        return set_all(store, self.table_name, records)

    def update_one(self, store: Store, update: Update) -> Store:
        return update_one(store, self.table_name, update)

    def update_many(self, store: Store, updates: Iterable[Update]) -> Store:
        return update_many(store, self.table_name, updates)

    def remove_one(self, store: Store, record_id: str) -> Store:
        return remove_one(store, self.table_name, record_id)

    def remove_many(self, store: Store, record_ids: Iterable[str]) -> Store:
        return remove_many(store, self.table_name, record_ids)

    def remove_all(self, store: Store) -> Store:
        return remove_all(store, self.table_name)


class Commit(Mapping[str, TableCommit]):
    """Table name -> TableCommit, one instance per table."""

    def __init__(self, table_names: Iterable[str]) -> None:
        self._tables = {name: TableCommit(name) for name in table_names}

    def __getitem__(self, table_name: str) -> TableCommit:
        return self._tables[table_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tables)

    def __len__(self) -> int:
        return len(self._tables)
