"""
Read accessors over a store.

Select holds per-table selectors that remember their last result: called
again with a store whose table is the identical Table object (and equal
arguments), a selector returns the identical result object. Consumers can
therefore detect "nothing changed" with an identity check. Commits on
other tables do not invalidate a table's selectors because the commit
engine shares untouched tables.

DeepSelect exposes the resolver per table; its results are not cached.

Invariants:
    - Selectors are pure functions of the store and their arguments
    - Cache hits return the previous result object itself
    - Cached results are immutable (tuples and read-only mappings)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

from .config import Settings
from .errors import NotFoundError
from .resolve import resolve, resolve_all, resolve_entities, resolve_or_none
from .store import Store
from .table import Table
from .values import Record

logger = logging.getLogger(__name__)


class _TableSelector:
    """Single-entry cache keyed on the identity of the selected Table."""

    def __init__(self, table_name: str, name: str, compute: Callable[..., Any]) -> None:
        self._table_name = table_name
        self._name = name
        self._compute = compute
        self._last_table: Table | None = None
        self._last_args: tuple[Any, ...] | None = None
        self._last_result: Any = None

    def __call__(self, store: Store, *args: Any) -> Any:
        table = store.table(self._table_name)
        if table is self._last_table and args == self._last_args:
            return self._last_result
        logger.debug(f"Selector {self._table_name}.{self._name} recomputed")
        result = self._compute(table, *args)
        self._last_table = table
        self._last_args = args
        self._last_result = result
        return result


def check_record_exists(record: Record | None, table_name: str, record_id: str) -> Record:
    """Return record, or raise NotFoundError when it is None."""
    if record is None:
        raise NotFoundError(
            f'Record with id "{record_id}" not found in table "{table_name}".',
            resource_type=table_name,
            resource_id=record_id,
        )
    return record


class TableSelect:
    """Memoized selectors for one table.

    Example:
        >>> people = TableSelect("People")
        >>> people.all(store) is people.all(store)
        True
    """

    def __init__(self, table_name: str) -> None:
        self.table_name = table_name
        self._by_id = _TableSelector(table_name, "by_id", lambda t, record_id: t.get(record_id))
        self._entities = _TableSelector(table_name, "entities", lambda t: t.entities)
        self._all = _TableSelector(table_name, "all", lambda t: tuple(t.records()))
        self._total = _TableSelector(table_name, "total", len)
        self._ids = _TableSelector(table_name, "ids", lambda t: t.ids)

    def by_id(self, store: Store, record_id: str) -> Record | None:
        """Record with record_id, or None."""
        return self._by_id(store, record_id)

    def by_id_exn(self, store: Store, record_id: str) -> Record:
        """Record with record_id.

        Raises:
            NotFoundError: If the record does not exist
        """
        return check_record_exists(self._by_id(store, record_id), self.table_name, record_id)

    def entities(self, store: Store) -> Mapping[str, Record]:
        """Read-only id -> Record."""
        return self._entities(store)

    def all(self, store: Store) -> tuple[Record, ...]:
        """Records in table order."""
        return self._all(store)

    def total(self, store: Store) -> int:
        """Number of records."""
        return self._total(store)

    def ids(self, store: Store) -> tuple[str, ...]:
        """Record ids in table order."""
        return self._ids(store)


class TableDeepSelect:
    """Resolver entry points for one table."""

    def __init__(self, table_name: str, settings: Settings | None = None) -> None:
        self.table_name = table_name
        self._settings = settings

    def by_id(self, store: Store, record_id: str, depth: int | None = None) -> Any | None:
        """Resolved data of record_id, or None if it does not exist."""
        return resolve_or_none(store, self.table_name, record_id, depth, self._settings)

    def by_id_exn(self, store: Store, record_id: str, depth: int | None = None) -> Any:
        """Resolved data of record_id.

        Raises:
            NotFoundError: If the record does not exist
        """
        return resolve(store, self.table_name, record_id, depth, self._settings)

    def all(self, store: Store, depth: int | None = None) -> list[Any]:
        """Resolved data of every record, in table order."""
        return resolve_all(store, self.table_name, depth, self._settings)

    def entities(self, store: Store, depth: int | None = None) -> dict[str, Any]:
        """id -> resolved data."""
        return resolve_entities(store, self.table_name, depth, self._settings)


class Select(Mapping[str, TableSelect]):
    """Table name -> TableSelect, one instance per table."""

    def __init__(self, table_names: Iterable[str]) -> None:
        self._tables = {name: TableSelect(name) for name in table_names}

    def __getitem__(self, table_name: str) -> TableSelect:
        return self._tables[table_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tables)

    def __len__(self) -> int:
        return len(self._tables)


class DeepSelect(Mapping[str, TableDeepSelect]):
    """Table name -> TableDeepSelect, one instance per table."""

    def __init__(self, table_names: Iterable[str], settings: Settings | None = None) -> None:
        self._tables = {name: TableDeepSelect(name, settings) for name in table_names}

    def __getitem__(self, table_name: str) -> TableDeepSelect:
        return self._tables[table_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tables)

    def __len__(self) -> int:
        return len(self._tables)
