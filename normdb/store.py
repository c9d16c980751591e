"""
Normalized store snapshot: table name -> Table.

A Store is the value passed between every operation. It is created once
by the materializer and every later state is derived from it through the
commit engine.

Invariants:
    - A Store is never mutated after construction
    - with_table() shares every untouched Table with the source Store
    - with_table() returns the same Store when the Table is unchanged
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from .errors import NotFoundError
from .table import Table


class Store(Mapping[str, Table]):
    """Immutable mapping of table name to Table.

    Example:
        >>> store = Store.empty(["People", "Tasks"])
        >>> len(store["People"])
        0
    """

    __slots__ = ("_tables",)

    def __init__(self, tables: Mapping[str, Table]) -> None:
        self._tables = MappingProxyType(dict(tables))

    @classmethod
    def empty(cls, table_names: Iterable[str]) -> Store:
        """Create a store with one empty table per name."""
        return cls({name: Table.empty() for name in table_names})

    def __getitem__(self, table_name: str) -> Table:
        return self._tables[table_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tables)

    def __len__(self) -> int:
        return len(self._tables)

    def __repr__(self) -> str:
        sizes = ", ".join(f"{name}={len(table)}" for name, table in self._tables.items())
        return f"Store({sizes})"

    def table(self, table_name: str) -> Table:
        """Get a table by name.

        Raises:
            NotFoundError: If the store has no such table
        """
        table = self._tables.get(table_name)
        if table is None:
            raise NotFoundError(
                f"Table '{table_name}' not found in store",
                resource_type="table",
                resource_id=table_name,
            )
        return table

    def with_table(self, table_name: str, table: Table) -> Store:
        """Return a store whose table_name maps to table.

        Returns self when table is the Table already stored.
        """
        if self._tables.get(table_name) is table:
            return self
        tables = dict(self._tables)
        tables[table_name] = table
        return Store(tables)
