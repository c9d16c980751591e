"""
Ad-hoc record construction.

Builds standalone records, not yet attached to any store, for use with the
commit engine. The data builder receives reference constructors that take
a concrete record id (not a population key):

    >>> task = create["Tasks"](
    ...     lambda refs: {"title": "Review PR", "assignedTo": refs.People(alice_id)},
    ...     label="review",
    ... )

Default ids come from the same id generator the model materialized with,
keyed by the table name; default labels follow Settings.label_template.
Nothing checks a default id against ids already in a store: add_one on a
colliding id is a no-op, set_one replaces.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

from .config import Settings, get_settings
from .options import IdGenerator, random_id
from .schema import RefBuilders
from .values import Record, Reference

DataBuilder = Callable[[RefBuilders], Any]


def record_refs(table_names: Iterable[str]) -> RefBuilders:
    """Reference builders producing concrete References."""
    return RefBuilders(table_names, Reference)


def create_record(
    table: str,
    builder: DataBuilder,
    refs: RefBuilders,
    *,
    id: str | None = None,
    label: str | None = None,
    id_gen: IdGenerator = random_id,
    settings: Settings | None = None,
) -> Record:
    """Build a record for table.

    Args:
        table: Table the record is meant for
        builder: refs -> record data
        refs: Reference builders passed to builder
        id: Explicit id (generated when None)
        label: Explicit label (from settings template when None)
        id_gen: Generator used when id is None
        settings: Settings providing the label template

    Returns:
        A standalone Record
    """
    data = builder(refs)
    record_id = id if id is not None else id_gen(table)
    if label is None:
        label = (settings or get_settings()).default_label(table, record_id)
    return Record(id=record_id, label=label, data=data)


class TableCreate:
    """Record constructor bound to one table."""

    def __init__(
        self,
        table_name: str,
        refs: RefBuilders,
        id_gen: IdGenerator = random_id,
        settings: Settings | None = None,
    ) -> None:
        self.table_name = table_name
        self._refs = refs
        self._id_gen = id_gen
        self._settings = settings

    def __call__(
        self,
        builder: DataBuilder,
        *,
        id: str | None = None,
        label: str | None = None,
    ) -> Record:
        return create_record(
            self.table_name,
            builder,
            self._refs,
            id=id,
            label=label,
            id_gen=self._id_gen,
            settings=self._settings,
        )


class Create(Mapping[str, TableCreate]):
    """Table name -> TableCreate, one instance per table."""

    def __init__(
        self,
        table_names: Iterable[str],
        id_gen: IdGenerator = random_id,
        settings: Settings | None = None,
    ) -> None:
        names = list(table_names)
        refs = record_refs(names)
        self._tables = {name: TableCreate(name, refs, id_gen, settings) for name in names}

    def __getitem__(self, table_name: str) -> TableCreate:
        return self._tables[table_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tables)

    def __len__(self) -> int:
        return len(self._tables)
