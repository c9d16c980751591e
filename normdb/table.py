"""
Ordered, unique-keyed record collection for one table.

A Table is an immutable pair of:
- ids: tuple of record ids, defining listing order
- entities: mapping of record id -> Record

Every mutating-looking method returns a new Table, or the same Table
object when the operation changes nothing. Callers rely on that identity
to detect "no change" without deep comparison.

Invariants:
    - ids contains no duplicates
    - set(ids) == set(entities)
    - A Table is never mutated after construction
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any, Callable

from .values import Record


class Table:
    """Immutable ordered collection of records keyed by id.

    Example:
        >>> table = Table.empty().with_added([Record("a1", "alice", {"name": "Alice"})])
        >>> table.ids
        ('a1',)
    """

    __slots__ = ("_ids", "_entities")

    def __init__(self, ids: tuple[str, ...], entities: Mapping[str, Record]) -> None:
        """Wrap already-consistent ids and entities.

        Use empty() or from_records() instead of calling this directly.
        """
        self._ids = ids
        self._entities = MappingProxyType(dict(entities))

    @classmethod
    def empty(cls) -> Table:
        """Create a table with no records."""
        return cls((), {})

    @classmethod
    def from_records(cls, records: Iterable[Record]) -> Table:
        """Build a table from records; the first record wins on duplicate ids."""
        return cls.empty().with_added(records)

    @property
    def ids(self) -> tuple[str, ...]:
        """Record ids in listing order."""
        return self._ids

    @property
    def entities(self) -> Mapping[str, Record]:
        """Read-only view of id -> Record."""
        return self._entities

    def get(self, record_id: str) -> Record | None:
        """Get a record by id, or None."""
        return self._entities.get(record_id)

    def records(self) -> list[Record]:
        """All records in listing order."""
        return [self._entities[record_id] for record_id in self._ids]

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._entities

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Table):
            return NotImplemented
        return self._ids == other._ids and dict(self._entities) == dict(other._entities)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Table(ids={list(self._ids)!r})"

    def with_added(self, records: Iterable[Record]) -> Table:
        """Insert records whose id is absent; present ids are skipped."""
        ids = list(self._ids)
        entities = dict(self._entities)
        for record in records:
            if record.id in entities:
                continue
            ids.append(record.id)
            entities[record.id] = record
        if len(ids) == len(self._ids):
            return self
        return Table(tuple(ids), entities)

    def with_set(self, records: Iterable[Record]) -> Table:
        """Insert or fully replace records by id.

        Replacement is unconditional: only passing the stored Record object
        itself leaves the table unchanged. Replaced records keep their
        position; the last record wins on duplicate ids within the batch.
        """
        return self._replace_each(records, lambda existing, record: record)

    def with_upserted(self, records: Iterable[Record]) -> Table:
        """Insert absent records; shallow-merge label and data into present ones.

        Records are always complete, so the merge is a full replacement of
        label and data. Records are looked up by id, so the supplied record
        already carries the stored id and replaces the stored one as is.
        """
        return self._replace_each(records, lambda existing, record: record)

    def with_removed(self, record_ids: Iterable[str]) -> Table:
        """Remove records by id; absent ids are ignored."""
        doomed = {record_id for record_id in record_ids if record_id in self._entities}
        if not doomed:
            return self
        ids = tuple(record_id for record_id in self._ids if record_id not in doomed)
        entities = {record_id: self._entities[record_id] for record_id in ids}
        return Table(ids, entities)

    def _replace_each(
        self,
        records: Iterable[Record],
        combine: Callable[[Record, Record], Record],
    ) -> Table:
        ids = list(self._ids)
        entities = dict(self._entities)
        changed = False
        for record in records:
            existing = entities.get(record.id)
            if existing is None:
                ids.append(record.id)
                entities[record.id] = record
                changed = True
                continue
            replacement = combine(existing, record)
            if replacement is existing:
                continue
            entities[record.id] = replacement
            changed = True
        if not changed:
            return self
        return Table(tuple(ids), entities)


def table_from_dict(payload: Mapping[str, Any]) -> Table:
    """Build a table from {"ids": [...], "entities": {id: Record}}.

    Raises:
        ValueError: If ids and entity keys disagree
    """
    ids = tuple(payload["ids"])
    entities = payload["entities"]
    if len(set(ids)) != len(ids):
        raise ValueError("Table ids contain duplicates")
    if set(ids) != set(entities):
        raise ValueError("Table ids do not match entity keys")
    return Table(ids, entities)
