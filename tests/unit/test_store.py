"""
Unit tests for Store.

Tests cover:
- Construction and mapping behaviour
- Table lookup errors
- Structural sharing in with_table()
"""

import pytest

from normdb.errors import NotFoundError
from normdb.store import Store
from normdb.table import Table
from normdb.values import Record


class TestStore:
    """Tests for Store."""

    def test_empty(self):
        """Every named table starts empty."""
        store = Store.empty(["People", "Tasks"])
        assert list(store) == ["People", "Tasks"]
        assert len(store["People"]) == 0

    def test_table_unknown(self):
        """Unknown table names raise NotFoundError."""
        store = Store.empty(["People"])
        with pytest.raises(NotFoundError) as exc_info:
            store.table("Ghosts")
        assert exc_info.value.resource_type == "table"
        assert exc_info.value.resource_id == "Ghosts"

    def test_with_table_shares_untouched(self):
        """Untouched tables are the same objects in the new store."""
        store = Store.empty(["People", "Tasks"])
        people = Table.from_records([Record("p1", "alice", {})])
        updated = store.with_table("People", people)
        assert updated is not store
        assert updated["People"] is people
        assert updated["Tasks"] is store["Tasks"]
        assert len(store["People"]) == 0

    def test_with_same_table_returns_self(self):
        """Replacing a table by itself returns the same store."""
        store = Store.empty(["People"])
        assert store.with_table("People", store["People"]) is store

    def test_not_assignable(self):
        """Stores do not support item assignment."""
        store = Store.empty(["People"])
        with pytest.raises(TypeError):
            store["People"] = Table.empty()

    def test_repr(self):
        """Repr shows table sizes."""
        assert repr(Store.empty(["People"])) == "Store(People=0)"
