"""
Unit tests for deep resolution.

Tests cover:
- Depth accounting
- Same-table references left unresolved
- Dangling references
- Root lookup failures
- Shapes preserved during resolution
"""

import logging

import pytest

from normdb.commit import remove_one
from normdb.config import Settings
from normdb.errors import NotFoundError, UnresolvedReferenceError
from normdb.resolve import (
    fetch_ref,
    resolve,
    resolve_all,
    resolve_entities,
    resolve_or_none,
    resolve_value,
)
from normdb.values import Record, Reference


class TestFetchRef:
    """Tests for fetch_ref."""

    def test_found(self, store):
        """Existing targets are returned."""
        assert fetch_ref(store, Reference("People", "bob")).data["name"] == "Bob"

    def test_missing_record(self, store):
        """Missing records raise UnresolvedReferenceError."""
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            fetch_ref(store, Reference("People", "nobody"))
        assert exc_info.value.details == {"table": "People", "id": "nobody"}

    def test_missing_table(self, store):
        """Missing tables raise UnresolvedReferenceError."""
        with pytest.raises(UnresolvedReferenceError):
            fetch_ref(store, Reference("Ghosts", "g1"))


class TestResolve:
    """Tests for resolve and its variants."""

    def test_depth_zero_is_raw(self, store):
        """Depth 0 returns the root data untouched."""
        assert resolve(store, "Tasks", "t1", 0) is store["Tasks"].get("t1").data

    def test_depth_one(self, store):
        """Depth 1 follows one hop and no further."""
        task = resolve(store, "Tasks", "t1", 1)
        assert task["assignedTo"] == {"name": "Bob", "age": 25, "favouriteCoWorker": None}
        assert task["project"] == {"name": "Apollo", "lead": Reference("People", "alice")}
        assert task["watchers"][0]["name"] == "Alice"
        assert task["details"] == {"priority": 1, "tags": ["ui"]}

    def test_depth_two(self, store):
        """Depth 2 follows two hops."""
        task = resolve(store, "Tasks", "t1", 2)
        assert task["project"]["lead"]["name"] == "Alice"

    def test_same_table_never_followed(self, store):
        """References into the current table stay unresolved."""
        alice = resolve(store, "People", "alice", 10)
        assert alice["favouriteCoWorker"] == Reference("People", "bob")

    def test_same_table_after_hop(self, store):
        """After a hop the target table becomes the current table."""
        task = resolve(store, "Tasks", "t1", 10)
        assert task["watchers"][0]["favouriteCoWorker"] == Reference("People", "bob")

    def test_default_depth_from_settings(self, store):
        """Without a depth the settings default applies."""
        task = resolve(store, "Tasks", "t1", settings=Settings(default_depth=1))
        assert task["project"]["lead"] == Reference("People", "alice")

    def test_missing_root(self, store):
        """Missing root ids raise NotFoundError."""
        with pytest.raises(NotFoundError) as exc_info:
            resolve(store, "Tasks", "nope")
        assert str(exc_info.value) == 'Record with id "nope" not found in table "Tasks".'

    def test_resolve_or_none(self, store):
        """Missing root ids give None."""
        assert resolve_or_none(store, "Tasks", "nope") is None
        assert resolve_or_none(store, "Tasks", "t1", 0)["title"] == "Design"

    def test_resolve_all(self, store):
        """All records are resolved in table order."""
        people = resolve_all(store, "People", 1)
        assert [p["name"] for p in people] == ["Alice", "Bob"]

    def test_resolve_entities(self, store):
        """Entities are resolved by id."""
        tasks = resolve_entities(store, "Tasks", 1)
        assert tasks["t1"]["assignedTo"]["name"] == "Bob"

    def test_store_untouched(self, store):
        """Resolution never modifies the store."""
        before = store["Tasks"].get("t1").data["assignedTo"]
        resolve(store, "Tasks", "t1", 5)
        assert store["Tasks"].get("t1").data["assignedTo"] is before


class TestDanglingReferences:
    """Tests for references whose target is gone."""

    def test_left_unresolved(self, store):
        """Dangling references are returned as they are."""
        updated = remove_one(store, "People", "bob")
        task = resolve(updated, "Tasks", "t1", 3)
        assert task["assignedTo"] == Reference("People", "bob")
        assert task["watchers"][0]["name"] == "Alice"

    def test_warning_logged(self, store, caplog):
        """Dangling references log a warning."""
        updated = remove_one(store, "People", "bob")
        with caplog.at_level(logging.WARNING, logger="normdb.resolve"):
            resolve(updated, "Tasks", "t1", 3)
        assert "Could not resolve reference" in caplog.text

    def test_warning_disabled(self, store, caplog):
        """Warnings can be switched off."""
        updated = remove_one(store, "People", "bob")
        with caplog.at_level(logging.WARNING, logger="normdb.resolve"):
            resolve(updated, "Tasks", "t1", 3, Settings(warn_unresolved=False))
        assert "Could not resolve reference" not in caplog.text


class TestResolveValue:
    """Tests for resolve_value on arbitrary values."""

    def test_tuple_preserved(self, store):
        """Tuples stay tuples."""
        value = (Reference("People", "bob"), 1)
        result = resolve_value(store, value, "Tasks", 1)
        assert isinstance(result, tuple)
        assert result[0]["name"] == "Bob"

    def test_scalars_identical(self, store):
        """Scalars come back as the same objects."""
        marker = object()
        assert resolve_value(store, {"m": marker}, "Tasks", 1)["m"] is marker

    def test_nested_record_consumes_depth(self, store):
        """Records met inside values are unwrapped with one less depth."""
        nested = Record("x", "x", {"owner": Reference("People", "bob")})
        assert resolve_value(store, {"r": nested}, "Tasks", 0) == {
            "r": {"owner": Reference("People", "bob")}
        }

    def test_negative_depth(self, store):
        """Negative depth returns the value itself."""
        value = {"owner": Reference("People", "bob")}
        assert resolve_value(store, value, "Tasks", -1) is value
