"""
Unit tests for the selective recursive merge.

Tests cover:
- Recursion into nested field-sets
- Atomic replacement of every other kind
- Identity when nothing changes
- Purity
"""

import re
from datetime import date

from normdb.merge import merge_changes
from normdb.values import Reference


class TestMergeChanges:
    """Tests for merge_changes."""

    def test_nested_mapping_patched(self):
        """Nested mappings are merged key by key."""
        original = {"details": {"priority": 1, "tags": ["ui"]}, "title": "Design"}
        merged = merge_changes(original, {"details": {"priority": 2}})
        assert merged == {"details": {"priority": 2, "tags": ["ui"]}, "title": "Design"}

    def test_lists_replaced(self):
        """Lists are replaced wholesale, never merged."""
        merged = merge_changes({"tags": ["a", "b"]}, {"tags": ["c"]})
        assert merged == {"tags": ["c"]}

    def test_reference_replaced(self):
        """References are atomic values."""
        merged = merge_changes(
            {"owner": Reference("People", "p1")}, {"owner": Reference("People", "p2")}
        )
        assert merged["owner"] == Reference("People", "p2")

    def test_mapping_over_scalar(self):
        """A nested change over a non-mapping starts from an empty mapping."""
        merged = merge_changes({"details": None}, {"details": {"priority": 1}})
        assert merged == {"details": {"priority": 1}}

    def test_new_key(self):
        """Keys absent from the original are added."""
        assert merge_changes({"a": 1}, {"b": 2}) == {"a": 1, "b": 2}

    def test_atomic_scalars(self):
        """Dates, patterns and callables are assigned as they are."""
        pattern = re.compile("x")
        merged = merge_changes({"due": None}, {"due": date(2024, 1, 1), "match": pattern, "fn": len})
        assert merged["due"] == date(2024, 1, 1)
        assert merged["match"] is pattern
        assert merged["fn"] is len

    def test_unchanged_returns_original(self):
        """Equal leaves leave the original object in place."""
        original = {"title": "Design", "details": {"priority": 1}, "owner": Reference("People", "p1")}
        merged = merge_changes(
            original,
            {"title": "Design", "details": {"priority": 1}, "owner": Reference("People", "p1")},
        )
        assert merged is original

    def test_empty_changes(self):
        """Empty changes return the original."""
        original = {"a": 1}
        assert merge_changes(original, {}) is original

    def test_bool_and_int_differ(self):
        """Leaves of different types are a change."""
        merged = merge_changes({"flag": 1}, {"flag": True})
        assert merged["flag"] is True

    def test_inputs_untouched(self):
        """The merge never mutates its inputs."""
        original = {"details": {"priority": 1}}
        changes = {"details": {"priority": 2}}
        merge_changes(original, changes)
        assert original == {"details": {"priority": 1}}
        assert changes == {"details": {"priority": 2}}

    def test_untouched_branches_shared(self):
        """Unchanged nested mappings keep their identity."""
        original = {"a": {"x": 1}, "b": {"y": 2}}
        merged = merge_changes(original, {"b": {"y": 3}})
        assert merged["a"] is original["a"]
