"""
Unit tests for ad-hoc record construction.

Tests cover:
- Default and explicit ids and labels
- Reference builders with concrete ids
- Per-table constructors
"""

import pytest

from normdb.config import Settings
from normdb.create import Create, create_record, record_refs
from normdb.errors import SchemaError
from normdb.values import Reference


class TestCreateRecord:
    """Tests for create_record."""

    def test_builder_gets_refs(self):
        """References built inside the builder are concrete."""
        record = create_record(
            "Tasks",
            lambda refs: {"owner": refs.People("p1")},
            record_refs(["People", "Tasks"]),
            id="t9",
        )
        assert record.data == {"owner": Reference("People", "p1")}

    def test_default_label(self):
        """Default labels follow the template."""
        record = create_record("Tasks", lambda refs: {}, record_refs(["Tasks"]), id="t9")
        assert record.label == "Tasks_t9"

    def test_label_template_setting(self):
        """The template comes from settings."""
        record = create_record(
            "Tasks",
            lambda refs: {},
            record_refs(["Tasks"]),
            id="t9",
            settings=Settings(label_template="{id}@{table}"),
        )
        assert record.label == "t9@Tasks"

    def test_explicit_label(self):
        """Explicit labels win."""
        record = create_record("Tasks", lambda refs: {}, record_refs(["Tasks"]), label="mine")
        assert record.label == "mine"

    def test_id_generator_gets_table(self):
        """Generated ids come from the generator, keyed by table."""
        seen = []

        def gen(key):
            seen.append(key)
            return f"gen-{len(seen)}"

        record = create_record("Tasks", lambda refs: None, record_refs(["Tasks"]), id_gen=gen)
        assert record.id == "gen-1"
        assert seen == ["Tasks"]

    def test_random_ids_differ(self):
        """Default ids are unique."""
        refs = record_refs(["Tasks"])
        first = create_record("Tasks", lambda r: {}, refs)
        second = create_record("Tasks", lambda r: {}, refs)
        assert first.id != second.id

    def test_unknown_table_ref(self):
        """Referencing an unknown table raises SchemaError."""
        with pytest.raises(SchemaError):
            create_record("Tasks", lambda refs: refs.Ghosts("g1"), record_refs(["Tasks"]))


class TestCreate:
    """Tests for Create."""

    def test_per_table(self):
        """One constructor per table."""
        create = Create(["People", "Tasks"], lambda key: "fixed")
        record = create["Tasks"](lambda refs: {"owner": refs.People("p1")})
        assert record.id == "fixed"
        assert record.label == "Tasks_fixed"
        assert list(create) == ["People", "Tasks"]

    def test_model_create(self, model):
        """Model constructors use the model's id generator."""
        record = model.create["Tasks"](lambda refs: {"title": "Review"})
        assert record.id == "Tasks"
        assert record.label == "Tasks_Tasks"
