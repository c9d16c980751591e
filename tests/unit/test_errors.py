"""
Unit tests for error types.

Tests cover:
- Codes and details
- Messages
- Hierarchy
"""

import pytest

from normdb.errors import (
    MaterializationError,
    NormDbError,
    NotFoundError,
    SchemaError,
    UnknownFieldError,
    UnresolvedReferenceError,
    ValidationError,
)


class TestErrors:
    """Tests for error types."""

    @pytest.mark.parametrize(
        "error, code",
        [
            (NotFoundError("missing", resource_type="People", resource_id="p1"), "NOT_FOUND"),
            (UnresolvedReferenceError("People", "p1"), "UNRESOLVED_REFERENCE"),
            (MaterializationError("broken"), "MATERIALIZATION_ERROR"),
            (SchemaError("bad schema"), "SCHEMA_ERROR"),
            (ValidationError("invalid"), "VALIDATION_ERROR"),
            (UnknownFieldError("nam", "People"), "UNKNOWN_FIELD"),
        ],
    )
    def test_codes(self, error, code):
        """Every error carries its code and is a NormDbError."""
        assert error.code == code
        assert isinstance(error, NormDbError)

    def test_base_defaults(self):
        """Base error has a generic code and empty details."""
        error = NormDbError("boom")
        assert error.code == "NORMDB_ERROR"
        assert error.details == {}
        assert str(error) == "boom"

    def test_not_found_details(self):
        """NotFoundError exposes the resource."""
        error = NotFoundError("missing", resource_type="People", resource_id="p1")
        assert error.details == {"resource_type": "People", "resource_id": "p1"}

    def test_unresolved_message(self):
        """UnresolvedReferenceError names table and id."""
        error = UnresolvedReferenceError("People", "p1")
        assert "p1" in str(error)
        assert "People" in str(error)

    def test_unknown_field_suggestions(self):
        """Suggestions appear in the message."""
        error = UnknownFieldError("nam", "People", ["name"])
        assert str(error) == "Unknown field 'nam' in table 'People'. Did you mean: name?"

    def test_validation_errors_list(self):
        """ValidationError keeps the individual errors."""
        error = ValidationError("invalid", errors=["a", "b"])
        assert error.errors == ["a", "b"]
        assert error.details["errors"] == ["a", "b"]
