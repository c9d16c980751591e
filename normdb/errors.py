"""
Error types for normdb.

This module defines all exception types raised by the store:
- NormDbError: Base exception
- NotFoundError: Root record or table lookup failed
- UnresolvedReferenceError: Reference target missing during resolution
- MaterializationError: Population data cannot be materialized
- SchemaError: Schema declaration or builder misuse
- ValidationError: Population entry validation failures
- UnknownFieldError: Unknown field in a population entry

Invariants:
    - All errors inherit from NormDbError
    - Errors include context for debugging
    - UnresolvedReferenceError never escapes the resolver
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class NormDbError(Exception):
    """Base exception for all normdb errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "NORMDB_ERROR"
        self.details = details or {}


class NotFoundError(NormDbError):
    """Resource not found.

    Raised when:
    - A root record id is absent (exn accessors, resolution root)
    - A commit targets a table the store does not have
    """

    def __init__(
        self,
        message: str,
        resource_type: str,
        resource_id: str,
    ) -> None:
        super().__init__(
            message,
            code="NOT_FOUND",
            details={
                "resource_type": resource_type,
                "resource_id": resource_id,
            },
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class UnresolvedReferenceError(NormDbError):
    """A reference discovered during deep resolution cannot be followed."""

    def __init__(self, table: str, record_id: str) -> None:
        super().__init__(
            f"Reference to id {record_id!r} in table {table!r} is undefined",
            code="UNRESOLVED_REFERENCE",
            details={"table": table, "id": record_id},
        )
        self.table = table
        self.record_id = record_id


class MaterializationError(NormDbError):
    """Population data cannot be turned into a store.

    Raised when:
    - A symbolic reference names a population key missing from its target table
    - A symbolic reference targets a table outside the schema
    - The id generator yields the same id twice within one table
    """

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        key: Optional[str] = None,
        target_table: Optional[str] = None,
        target_key: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="MATERIALIZATION_ERROR",
            details={
                "table": table,
                "key": key,
                "target_table": target_table,
                "target_key": target_key,
            },
        )
        self.table = table
        self.key = key
        self.target_table = target_table
        self.target_key = target_key


class SchemaError(NormDbError):
    """Schema-related error.

    Raised when:
    - A table name is declared twice
    - A reference field targets an undeclared table
    - The model builder is used out of order
    """

    def __init__(self, message: str, table: Optional[str] = None) -> None:
        super().__init__(message, code="SCHEMA_ERROR", details={"table": table})
        self.table = table


class ValidationError(NormDbError):
    """Population entry validation failed."""

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        errors: Optional[List[str]] = None,
    ) -> None:
        super().__init__(
            message,
            code="VALIDATION_ERROR",
            details={"field": field_name, "errors": errors or []},
        )
        self.field_name = field_name
        self.errors = errors or []


class UnknownFieldError(NormDbError):
    """Unknown field in a population entry.

    Includes suggestions for similar field names.

    Attributes:
        field_name: The unknown field
        table_name: The table being populated
        suggestions: Similar field names
    """

    def __init__(
        self,
        field_name: str,
        table_name: str,
        suggestions: Optional[List[str]] = None,
    ) -> None:
        suggestions = suggestions or []
        msg = f"Unknown field '{field_name}' in table '{table_name}'"
        if suggestions:
            msg += f". Did you mean: {', '.join(suggestions)}?"

        super().__init__(
            msg,
            code="UNKNOWN_FIELD",
            details={
                "field_name": field_name,
                "table_name": table_name,
                "suggestions": suggestions,
            },
        )
        self.field_name = field_name
        self.table_name = table_name
        self.suggestions = suggestions
