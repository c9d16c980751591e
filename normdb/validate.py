"""
Population entry validation for normdb.

This module checks population entries against their table definition
before materialization:
- Unknown fields, with suggestions for similar names
- Reference fields holding something other than a symbolic reference
  into the declared table

Tables declared without fields are schemaless: any field is accepted and
only the symbolic references themselves are checked by the materializer.

Invariants:
    - Validation errors are deterministic
    - Error messages name the table, the population key and the field
"""

from __future__ import annotations

from collections.abc import Mapping
from difflib import get_close_matches
from typing import Any, List, Tuple

from .errors import UnknownFieldError, ValidationError
from .schema import FieldDef, FieldKind, TableDef
from .values import SymbolicRef


def validate_entry(
    table_def: TableDef,
    key: str,
    data: Any,
) -> Tuple[bool, List[str]]:
    """Validate one population entry against its table.

    Args:
        table_def: Table the entry belongs to
        key: Population key of the entry
        data: Field data of the entry

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    if not table_def.fields:
        return True, []

    if not isinstance(data, Mapping):
        return False, [
            f"Entry '{key}' in table '{table_def.name}' must be a mapping, "
            f"got {type(data).__name__}"
        ]

    errors: List[str] = []

    known_fields = set(table_def.get_field_names())
    for field_name in sorted(set(data) - known_fields):
        suggestions = get_close_matches(field_name, sorted(known_fields), n=3)
        if suggestions:
            errors.append(f"Unknown field '{field_name}'. Did you mean: {suggestions}?")
        else:
            errors.append(f"Unknown field '{field_name}'")

    for field_def in table_def.fields:
        if not field_def.is_reference or field_def.name not in data:
            continue
        error = _validate_reference_value(table_def.name, key, field_def, data[field_def.name])
        if error:
            errors.append(error)

    return len(errors) == 0, errors


def _validate_reference_value(
    table: str,
    key: str,
    field_def: FieldDef,
    value: Any,
) -> str | None:
    """Validate a reference field value.

    Returns error message if invalid, None if valid.
    """
    where = f"'{table}.{key}.{field_def.name}'"
    if value is None:
        return None

    if field_def.kind == FieldKind.REFERENCE:
        return _check_symbolic(where, field_def.ref_table, value)

    if not isinstance(value, (list, tuple)):
        return f"Field {where} must be a list of references, got {type(value).__name__}"
    for i, item in enumerate(value):
        error = _check_symbolic(f"{where}[{i}]", field_def.ref_table, item)
        if error:
            return error
    return None


def _check_symbolic(where: str, target: str | None, value: Any) -> str | None:
    if not isinstance(value, SymbolicRef):
        return f"Field {where} must be a reference to '{target}', got {type(value).__name__}"
    if value.table != target:
        return f"Field {where} must reference table '{target}', got '{value.table}'"
    return None


def validate_or_raise(
    table_def: TableDef,
    key: str,
    data: Any,
) -> None:
    """Validate a population entry and raise if invalid.

    Raises:
        UnknownFieldError: If an unknown field is provided
        ValidationError: If validation fails
    """
    # Unknown fields first for better error messages
    if table_def.fields and isinstance(data, Mapping):
        known_fields = table_def.get_field_names()
        unknown = sorted(set(data) - set(known_fields))
        if unknown:
            field_name = unknown[0]
            suggestions = get_close_matches(field_name, known_fields, n=3)
            raise UnknownFieldError(field_name, table_def.name, suggestions)

    is_valid, errors = validate_entry(table_def, key, data)
    if not is_valid:
        raise ValidationError(
            f"Validation failed for {table_def.name}.{key}: {'; '.join(errors)}",
            field_name=_first_invalid_field(table_def, key, data),
            errors=errors,
        )


def _first_invalid_field(table_def: TableDef, key: str, data: Any) -> str | None:
    """Name of the first reference field with a malformed value, if any."""
    if not isinstance(data, Mapping):
        return None
    for field_def in table_def.fields:
        if not field_def.is_reference or field_def.name not in data:
            continue
        if _validate_reference_value(table_def.name, key, field_def, data[field_def.name]):
            return field_def.name
    return None
