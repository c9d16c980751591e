"""
normdb - In-process normalized relational store.

This package keeps related records in flat tables linked by references:
- Schema types (TableDef, FieldDef, field, ref, ref_list, self_ref)
- Model builder (Tables, build_model) materializing population data
- Commit engine producing new stores without touching the old ones
- Memoized selectors and a depth-bounded deep resolver
- Wire shape for moving stores in and out of JSON

Example:
    >>> from normdb import Tables, TableDef, field, ref, self_ref
    >>>
    >>> model = (
    ...     Tables()
    ...     .add_tables(TableDef("People", fields=(field("name"), self_ref("buddy"))))
    ...     .add_tables(TableDef("Tasks", fields=(field("title"), ref("assignedTo", "People"))))
    ...     .populate(lambda refs: {
    ...         "People": {"alice": {"name": "Alice", "buddy": None}},
    ...         "Tasks": {"t1": {"title": "Design", "assignedTo": refs.People("alice")}},
    ...     })
    ...     .done()
    ... )
    >>> task = model.create["Tasks"](
    ...     lambda refs: {"title": "Review", "assignedTo": refs.People(model.id_index["People"]["alice"])}
    ... )
    >>> store = model.commit["Tasks"].add_one(model.store, task)
    >>> model.deep_select["Tasks"].by_id_exn(store, task.id)["assignedTo"]["name"]
    'Alice'

Invariants:
    - Stores are never mutated; commits return new stores
    - A commit that changes nothing returns the input store itself
    - Deep resolution never fails on a dangling reference

Version: 1.0.0
"""

__version__ = "1.0.0"

from .accessors import DeepSelect, Select, TableDeepSelect, TableSelect
from .commit import (
    Commit,
    TableCommit,
    Update,
    add_many,
    add_one,
    remove_all,
    remove_many,
    remove_one,
    set_all,
    set_many,
    set_one,
    update_many,
    update_one,
    upsert_many,
    upsert_one,
)
from .config import Settings, get_settings, reset_settings
from .create import Create, create_record
from .errors import (
    MaterializationError,
    NormDbError,
    NotFoundError,
    SchemaError,
    UnknownFieldError,
    UnresolvedReferenceError,
    ValidationError,
)
from .materialize import Materialized, materialize
from .merge import merge_changes
from .model import Model, Tables, build_model
from .options import TableOptions, key_label, random_id
from .resolve import resolve, resolve_all, resolve_entities, resolve_or_none
from .schema import FieldDef, FieldKind, Schema, TableDef, field, ref, ref_list, self_ref
from .store import Store
from .table import Table
from .values import Record, Reference, SymbolicRef, ValueKind, classify
from .wire import dumps, from_wire, loads, to_wire

__all__ = [
    # Version
    "__version__",
    # Values
    "Record",
    "Reference",
    "SymbolicRef",
    "ValueKind",
    "classify",
    # Containers
    "Table",
    "Store",
    # Schema types
    "TableDef",
    "FieldDef",
    "FieldKind",
    "Schema",
    "field",
    "ref",
    "ref_list",
    "self_ref",
    # Model
    "Tables",
    "Model",
    "build_model",
    "TableOptions",
    "random_id",
    "key_label",
    "materialize",
    "Materialized",
    # Create
    "Create",
    "create_record",
    # Commit
    "Commit",
    "TableCommit",
    "Update",
    "add_one",
    "add_many",
    "upsert_one",
    "upsert_many",
    "set_one",
    "set_many",
    "set_all",
    "update_one",
    "update_many",
    "remove_one",
    "remove_many",
    "remove_all",
    "merge_changes",
    # Accessors
    "Select",
    "TableSelect",
    "DeepSelect",
    "TableDeepSelect",
    "resolve",
    "resolve_or_none",
    "resolve_all",
    "resolve_entities",
    # Wire
    "to_wire",
    "from_wire",
    "dumps",
    "loads",
    # Config
    "Settings",
    "get_settings",
    "reset_settings",
    # Errors
    "NormDbError",
    "NotFoundError",
    "UnresolvedReferenceError",
    "MaterializationError",
    "SchemaError",
    "ValidationError",
    "UnknownFieldError",
]
