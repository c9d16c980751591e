"""
Model builder: schema declaration, population and handles.

Tables is an immutable, staged builder:

    init -> add_tables() -> [add_tables() ...] -> [populate()] -> done()

Example:
    >>> model = (
    ...     Tables()
    ...     .add_tables(
    ...         TableDef("People", fields=(field("name"), self_ref("favouriteCoWorker"))),
    ...     )
    ...     .add_tables(
    ...         TableDef("Tasks", fields=(field("title"), ref("assignedTo", "People"))),
    ...     )
    ...     .populate(lambda refs: {
    ...         "People": {
    ...             "alice": {"name": "Alice", "favouriteCoWorker": refs.People("bob")},
    ...             "bob": {"name": "Bob", "favouriteCoWorker": None},
    ...         },
    ...         "Tasks": {"t1": {"title": "Design", "assignedTo": refs.People("alice")}},
    ...     })
    ...     .done()
    ... )
    >>> alice_id = model.id_index["People"]["alice"]
    >>> model.deep_select["Tasks"].all(model.store)[0]["assignedTo"]["name"]
    'Alice'
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from .accessors import DeepSelect, Select
from .commit import Commit
from .config import Settings, get_settings
from .create import Create
from .errors import SchemaError
from .materialize import IdIndex, Population, materialize, population_refs
from .options import TableOptions
from .schema import RefBuilders, Schema, TableDef
from .store import Store


class Stage(Enum):
    """Builder stage."""

    INIT = "init"
    TABLES_ADDED = "tables_added"
    POPULATED = "populated"


@dataclass(frozen=True)
class Model:
    """Handles of a built model.

    Attributes:
        schema: Declared tables
        store: Initial store
        id_index: table -> population key -> id
        create: Ad-hoc record constructors per table
        commit: Commit operations per table
        select: Memoized selectors per table
        deep_select: Resolvers per table
        options: Id and label generators
        settings: Settings the model was built with
    """

    schema: Schema
    store: Store
    id_index: IdIndex
    create: Create
    commit: Commit
    select: Select
    deep_select: DeepSelect
    options: TableOptions
    settings: Settings


class Tables:
    """Staged model builder. Every call returns a new builder."""

    def __init__(
        self,
        options: TableOptions | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._options = options or TableOptions()
        self._settings = settings
        self._schema = Schema()
        self._population: Population = {}
        self._stage = Stage.INIT

    @property
    def stage(self) -> Stage:
        """Current builder stage."""
        return self._stage

    @property
    def schema(self) -> Schema:
        """Tables declared so far."""
        return self._schema

    def _next(self, schema: Schema, population: Population, stage: Stage) -> Tables:
        builder = Tables(self._options, self._settings)
        builder._schema = schema
        builder._population = population
        builder._stage = stage
        return builder

    def add_tables(self, *table_defs: TableDef) -> Tables:
        """Declare tables.

        Raises:
            SchemaError: After populate, or on an invalid declaration
        """
        if self._stage is Stage.POPULATED:
            raise SchemaError("Cannot add tables after populate()")
        if not table_defs:
            raise SchemaError("add_tables() needs at least one table")
        return self._next(self._schema.with_tables(*table_defs), {}, Stage.TABLES_ADDED)

    def populate(self, builder: Callable[[RefBuilders], Population]) -> Tables:
        """Provide initial data.

        Args:
            builder: refs -> {table: {population_key: field_data}}

        Raises:
            SchemaError: Before add_tables() or when called twice
        """
        if self._stage is not Stage.TABLES_ADDED:
            raise SchemaError(f"Cannot populate at stage '{self._stage.value}'")
        population = builder(population_refs(self._schema))
        return self._next(self._schema, dict(population), Stage.POPULATED)

    def done(self) -> Model:
        """Materialize and return the model handles.

        Raises:
            SchemaError: Before add_tables()
            MaterializationError: If population references cannot be resolved
        """
        if self._stage is Stage.INIT:
            raise SchemaError("Cannot build a model without tables")

        settings = self._settings or get_settings()
        result = materialize(self._schema, self._population, self._options, settings)
        names = self._schema.table_names
        return Model(
            schema=self._schema,
            store=result.store,
            id_index=result.id_index,
            create=Create(names, self._options.id, settings),
            commit=Commit(names),
            select=Select(names),
            deep_select=DeepSelect(names, settings),
            options=self._options,
            settings=settings,
        )


def build_model(
    *table_defs: TableDef,
    population: Callable[[RefBuilders], Population] | None = None,
    options: TableOptions | None = None,
    settings: Settings | None = None,
) -> Model:
    """Declare, populate and materialize in one call."""
    builder = Tables(options, settings).add_tables(*table_defs)
    if population is not None:
        builder = builder.populate(population)
    return builder.done()
