"""
Shared fixtures for normdb tests.

The sample model has three tables:
- People: name, age and a self reference to a favourite co-worker
- Projects: name and a lead person
- Tasks: title, nested details, an assignee, a project and watchers

Population keys double as record ids so assertions can name records
directly.
"""

import pytest

from normdb.config import Settings, reset_settings
from normdb.model import Tables
from normdb.options import TableOptions
from normdb.schema import TableDef, field, ref, ref_list, self_ref

PEOPLE = TableDef(
    "People",
    fields=(field("name"), field("age"), self_ref("favouriteCoWorker")),
)
PROJECTS = TableDef(
    "Projects",
    fields=(field("name"), ref("lead", "People")),
)
TASKS = TableDef(
    "Tasks",
    fields=(
        field("title"),
        field("details"),
        ref("assignedTo", "People"),
        ref("project", "Projects"),
        ref_list("watchers", "People"),
    ),
)


def key_ids(key: str) -> str:
    """Use the population key as the record id."""
    return key


def sample_population(refs):
    """Population for the sample model."""
    return {
        "People": {
            "alice": {"name": "Alice", "age": 30, "favouriteCoWorker": refs.People("bob")},
            "bob": {"name": "Bob", "age": 25, "favouriteCoWorker": None},
        },
        "Projects": {
            "apollo": {"name": "Apollo", "lead": refs.People("alice")},
        },
        "Tasks": {
            "t1": {
                "title": "Design",
                "details": {"priority": 1, "tags": ["ui"]},
                "assignedTo": refs.People("bob"),
                "project": refs.Projects("apollo"),
                "watchers": [refs.People("alice")],
            },
        },
    }


@pytest.fixture(autouse=True)
def fresh_settings():
    """Isolate tests from cached process-wide settings."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings():
    """Settings with library defaults."""
    return Settings()


@pytest.fixture
def model(settings):
    """Sample model with key-derived ids."""
    return (
        Tables(TableOptions(id=key_ids), settings)
        .add_tables(PEOPLE)
        .add_tables(PROJECTS, TASKS)
        .populate(sample_population)
        .done()
    )


@pytest.fixture
def store(model):
    """Initial store of the sample model."""
    return model.store
