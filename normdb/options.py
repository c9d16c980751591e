"""
Id and label generation options.

Both generators receive the population key of the entry being
materialized. Ad-hoc records built through a model's create handle go
through the same id generator, keyed by the table name.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Callable

IdGenerator = Callable[[str], str]
LabelGenerator = Callable[[str], str]


def random_id(key: str) -> str:
    """Globally unique random id; the key is ignored."""
    return str(uuid.uuid4())


def key_label(key: str) -> str:
    """Use the population key as the label."""
    return key


@dataclass(frozen=True)
class TableOptions:
    """Generators used when materializing a model.

    Attributes:
        id: Population key -> record id
        label: Population key -> record label
    """

    id: IdGenerator = random_id
    label: LabelGenerator = key_label
