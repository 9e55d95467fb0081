from __future__ import annotations

from enum import Enum
from typing import Any

"""Collection kinds and record typing.

A record is a flat ``dict`` from column name to scalar value. The store injects
a synthetic ``rowId`` key; every other key comes from the uploaded file, so the
shape is only known at runtime.
"""

__all__ = [
    "CollectionKind",
    "Record",
    "ROW_ID_COLUMN",
]

ROW_ID_COLUMN = "rowId"

Record = dict[str, Any]


class CollectionKind(Enum):
    """The three named datasets held by a session.

    WORKERS is special: its ``Skills`` column feeds the worker skill index used
    when validating the other two kinds.
    """
    CLIENTS = "clients"
    WORKERS = "workers"
    TASKS = "tasks"

    @classmethod
    def parse(cls, value: str | CollectionKind) -> CollectionKind:
        """Resolve a kind from its name (case-insensitive).

        Raises:
            ValueError: if the name is not one of clients/workers/tasks
        """
        if isinstance(value, CollectionKind):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(k.value for k in cls)
            raise ValueError(f"unknown collection kind '{value}' (expected one of: {choices})") from None
