from __future__ import annotations

import math
import re
from collections.abc import Iterable, Sequence
from typing import Any, Literal

from ..models.collection import ROW_ID_COLUMN, Record
from ..models.finding import (
    DUPLICATE_ID,
    MISSING_SKILL_PREFIX,
    MISSING_VALUE,
    PRIORITY_RANGE,
    Finding,
)

"""Validation engine.

Runs the fixed rule set over one collection and returns findings. Pure: no
store access, no logging side effects. The worker skill index is rebuilt from
the worker collection on every call so edits to workers are picked up.

Rules (per cell, in order, rowId excluded):
1. Missing value        - None / NaN / "" (rules 3 and 4 skip a missing cell)
2. Duplicate ID         - column name contains "id" (case-insensitive)
3. Priority range       - column "PriorityLevel" must parse to 1..5
4. Skill coverage       - column "RequiredSkills" tokens must exist in workers
"""

__all__ = [
    "IdScope",
    "PRIORITY_COLUMN",
    "REQUIRED_SKILLS_COLUMN",
    "SKILLS_COLUMN",
    "build_worker_skill_index",
    "is_missing",
    "normalize_skills",
    "parse_leading_int",
    "validate",
]

PRIORITY_COLUMN = "PriorityLevel"
REQUIRED_SKILLS_COLUMN = "RequiredSkills"
SKILLS_COLUMN = "Skills"
PRIORITY_MIN = 1
PRIORITY_MAX = 5

IdScope = Literal["shared", "column"]

_SKILL_SPLIT = re.compile(r"[,\s]+")
_LEADING_INT = re.compile(r"^[+-]?\d+", re.ASCII)


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, float):
        return math.isnan(value)
    return False


def normalize_skills(value: Any) -> list[str]:
    """Split a skills cell into lower-case tokens.

    Commas and whitespace both separate tokens; empty tokens are dropped.
    Missing values yield an empty list.
    """
    if is_missing(value):
        return []
    tokens = _SKILL_SPLIT.split(str(value).lower())
    return [t.strip() for t in tokens if t.strip()]


def build_worker_skill_index(workers: Iterable[Record]) -> set[str]:
    index: set[str] = set()
    for worker in workers:
        index.update(normalize_skills(worker.get(SKILLS_COLUMN)))
    return index


def parse_leading_int(value: Any) -> int | None:
    """Parse the leading integer of a value ("4" -> 4, "2.7" -> 2, "x" -> None).

    Integral floats coming from spreadsheets (3.0) parse as their integer.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return int(value)
    m = _LEADING_INT.match(str(value).strip())
    if m is None:
        return None
    return int(m.group(0))


def _is_id_column(column: str) -> bool:
    return "id" in column.lower()


def _seen_key(value: Any) -> Any:
    # Blank cells (None, NaN, "") all share one key; NaN never equals itself
    if is_missing(value):
        return None
    # Unhashable cells (rare, e.g. lists from a custom reader) are compared by repr
    try:
        hash(value)
    except TypeError:
        return repr(value)
    return value


def validate(
    target: Sequence[Record],
    workers: Iterable[Record],
    *,
    id_scope: IdScope = "shared",
) -> list[Finding]:
    """Validate every record of ``target`` and return findings in row-major order.

    Parameters
    ----------
    target: records to validate; ``Finding.row_id`` is the position in this list
    workers: worker records used to build the skill index
    id_scope: "shared" tracks one seen-set across all id-like columns (a value
        in ClientID that reappears in TaskID is a duplicate); "column" keeps a
        separate seen-set per column name

    Returns
    -------
    list[Finding]
    """
    if id_scope not in ("shared", "column"):
        raise ValueError(f"invalid id_scope: {id_scope!r}")

    skill_index = build_worker_skill_index(workers)
    shared_seen: set[Any] = set()
    seen_by_column: dict[str, set[Any]] = {}
    findings: list[Finding] = []

    for idx, record in enumerate(target):
        for column, value in record.items():
            if column == ROW_ID_COLUMN:
                continue

            missing = is_missing(value)
            if missing:
                findings.append(Finding(idx, column, MISSING_VALUE))

            if _is_id_column(column):
                seen = shared_seen if id_scope == "shared" else seen_by_column.setdefault(column, set())
                key = _seen_key(value)
                if key in seen:
                    findings.append(Finding(idx, column, DUPLICATE_ID))
                else:
                    seen.add(key)

            # Value rules only apply to cells that hold something
            if missing:
                continue

            if column == PRIORITY_COLUMN:
                level = parse_leading_int(value)
                if level is None or level < PRIORITY_MIN or level > PRIORITY_MAX:
                    findings.append(Finding(idx, column, PRIORITY_RANGE))

            if column == REQUIRED_SKILLS_COLUMN:
                for skill in normalize_skills(value):
                    if skill not in skill_index:
                        findings.append(Finding(idx, column, f"{MISSING_SKILL_PREFIX}{skill}"))

    return findings
