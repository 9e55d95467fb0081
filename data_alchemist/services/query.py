from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any

from ..models.collection import Record

"""Filter expression interpreter.

Grammar: ``<field> <operator> <value>`` with operator one of
``= != > < >= <= includes`` (keyword case-insensitive). Anything that does not
match the grammar is treated as a free-text search over all values.

Never raises on user input: an odd looking query just becomes a substring
search, and an odd value just fails to compare.
"""

__all__ = [
    "OPERATORS",
    "Query",
    "filter_records",
    "parse_float",
    "parse_query",
]

# Two-character operators first so ">=" is not read as ">" followed by "= ..."
OPERATORS = ("!=", ">=", "<=", "=", ">", "<", "includes")

_QUERY_RE = re.compile(
    r"^([\w\s]+?)\s*(" + "|".join(re.escape(op) for op in OPERATORS) + r")\s*(.+)$",
    re.IGNORECASE | re.ASCII,
)
_LEADING_FLOAT = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


@dataclass(frozen=True)
class Query:
    field: str
    operator: str  # lower-cased
    value: str  # trimmed, original case


def parse_query(text: str) -> Query | None:
    """Parse a structured comparison or return None for free-text queries."""
    m = _QUERY_RE.match(text)
    if m is None:
        return None
    field, operator, value = m.groups()
    return Query(field=field.strip(), operator=operator.lower(), value=value.strip())


def parse_float(value: Any) -> float:
    """Leading-number parse ("3.5kg" -> 3.5); NaN when there is no number."""
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    m = _LEADING_FLOAT.match(text)
    if m is None:
        lowered = text.lower()
        if lowered.lstrip("+-").startswith("infinity"):
            return -math.inf if lowered.startswith("-") else math.inf
        return math.nan
    return float(m.group(0))


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value)


def _compare(actual: Any, query: Query) -> bool:
    actual_str = _as_text(actual).lower()
    expected = query.value.lower()
    op = query.operator
    if op == "=":
        return actual_str == expected
    if op == "!=":
        return actual_str != expected
    if op == "includes":
        return expected in actual_str

    left = parse_float(actual_str)
    right = parse_float(expected)
    # NaN compares false under every ordering operator
    if op == ">":
        return left > right
    if op == "<":
        return left < right
    if op == ">=":
        return left >= right
    if op == "<=":
        return left <= right
    return False


def filter_records(collection: list[Record], query_text: str) -> list[Record]:
    """Return the records of ``collection`` matching ``query_text``.

    An empty or whitespace-only query returns ``collection`` itself.
    """
    if query_text is None or query_text.strip() == "":
        return collection

    query = parse_query(query_text)
    if query is None:
        needle = query_text.lower()
        return [
            record for record in collection
            if any(needle in _as_text(v).lower() for v in record.values())
        ]

    return [
        record for record in collection
        if query.field in record and _compare(record[query.field], query)
    ]
