from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from ..models.collection import ROW_ID_COLUMN, Record

"""CSV export of a (possibly filtered) collection.

The synthetic ``rowId`` column is not exported: it is reassigned by position
when the file is loaded again.

CSV carries text only: numbers are written as digits and missing cells
(None) as empty fields, so reading an export back yields strings and "" where
an XLSX upload held ints and None. Validation treats both forms the same way.
"""

__all__ = [
    "export_columns",
    "to_csv_text",
    "write_csv",
]


def export_columns(records: Sequence[Record]) -> list[str]:
    """Column names in first-seen order, rowId excluded."""
    columns: list[str] = []
    seen: set[str] = set()
    for record in records:
        for col in record:
            if col == ROW_ID_COLUMN or col in seen:
                continue
            seen.add(col)
            columns.append(col)
    return columns


def to_csv_text(records: Sequence[Record]) -> str:
    columns = export_columns(records)
    if not columns:
        return ""
    # object dtype keeps ints as ints when a column also holds None
    df = pd.DataFrame([{c: r.get(c) for c in columns} for r in records], columns=columns, dtype=object)
    return df.to_csv(index=False, lineterminator="\n")


def write_csv(records: Sequence[Record], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(to_csv_text(records), encoding="utf-8")
    return path
