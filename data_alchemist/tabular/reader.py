from __future__ import annotations

import io
import math
import zipfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

"""Tabular file reader (CSV / XLSX) built on pandas.

CSV: header row drives the column names, every value stays a string, blank
lines are kept as rows of empty strings (they surface as "Missing value"
findings instead of silently disappearing). The usual NA markers ("NA",
"null", ...) are not converted; only configured null sentinels are.

XLSX: first sheet, first row is the header, remaining rows are zipped against
it. Empty cells become None. Trailing fully-empty rows (formatting left in the
sheet's used range) are dropped; blank rows in the middle are kept.

Rows returned here carry no ``rowId``; the record store assigns it.
"""

__all__ = [
    "SUPPORTED_SUFFIXES",
    "TableReadError",
    "UnsupportedFileError",
    "parse_csv_text",
    "read_csv_rows",
    "read_table",
    "read_xlsx_rows",
]

SUPPORTED_SUFFIXES = (".csv", ".xlsx")


class TableReadError(Exception):
    """Raised when a source file is missing or cannot be parsed."""


class UnsupportedFileError(TableReadError):
    """Raised for files that are neither .csv nor .xlsx."""


def _sentinel_set(null_sentinels: Iterable[str] | None) -> set[str]:
    if not null_sentinels:
        return set()
    return {s.strip().upper() for s in null_sentinels if isinstance(s, str)}


def _coerce_scalar(val: Any, sentinels: set[str], *, missing: Any) -> Any:
    if isinstance(val, np.generic):
        val = val.item()
    if val is None:
        return missing
    if isinstance(val, float):
        if math.isnan(val):
            return missing
        if val.is_integer():
            return int(val)
        return val
    if isinstance(val, str) and sentinels and val.strip().upper() in sentinels:
        return None
    return val


def _csv_frame_to_rows(df: pd.DataFrame, sentinels: set[str]) -> list[dict[str, Any]]:
    columns = [str(c) for c in df.columns]
    rows: list[dict[str, Any]] = []
    for raw in df.itertuples(index=False, name=None):
        row: dict[str, Any] = {}
        for col, val in zip(columns, raw, strict=False):
            # Blank lines / short rows come back as NaN even with dtype=str
            if val is None or (isinstance(val, float) and math.isnan(val)):
                row[col] = ""
            else:
                row[col] = _coerce_scalar(val, sentinels, missing="")
        rows.append(row)
    return rows


def _read_csv_frame(source: Any) -> pd.DataFrame | None:
    try:
        return pd.read_csv(
            source,
            dtype=str,
            keep_default_na=False,
            na_values=[],
            skip_blank_lines=False,
        )
    except pd.errors.EmptyDataError:
        return None


def parse_csv_text(text: str, null_sentinels: Iterable[str] | None = None) -> list[dict[str, Any]]:
    """Parse CSV content already held in memory (e.g. an upload or an export)."""
    try:
        df = _read_csv_frame(io.StringIO(text))
    except pd.errors.ParserError as e:
        raise TableReadError(f"invalid csv: {e}") from e
    if df is None:
        return []
    return _csv_frame_to_rows(df, _sentinel_set(null_sentinels))


def read_csv_rows(path: Path, null_sentinels: Iterable[str] | None = None) -> list[dict[str, Any]]:
    if not path.exists():
        raise TableReadError(f"file not found: {path}")
    try:
        df = _read_csv_frame(path)
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise TableReadError(f"invalid csv '{path.name}': {e}") from e
    if df is None:
        return []
    return _csv_frame_to_rows(df, _sentinel_set(null_sentinels))


def read_xlsx_rows(path: Path, null_sentinels: Iterable[str] | None = None) -> list[dict[str, Any]]:
    if not path.exists():
        raise TableReadError(f"file not found: {path}")
    try:
        # openpyxl hands empty cells over as ""; only those become NaN, "NA"/"null" stay text
        df = pd.read_excel(path, sheet_name=0, header=None, dtype=object, keep_default_na=False, na_values=[""])
    except (ValueError, zipfile.BadZipFile, OSError) as e:
        raise TableReadError(f"invalid xlsx '{path.name}': {e}") from e

    if df.shape[0] == 0:
        return []
    headers = [str(c).strip() for c in df.iloc[0].tolist()]
    data_part = df.iloc[1:]

    # Drop trailing fully-empty rows only
    last = len(data_part)
    while last > 0 and data_part.iloc[last - 1].isna().all():
        last -= 1
    data_part = data_part.iloc[:last]

    sentinels = _sentinel_set(null_sentinels)
    rows: list[dict[str, Any]] = []
    for _, raw in data_part.iterrows():
        row: dict[str, Any] = {}
        for col, val in zip(headers, raw.tolist(), strict=False):
            row[col] = _coerce_scalar(val, sentinels, missing=None)
        rows.append(row)
    return rows


def read_table(path: Path, null_sentinels: Iterable[str] | None = None) -> list[dict[str, Any]]:
    """Read a .csv or .xlsx file into a list of flat row dicts."""
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return read_csv_rows(path, null_sentinels)
    if suffix == ".xlsx":
        return read_xlsx_rows(path, null_sentinels)
    raise UnsupportedFileError(f"unsupported file type '{path.suffix}' (expected one of {', '.join(SUPPORTED_SUFFIXES)})")
