from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.finding import FindingRecord

"""Findings log buffering.

- JSON Lines, fixed schema (finding_log_schema.json, no extra keys)
- One file per run: ``<logs_dir>/findings-YYYYMMDD-HHMMSS.log`` (UTC)
- Records are buffered in memory and written on flush(); the file is only
  created when there is something to write
"""

__all__ = [
    "FindingLogBuffer",
    "FindingRecord",
    "SCHEMA_PATH",
]

SCHEMA_PATH = Path(__file__).with_name("finding_log_schema.json")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class FindingLogBuffer:
    """In-memory buffer of finding records. Flush appends JSON Lines."""

    def __init__(self, logs_dir: Path = Path("./logs")) -> None:
        self.logs_dir = logs_dir
        self._records: list[FindingRecord] = []
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self.logs_dir / f"findings-{stamp}.log"
        return self._file_path

    def append(self, record: FindingRecord) -> None:
        self._records.append(record)

    def extend(self, records: list[FindingRecord]) -> None:
        self._records.extend(records)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the log path, or None if nothing was buffered."""
        if not self._records:
            return None
        fp = self.file_path
        fp.parent.mkdir(parents=True, exist_ok=True)
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
