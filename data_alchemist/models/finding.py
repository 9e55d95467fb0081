from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""Finding and FindingRecord models.

Finding is the in-memory result of a validation pass: one issue tied to a row
(positional index of the validated list) and a column.

FindingRecord is the JSON Lines form written to the findings log. It adheres to
the schema in data_alchemist/logging/finding_log_schema.json (no extra keys).
"""

__all__ = [
    "Finding",
    "FindingRecord",
    "MISSING_VALUE",
    "DUPLICATE_ID",
    "PRIORITY_RANGE",
    "MISSING_SKILL_PREFIX",
]

MISSING_VALUE = "Missing value"
DUPLICATE_ID = "Duplicate ID"
PRIORITY_RANGE = "PriorityLevel must be between 1 and 5."
MISSING_SKILL_PREFIX = "No worker found with required skill: "


@dataclass(frozen=True)
class Finding:
    """Single validation issue for one cell.

    Attributes:
        row_id: 0-based position of the record in the validated list
        column: Column name of the offending cell
        message: Human readable description
    """
    row_id: int
    column: str
    message: str

    def describe(self) -> str:
        # 1-based row numbers for display
        return f"Row {self.row_id + 1}, Column {self.column}: {self.message}"


@dataclass(frozen=True)
class FindingRecord:
    """Structured finding for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Source file name the collection was loaded from ("" if unknown)
        collection: Collection kind value (clients/workers/tasks)
        row: Row number (1-based). Use -1 when the row cannot be determined
        column: Column name
        message: Finding message
    """
    timestamp: str  # ISO8601 UTC
    file: str
    collection: str
    row: int
    column: str
    message: str

    @staticmethod
    def create(file: str, collection: str, row: int, column: str, message: str) -> FindingRecord:
        """Create a new FindingRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return FindingRecord(
            timestamp=ts,
            file=file,
            collection=collection,
            row=row,
            column=column,
            message=message,
        )

    @staticmethod
    def from_finding(finding: Finding, *, file: str, collection: str) -> FindingRecord:
        return FindingRecord.create(
            file=file,
            collection=collection,
            row=finding.row_id + 1,
            column=finding.column,
            message=finding.message,
        )

    def to_json_line(self) -> str:
        """Serialize to a single JSON Lines entry (schema keys only)."""
        return json.dumps(asdict(self), ensure_ascii=False)
