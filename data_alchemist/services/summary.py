from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

from ..models.finding import (
    DUPLICATE_ID,
    MISSING_SKILL_PREFIX,
    MISSING_VALUE,
    PRIORITY_RANGE,
    Finding,
)

"""SUMMARY line rendering for a validated collection.

Format:
SUMMARY collection={kind} rows={rows} findings={total} missing={n}
duplicate={n} priority={n} skills={n}
"""

__all__ = [
    "FindingCounts",
    "count_findings",
    "render_summary_line",
]


@dataclass(frozen=True)
class FindingCounts:
    total: int = 0
    missing: int = 0
    duplicate: int = 0
    priority: int = 0
    skills: int = 0


def count_findings(findings: Iterable[Finding]) -> FindingCounts:
    """Bucket findings by rule using their message."""
    counter: Counter[str] = Counter()
    total = 0
    for f in findings:
        total += 1
        if f.message == MISSING_VALUE:
            counter["missing"] += 1
        elif f.message == DUPLICATE_ID:
            counter["duplicate"] += 1
        elif f.message == PRIORITY_RANGE:
            counter["priority"] += 1
        elif f.message.startswith(MISSING_SKILL_PREFIX):
            counter["skills"] += 1
    return FindingCounts(
        total=total,
        missing=counter["missing"],
        duplicate=counter["duplicate"],
        priority=counter["priority"],
        skills=counter["skills"],
    )


def render_summary_line(collection: str, rows: int, findings: Iterable[Finding]) -> str:
    """Render the SUMMARY line for one collection.

    Examples:
        >>> from data_alchemist.models.finding import Finding
        >>> render_summary_line("tasks", 3, [Finding(1, "PriorityLevel", "Missing value")])
        'SUMMARY collection=tasks rows=3 findings=1 missing=1 duplicate=0 priority=0 skills=0'
    """
    counts = count_findings(findings)
    return (
        f"SUMMARY collection={collection} "
        f"rows={rows} "
        f"findings={counts.total} "
        f"missing={counts.missing} "
        f"duplicate={counts.duplicate} "
        f"priority={counts.priority} "
        f"skills={counts.skills}"
    )
