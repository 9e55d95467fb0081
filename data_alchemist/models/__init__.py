"""Domain models for the Data Alchemist validation engine.

Records are plain dicts keyed by column name; the models here describe the
collection kinds and the findings produced by validation.
"""

from .collection import ROW_ID_COLUMN, CollectionKind
from .finding import Finding, FindingRecord

__all__ = [
    # Collections
    "CollectionKind",
    "ROW_ID_COLUMN",
    # Validation output
    "Finding",
    "FindingRecord",
]
