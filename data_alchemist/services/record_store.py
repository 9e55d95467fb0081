from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from ..models.collection import ROW_ID_COLUMN, CollectionKind, Record

"""In-memory record store for the three collections.

Each collection is an ordered list of dict records. ``rowId`` is assigned from
the position at ingestion and never renumbered, so after an edit the record at
position N still carries rowId N.

Listeners registered via ``subscribe`` are called with the kind after every
ingest and every successful update; the session uses this to trigger
revalidation without the store knowing about validation.
"""

__all__ = [
    "CollectionListener",
    "RecordStore",
]

logger = logging.getLogger(__name__)

CollectionListener = Callable[[CollectionKind], None]


class RecordStore:
    def __init__(self) -> None:
        self._collections: dict[CollectionKind, list[Record]] = {kind: [] for kind in CollectionKind}
        self._sources: dict[CollectionKind, str] = {}
        self._listeners: list[CollectionListener] = []

    def subscribe(self, listener: CollectionListener) -> None:
        self._listeners.append(listener)

    def _notify(self, kind: CollectionKind) -> None:
        for listener in self._listeners:
            listener(kind)

    def ingest(
        self,
        kind: CollectionKind | str,
        rows: Iterable[Mapping[str, Any]],
        *,
        source: str = "",
    ) -> list[Record]:
        """Replace a collection with ``rows``, assigning ``rowId`` by position.

        Rows are copied; any incoming ``rowId`` key is overwritten. ``source``
        records where the data came from (file name) for reporting.
        """
        kind = CollectionKind.parse(kind)
        records: list[Record] = []
        for idx, row in enumerate(rows):
            record = dict(row)
            record[ROW_ID_COLUMN] = idx
            records.append(record)
        self._collections[kind] = records
        self._sources[kind] = source
        logger.debug(f"ingested {len(records)} rows into {kind.value}")
        self._notify(kind)
        return records

    def get(self, kind: CollectionKind | str) -> list[Record]:
        return self._collections[CollectionKind.parse(kind)]

    # Name kept for the outward interface (the collection currently selected)
    get_active = get

    def source(self, kind: CollectionKind | str) -> str:
        return self._sources.get(CollectionKind.parse(kind), "")

    def find(self, kind: CollectionKind | str, row_id: int) -> Record | None:
        for record in self.get(kind):
            if record.get(ROW_ID_COLUMN) == row_id:
                return record
        return None

    def update_row(self, kind: CollectionKind | str, row_id: int, new_record: Mapping[str, Any]) -> bool:
        """Replace the record whose rowId matches.

        Returns:
            True when a record was replaced, False when no record has ``row_id``
            (the store is left untouched).
        """
        kind = CollectionKind.parse(kind)
        records = self._collections[kind]
        for pos, record in enumerate(records):
            if record.get(ROW_ID_COLUMN) == row_id:
                updated = dict(new_record)
                updated[ROW_ID_COLUMN] = row_id
                records[pos] = updated
                self._notify(kind)
                return True
        return False
