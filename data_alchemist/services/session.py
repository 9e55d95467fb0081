from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from ..models.collection import ROW_ID_COLUMN, CollectionKind, Record
from ..models.finding import Finding
from .query import filter_records
from .record_store import RecordStore
from .validation import IdScope, validate

"""Session state and edit coordination.

A Session owns the record store, the findings of each collection kind and the
active kind. It is the single owner of mutable state: every engine call goes
through a session handle instead of module globals.

Revalidation is driven by the store's change event (``on_collection_changed``):
ingest and edit both end up there, so findings never go stale for the kind
that changed. Other kinds keep their findings until they change or
``revalidate_all`` is called, which means client/task skill checks can lag
behind a later worker upload.
"""

__all__ = [
    "Session",
]

logger = logging.getLogger(__name__)


class Session:
    """Single-owner state for one validation session.

    Args:
        active: Kind used by ``view``/``findings`` when no kind is passed
        id_scope: Duplicate ID tracking mode forwarded to ``validate``
    """

    def __init__(
        self,
        *,
        active: CollectionKind | str = CollectionKind.TASKS,
        id_scope: IdScope = "shared",
        store: RecordStore | None = None,
    ) -> None:
        self.store = store if store is not None else RecordStore()
        self.active = CollectionKind.parse(active)
        self.id_scope: IdScope = id_scope
        self._findings: dict[CollectionKind, list[Finding]] = {kind: [] for kind in CollectionKind}
        self.store.subscribe(self.on_collection_changed)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def on_collection_changed(self, kind: CollectionKind) -> list[Finding]:
        """Recompute findings for ``kind`` against the current workers."""
        findings = validate(
            self.store.get(kind),
            self.store.get(CollectionKind.WORKERS),
            id_scope=self.id_scope,
        )
        self._findings[kind] = findings
        logger.debug(f"validated {kind.value}: {len(findings)} finding(s)")
        return findings

    def revalidate_all(self) -> None:
        for kind in CollectionKind:
            self.on_collection_changed(kind)

    # ------------------------------------------------------------------
    # Data access
    # ------------------------------------------------------------------
    def ingest(self, kind: CollectionKind | str, rows: Iterable[Mapping[str, Any]], *, source: str = "") -> list[Record]:
        # Findings of this kind are replaced wholesale by the change event
        return self.store.ingest(kind, rows, source=source)

    def collection(self, kind: CollectionKind | str | None = None) -> list[Record]:
        return self.store.get(self.active if kind is None else kind)

    def findings(self, kind: CollectionKind | str | None = None) -> list[Finding]:
        kind = self.active if kind is None else CollectionKind.parse(kind)
        return list(self._findings[kind])

    def findings_for(self, kind: CollectionKind | str, row_id: int, column: str) -> list[Finding]:
        """Findings attached to one cell (used to highlight it)."""
        return [f for f in self.findings(kind) if f.row_id == row_id and f.column == column]

    def view(self, query: str = "", kind: CollectionKind | str | None = None) -> list[Record]:
        """Filtered view of a collection (active kind by default)."""
        return filter_records(self.collection(kind), query)

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------
    def apply_edit(self, kind: CollectionKind | str, row_id: int, new_record: Mapping[str, Any]) -> Record | None:
        """Replace the record with ``row_id`` and revalidate its collection.

        The row is located in the full collection, never in a filtered view,
        so an active filter cannot redirect the edit to another record.

        Returns:
            A copy of the stored record, or None when no record carries ``row_id``.
        """
        kind = CollectionKind.parse(kind)
        if not self.store.update_row(kind, row_id, new_record):
            logger.warning(f"edit ignored: {kind.value} has no row with {ROW_ID_COLUMN}={row_id}")
            return None
        stored = self.store.find(kind, row_id)
        return dict(stored) if stored is not None else None

    def set_cell(self, kind: CollectionKind | str, row_id: int, column: str, value: Any) -> Record | None:
        """Edit a single cell; convenience wrapper around ``apply_edit``."""
        current = self.store.find(kind, row_id)
        if current is None:
            logger.warning(f"edit ignored: {CollectionKind.parse(kind).value} has no row with {ROW_ID_COLUMN}={row_id}")
            return None
        updated = dict(current)
        updated[column] = value
        return self.apply_edit(kind, row_id, updated)
