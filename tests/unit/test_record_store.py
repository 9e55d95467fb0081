from __future__ import annotations

import pytest

from data_alchemist.models.collection import CollectionKind
from data_alchemist.services.record_store import RecordStore


def test_ingest_assigns_positional_row_ids_and_copies_rows():
    store = RecordStore()
    rows = [{"Name": "a"}, {"Name": "b", "rowId": 99}]
    records = store.ingest("clients", rows)
    assert [r["rowId"] for r in records] == [0, 1]
    assert store.get(CollectionKind.CLIENTS) is records
    # Caller rows are untouched
    assert "rowId" not in rows[0]
    assert rows[1]["rowId"] == 99


def test_collections_are_independent():
    store = RecordStore()
    store.ingest("clients", [{"Name": "a"}])
    store.ingest("tasks", [{"Task": "t"}, {"Task": "u"}])
    assert len(store.get("clients")) == 1
    assert len(store.get_active("tasks")) == 2
    assert store.get("workers") == []


def test_ingest_replaces_collection_wholesale():
    store = RecordStore()
    store.ingest("workers", [{"Name": "a"}, {"Name": "b"}], source="old.csv")
    store.ingest("workers", [{"Name": "c"}], source="new.csv")
    assert store.get("workers") == [{"Name": "c", "rowId": 0}]
    assert store.source("workers") == "new.csv"


def test_update_row_keeps_row_id_and_position():
    store = RecordStore()
    store.ingest("tasks", [{"Name": "a"}, {"Name": "b"}])
    assert store.update_row("tasks", 1, {"Name": "B", "rowId": 7}) is True
    assert store.get("tasks") == [{"Name": "a", "rowId": 0}, {"Name": "B", "rowId": 1}]


def test_update_row_unknown_id_is_a_noop():
    store = RecordStore()
    store.ingest("tasks", [{"Name": "a"}])
    assert store.update_row("tasks", 5, {"Name": "zzz"}) is False
    assert store.get("tasks") == [{"Name": "a", "rowId": 0}]


def test_listeners_fire_on_ingest_and_successful_update():
    store = RecordStore()
    events: list[CollectionKind] = []
    store.subscribe(events.append)
    store.ingest("clients", [{"Name": "a"}])
    store.update_row("clients", 0, {"Name": "b"})
    store.update_row("clients", 3, {"Name": "c"})
    assert events == [CollectionKind.CLIENTS, CollectionKind.CLIENTS]


def test_find_by_row_id():
    store = RecordStore()
    store.ingest("tasks", [{"Name": "a"}, {"Name": "b"}])
    assert store.find("tasks", 1) == {"Name": "b", "rowId": 1}
    assert store.find("tasks", 2) is None


def test_unknown_kind_rejected():
    store = RecordStore()
    with pytest.raises(ValueError, match="unknown collection kind"):
        store.get("projects")
