from __future__ import annotations
from pathlib import Path

from data_alchemist.tabular.writer import export_columns, to_csv_text, write_csv


def test_export_drops_row_id_and_keeps_column_order():
    records = [
        {"TaskID": "T1", "rowId": 0, "PriorityLevel": "3"},
        {"TaskID": "T2", "rowId": 1, "PriorityLevel": "", "Extra": "x"},
    ]
    assert export_columns(records) == ["TaskID", "PriorityLevel", "Extra"]
    assert to_csv_text(records) == "TaskID,PriorityLevel,Extra\nT1,3,\nT2,,x\n"


def test_missing_values_render_empty_and_ints_stay_ints():
    records = [{"A": 1, "B": None}, {"A": None, "B": "y"}]
    assert to_csv_text(records) == "A,B\n1,\n,y\n"


def test_empty_collection_exports_nothing():
    assert to_csv_text([]) == ""
    assert to_csv_text([{"rowId": 0}]) == ""


def test_write_csv_creates_parent_directories(temp_workdir: Path):
    out = write_csv([{"A": "1", "rowId": 0}], temp_workdir / "exports" / "tasks_validated.csv")
    assert out.read_text(encoding="utf-8") == "A\n1\n"
