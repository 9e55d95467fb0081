from __future__ import annotations
from pathlib import Path

from data_alchemist.models.finding import Finding
from data_alchemist.services.session import Session
from data_alchemist.tabular.reader import parse_csv_text, read_table
from data_alchemist.tabular.writer import to_csv_text

"""Upload -> validate -> filter -> edit -> export, without the CLI."""


def test_three_row_csv_with_missing_priority_and_duplicate_client(clients_csv_text):
    session = Session(active="clients")
    session.ingest("clients", parse_csv_text(clients_csv_text), source="clients.csv")
    assert session.findings() == [
        Finding(1, "PriorityLevel", "Missing value"),
        Finding(2, "ClientID", "Duplicate ID"),
    ]


def test_export_and_reingest_reproduces_records_and_findings(data_files):
    session = Session(active="tasks")
    session.ingest("workers", read_table(data_files["workers"]))
    session.ingest("tasks", read_table(data_files["tasks"]))
    session.ingest("clients", read_table(data_files["clients"]))

    for kind in ("tasks", "clients"):
        before = session.collection(kind)
        findings_before = session.findings(kind)
        text = to_csv_text(before)

        again = Session()
        again.ingest("workers", session.collection("workers"))
        again.ingest(kind, parse_csv_text(text))
        assert again.collection(kind) == before
        assert again.findings(kind) == findings_before


def test_blank_csv_line_surfaces_as_missing_values():
    session = Session(active="tasks")
    session.ingest("tasks", parse_csv_text("TaskID,Name\nT1,a\n\nT2,b\n"))
    assert session.findings() == [
        Finding(1, "TaskID", "Missing value"),
        Finding(1, "Name", "Missing value"),
    ]


def test_edit_while_filtered_keeps_row_identity(data_files):
    session = Session(active="tasks")
    session.ingest("workers", read_table(data_files["workers"]))
    session.ingest("tasks", read_table(data_files["tasks"]))

    view = session.view("RequiredSkills includes roofing")
    assert [r["TaskID"] for r in view] == ["T2"]
    target = dict(view[0], RequiredSkills="painting")
    session.apply_edit("tasks", target["rowId"], target)

    assert [r["TaskID"] for r in session.collection()] == ["T1", "T2", "T3"]
    assert session.collection()[1]["RequiredSkills"] == "painting"
    assert session.findings() == []


def test_worker_edit_changes_task_findings_after_revalidation(data_files):
    session = Session(active="tasks")
    session.ingest("workers", read_table(data_files["workers"]))
    session.ingest("tasks", read_table(data_files["tasks"]))
    assert len(session.findings()) == 1

    session.set_cell("workers", 0, "Skills", "welding roofing painting")
    session.revalidate_all()
    assert session.findings() == []


def test_xlsx_upload_validates_like_csv(temp_workdir: Path, tasks_rows, workers_rows):
    import pandas as pd

    path = temp_workdir / "tasks.xlsx"
    pd.DataFrame(tasks_rows).to_excel(path, index=False)
    session = Session(active="tasks")
    session.ingest("workers", workers_rows)
    session.ingest("tasks", read_table(path))
    # PriorityLevel strings in the frame are written as text cells
    assert session.findings() == [
        Finding(1, "RequiredSkills", "No worker found with required skill: roofing"),
    ]


def test_xlsx_export_and_reingest_keeps_findings(temp_workdir: Path, workers_rows):
    import pandas as pd

    path = temp_workdir / "tasks.xlsx"
    pd.DataFrame(
        [
            {"TaskID": "T1", "PriorityLevel": 3, "RequiredSkills": "welding", "Note": None},
            {"TaskID": "T1", "PriorityLevel": 7, "RequiredSkills": "roofing", "Note": "x"},
        ]
    ).to_excel(path, index=False)

    session = Session(active="tasks")
    session.ingest("workers", workers_rows)
    session.ingest("tasks", read_table(path))
    uploaded = session.collection()
    assert uploaded[0]["PriorityLevel"] == 3
    assert uploaded[0]["Note"] is None

    again = Session(active="tasks")
    again.ingest("workers", workers_rows)
    again.ingest("tasks", parse_csv_text(to_csv_text(uploaded)))
    # CSV is text: ints come back as digits and None as an empty field
    assert again.collection()[0]["PriorityLevel"] == "3"
    assert again.collection()[0]["Note"] == ""
    assert again.findings() == session.findings() == [
        Finding(0, "Note", "Missing value"),
        Finding(1, "TaskID", "Duplicate ID"),
        Finding(1, "PriorityLevel", "PriorityLevel must be between 1 and 5."),
        Finding(1, "RequiredSkills", "No worker found with required skill: roofing"),
    ]
