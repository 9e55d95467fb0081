# Shared pytest fixtures
from __future__ import annotations
import logging
import tempfile
from pathlib import Path

import pandas as pd
import pytest

from data_alchemist.logging.init import APP_LOGGER_NAME, reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _fresh_logging():
    # The stdout handler binds sys.stdout at setup; capsys swaps it per test
    reset_logging()
    yield
    reset_logging()
    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.handlers.clear()
    app_logger.setLevel(logging.NOTSET)
    app_logger.propagate = True


@pytest.fixture()
def workers_rows() -> list[dict]:
    return [
        {"WorkerID": "W1", "WorkerName": "Ana", "Skills": "Welding, Painting"},
        {"WorkerID": "W2", "WorkerName": "Ben", "Skills": "plumbing  carpentry"},
    ]


@pytest.fixture()
def tasks_rows() -> list[dict]:
    return [
        {"TaskID": "T1", "TaskName": "Fence", "PriorityLevel": "3", "RequiredSkills": "welding"},
        {"TaskID": "T2", "TaskName": "Roof", "PriorityLevel": "5", "RequiredSkills": "roofing, painting"},
        {"TaskID": "T3", "TaskName": "Sink", "PriorityLevel": "1", "RequiredSkills": "Plumbing"},
    ]


@pytest.fixture()
def clients_csv_text() -> str:
    # Row 2 has an empty PriorityLevel, row 3 repeats ClientID C1
    return (
        "ClientID,ClientName,PriorityLevel\n"
        "C1,Acme,2\n"
        "C2,Globex,\n"
        "C1,Initech,4\n"
    )


@pytest.fixture()
def sample_config_yaml() -> str:
    return """sources:
  clients: data/clients.csv
  workers: data/workers.csv
  tasks: data/tasks.csv
active: tasks
duplicate_id_scope: shared
null_sentinels: [N/A]
logs_directory: ./logs
export_directory: ./exports
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "alchemist.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def write_rows_csv(path: Path, rows: list[dict]) -> Path:
    pd.DataFrame(rows).to_csv(path, index=False)
    return path


@pytest.fixture()
def data_files(temp_workdir: Path, workers_rows, tasks_rows, clients_csv_text) -> dict[str, Path]:
    data = temp_workdir / "data"
    (data / "clients.csv").write_text(clients_csv_text, encoding="utf-8")
    return {
        "clients": data / "clients.csv",
        "workers": write_rows_csv(data / "workers.csv", workers_rows),
        "tasks": write_rows_csv(data / "tasks.csv", tasks_rows),
    }
