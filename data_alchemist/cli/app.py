from __future__ import annotations

import argparse
import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from data_alchemist.config.loader import DEFAULT_CONFIG_PATH, AppConfig, ConfigError, default_config, load_config
from data_alchemist.logging.finding_log import FindingLogBuffer, FindingRecord
from data_alchemist.logging.init import log_summary, setup_logging
from data_alchemist.models.collection import CollectionKind
from data_alchemist.services.progress import ProgressTracker
from data_alchemist.services.session import Session
from data_alchemist.services.summary import render_summary_line
from data_alchemist.tabular.reader import TableReadError, read_table
from data_alchemist.tabular.writer import write_csv

"""CLI entrypoint.

Flow:
- Load .env, then config (``--config``, $DATA_ALCHEMIST_CONFIG or
  config/alchemist.yml; built-in defaults when the default file is absent)
- Read workers, clients, tasks (workers first so skill checks see them)
- Validate, apply ``--edit`` cells, report findings, filter, export
- One SUMMARY line per loaded collection
"""

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_FINDINGS = 2

CONFIG_ENV_VAR = "DATA_ALCHEMIST_CONFIG"

# Workers first: clients/tasks skill coverage is checked against them
LOAD_ORDER = (CollectionKind.WORKERS, CollectionKind.CLIENTS, CollectionKind.TASKS)

_EDIT_RE = re.compile(r"^\s*(\d+)\s*:\s*([^=]+?)\s*=(.*)$", re.ASCII)


class EditSpecError(ValueError):
    pass


@dataclass(frozen=True)
class CellEdit:
    row_id: int
    column: str
    value: str


def parse_edit(spec: str) -> CellEdit:
    """Parse ``ROWID:COLUMN=VALUE`` (rowId is the 0-based store id)."""
    m = _EDIT_RE.match(spec)
    if m is None:
        raise EditSpecError(f"invalid edit '{spec}' (expected ROWID:COLUMN=VALUE)")
    row_id, column, value = m.groups()
    return CellEdit(row_id=int(row_id), column=column, value=value)


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv (values override the process environment)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    kinds = [k.value for k in CollectionKind]
    p = argparse.ArgumentParser(description="Validate, filter and export client/worker/task tables")
    p.add_argument("--config", type=Path, help="YAML config path (default: config/alchemist.yml)")
    p.add_argument("--clients", help="Clients file (.csv or .xlsx)")
    p.add_argument("--workers", help="Workers file (.csv or .xlsx)")
    p.add_argument("--tasks", help="Tasks file (.csv or .xlsx)")
    p.add_argument("--active", metavar="{" + ",".join(kinds) + "}", help="Collection used for --filter, --edit and --export")
    p.add_argument("--filter", default="", help="Filter expression, e.g. 'PriorityLevel > 3'")
    p.add_argument(
        "--edit",
        action="append",
        default=[],
        metavar="ROWID:COLUMN=VALUE",
        help="Set a cell of the active collection before reporting (repeatable)",
    )
    p.add_argument(
        "--export",
        nargs="?",
        const="",
        default=None,
        metavar="PATH",
        help="Export the filtered active collection as CSV (default name: <kind>_validated.csv)",
    )
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print headers & first rows of each source then exit")
    return p.parse_args(argv)


def _resolve_config(args: argparse.Namespace) -> AppConfig:
    explicit = args.config or os.getenv(CONFIG_ENV_VAR)
    if explicit:
        return load_config(Path(explicit))
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return default_config()


def _export_path(arg: str, cfg: AppConfig, kind: CollectionKind) -> Path:
    if arg == "":
        return Path(cfg.export_directory) / f"{kind.value}_validated.csv"
    path = Path(arg)
    # A bare file name goes to the configured export directory
    if path.parent == Path("."):
        return Path(cfg.export_directory) / path
    return path


def _inspect_data(sources: dict[CollectionKind, Path], cfg: AppConfig) -> int:
    for kind, path in sources.items():
        print(f"FILE: {path.name} ({kind.value})")
        try:
            rows = read_table(path, cfg.null_sentinels)
        except TableReadError as e:
            print(f"  read_error: {e}")
            continue
        columns = list(rows[0].keys()) if rows else []
        print(f"  cols={columns} rows={len(rows)}")
        # datetime cells are not JSON friendly; show isoformat
        sample = [
            {k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in r.items()}
            for r in rows[:3]
        ]
        print("    sample_rows=", sample)
    return EXIT_OK


def _load_sources(session: Session, sources: dict[CollectionKind, Path], cfg: AppConfig) -> None:
    with ProgressTracker(len(sources), description="Loading files") as progress:
        for kind, path in sources.items():
            progress.start_file(path)
            rows = read_table(path, cfg.null_sentinels)
            session.ingest(kind, rows, source=path.name)
            progress.finish_file(rows=len(rows))


def main(argv: list[str] | None = None) -> int:
    # None means "read sys.argv"; an explicit [] must not pick up pytest's own args
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = _resolve_config(args)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    cfg = cfg.with_overrides(
        sources={"clients": args.clients, "workers": args.workers, "tasks": args.tasks},
        active=args.active,
    )
    try:
        active = CollectionKind.parse(cfg.active)
    except ValueError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    sources: dict[CollectionKind, Path] = {}
    for kind in LOAD_ORDER:
        if cfg.sources.get(kind.value):
            sources[kind] = Path(cfg.sources[kind.value])
    if not sources:
        logger.error("no source files given (use --clients/--workers/--tasks or config sources)")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(sources, cfg)

    try:
        edits = [parse_edit(spec) for spec in args.edit]
    except EditSpecError as e:
        logger.error(f"edit: {e}")
        return EXIT_FATAL

    session = Session(active=active, id_scope=cfg.duplicate_id_scope)  # type: ignore[arg-type]
    try:
        _load_sources(session, sources, cfg)
    except TableReadError as e:
        logger.error(f"read: {e}")
        return EXIT_FATAL
    for edit in edits:
        if session.set_cell(active, edit.row_id, edit.column, edit.value) is not None:
            logger.info(f"edit {active.value} rowId={edit.row_id} {edit.column}={edit.value!r}")
    # Clients/tasks were validated against the workers present at their ingest;
    # revalidate so every collection sees the final worker set
    session.revalidate_all()

    finding_log = FindingLogBuffer(Path(cfg.logs_directory))
    total_findings = 0
    for kind in sources:
        source = session.store.source(kind)
        for finding in session.findings(kind):
            logger.warning(f"{kind.value}: {finding.describe()}")
            finding_log.append(FindingRecord.from_finding(finding, file=source, collection=kind.value))
        total_findings += len(session.findings(kind))
    log_path = finding_log.flush()
    if log_path is not None:
        logger.info(f"findings log: {log_path}")

    view = session.view(args.filter)
    if args.filter.strip():
        logger.info(f"filter {args.filter!r}: {len(view)}/{len(session.collection())} {active.value} rows")

    if args.export is not None:
        if active not in sources:
            logger.warning(f"export skipped: no {active.value} file loaded")
        else:
            out = write_csv(view, _export_path(args.export, cfg, active))
            logger.info(f"exported {len(view)} rows to {out}")

    for kind in sources:
        summary_line = render_summary_line(kind.value, len(session.collection(kind)), session.findings(kind))
        # log_summary adds the "SUMMARY " label itself
        log_summary(summary_line[len("SUMMARY "):])

    return EXIT_FINDINGS if total_findings > 0 else EXIT_OK
