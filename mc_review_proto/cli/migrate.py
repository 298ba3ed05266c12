"""
Batch-migrate persisted form data protos to the current version.
Use: migrate-protos db | migrate-protos files <directory>
     (also: mcr-proto migrate db|files <directory>)
db mode reads DATABASE_URL (sqlite:///path.db); files mode migrates every
*.proto file directly under the directory.
Exit status: 0 ok, 1 any item failed, 2 usage/configuration error, 130 interrupted.
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import List, Optional

from .. import config
from ..core.errors import ConfigurationError, StorageError
from ..driver import MigrationDriver
from ..migrations.runner import MigrationRunner
from ..report import EXIT_FAILED
from ..store.file_source import FileRevisionSource
from ..store.sqlite_session import sqlite_conn
from ..store.sqlite_source import SqliteRevisionSource
from . import EXIT_USAGE, setup_logging

logger = logging.getLogger(__name__)


def _add_run_options(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("--dry-run", action="store_true", help="Migrate in memory and report; write nothing.")
    ap.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Concurrent items in files mode (default: migrate.workers from config).",
    )
    ap.add_argument("--report-csv", default=None, metavar="PATH", help="Write per-item results to this CSV.")
    ap.add_argument(
        "--replay-all",
        action="store_true",
        help="Run every step on every blob, relying on each step's own guards.",
    )
    ap.add_argument("--log-level", default=None, help="Override logging.level (e.g. DEBUG).")


def build_parser(prog: str = "migrate-protos") -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog=prog,
        description="Migrate stored HealthPlanFormData protos to the current proto version.",
    )
    modes = ap.add_subparsers(dest="mode", metavar="{db,files}")
    modes.required = True
    db = modes.add_parser("db", help="Migrate every revision row in DATABASE_URL.")
    files = modes.add_parser("files", help="Migrate every proto file in a directory.")
    files.add_argument("directory", help="Directory holding *.proto files.")
    _add_run_options(db)
    _add_run_options(files)
    return ap


def _run(source, args: argparse.Namespace) -> int:
    workers = args.workers if args.workers is not None else config.default_workers()
    driver = MigrationDriver(
        source,
        MigrationRunner(replay_all=args.replay_all),
        dry_run=args.dry_run,
        workers=workers,
    )

    previous_handler = None
    in_main_thread = threading.current_thread() is threading.main_thread()
    if in_main_thread:
        previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: driver.request_stop())
    try:
        report = driver.run()
    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)

    print(report.format_summary())
    if args.report_csv:
        out = report.write_csv(args.report_csv)
        print(f"Report: {out}")
    return report.exit_code


def main(argv: Optional[List[str]] = None, prog: str = "migrate-protos") -> int:
    if argv is None:
        argv = sys.argv[1:]
    ap = build_parser(prog)
    args = ap.parse_args(argv)
    setup_logging(args.log_level)

    try:
        if args.mode == "files":
            directory = Path(args.directory)
            if not directory.is_dir():
                ap.print_usage(sys.stderr)
                print(f"{prog}: error: not a directory: {args.directory}", file=sys.stderr)
                return EXIT_USAGE
            source = FileRevisionSource(
                directory,
                extension=config.proto_extension(),
                ledger_file=config.ledger_file_name(),
            )
            return _run(source, args)

        url = config.database_url()
        with sqlite_conn(config.sqlite_path_from_url(url)) as conn:
            source = SqliteRevisionSource(
                conn,
                table=config.db_table(),
                id_column=config.db_id_column(),
                blob_column=config.db_blob_column(),
                ledger_table=config.db_ledger_table(),
            )
            return _run(source, args)
    except ConfigurationError as e:
        print(f"{prog}: configuration error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except StorageError as e:
        logger.error("Migration aborted: %s", e)
        print(f"{prog}: {e}", file=sys.stderr)
        return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
