"""
Create the revisions and ledger tables in a local SQLite database.
Use: mcr-proto init [--db URL_OR_PATH]
Default: DATABASE_URL (or db.url in config.yaml).
"""

from __future__ import annotations

import argparse
import sqlite3
import sys
from pathlib import Path
from typing import List, Optional

from .. import config
from ..core.errors import ConfigurationError
from ..store.schema import ensure_schema
from ..store.sqlite_session import MEMORY, sqlite_conn
from . import EXIT_USAGE


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    ap = argparse.ArgumentParser(
        prog="mcr-proto init",
        description="Create the revisions and migration ledger tables (safe to re-run).",
    )
    ap.add_argument("--db", default=None, help="sqlite:/// URL or file path (default: DATABASE_URL)")
    args = ap.parse_args(argv)
    try:
        path = config.sqlite_path_from_url(args.db or config.database_url())
    except ConfigurationError as e:
        print(f"init failed: {e}", file=sys.stderr)
        return EXIT_USAGE
    if path != MEMORY:
        Path(path).resolve().parent.mkdir(parents=True, exist_ok=True)
    try:
        with sqlite_conn(path) as conn:
            ensure_schema(
                conn,
                table=config.db_table(),
                id_column=config.db_id_column(),
                blob_column=config.db_blob_column(),
                ledger_table=config.db_ledger_table(),
            )
        print(f"Initialized DB: {path}")
        return 0
    except (sqlite3.Error, ConfigurationError) as e:
        print(f"init failed: {e}", file=sys.stderr)
        return 1
