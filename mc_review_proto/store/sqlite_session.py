"""
SQLite connection lifecycle: context manager with guaranteed close.

The migrate and init-db commands open one connection per batch and must release it
even when a step fails or the run is interrupted. `:memory:` is passed through
unresolved so tests and `sqlite://:memory:` URLs get a private in-memory database.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Union

MEMORY = ":memory:"


@contextmanager
def sqlite_conn(db_path: Union[str, Path]) -> Generator[sqlite3.Connection, None, None]:
    """
    Yield a SQLite connection that is always closed on exit.
    ":memory:" is passed through; any other path is resolved to an absolute path.
    """
    path = MEMORY if str(db_path) == MEMORY else str(Path(db_path).resolve())
    conn = sqlite3.connect(path)
    try:
        conn.execute("PRAGMA foreign_keys = ON")
        conn.commit()
        yield conn
    finally:
        conn.close()
