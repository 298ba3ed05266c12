"""
Store: revision sources the batch driver reads and writes blobs through.
No migration logic.
"""

from __future__ import annotations

from .backend import RevisionSource
from .file_source import FileRevisionSource
from .schema import ensure_schema
from .sqlite_session import sqlite_conn
from .sqlite_source import SqliteRevisionSource

__all__ = [
    "FileRevisionSource",
    "RevisionSource",
    "SqliteRevisionSource",
    "ensure_schema",
    "sqlite_conn",
]
