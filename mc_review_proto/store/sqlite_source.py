"""
Database revision source: one row per revision, blob in a BLOB column.
Every write commits on its own, so a failing item never rolls back earlier ones.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Iterable, List

from ..core.errors import StorageError
from .backend import RevisionSource
from .schema import check_identifier, ensure_ledger_table

logger = logging.getLogger(__name__)


class SqliteRevisionSource(RevisionSource):
    """Revisions stored in a SQLite table. The caller owns the connection's lifecycle."""

    def __init__(
        self,
        conn: sqlite3.Connection,
        *,
        table: str = "health_plan_revisions",
        id_column: str = "id",
        blob_column: str = "form_data_proto",
        ledger_table: str = "proto_migrations",
        label: str = "sqlite",
    ) -> None:
        self.conn = conn
        self.table = check_identifier(table)
        self.id_column = check_identifier(id_column)
        self.blob_column = check_identifier(blob_column)
        self.ledger_table = check_identifier(ledger_table)
        self.label = label

    def describe(self) -> str:
        return f"{self.label} table {self.table}"

    def iter_item_ids(self) -> List[str]:
        try:
            cur = self.conn.execute(
                f"SELECT {self.id_column} FROM {self.table} "
                f"WHERE {self.blob_column} IS NOT NULL ORDER BY {self.id_column}"
            )
            return [str(row[0]) for row in cur.fetchall()]
        except sqlite3.Error as e:
            raise StorageError(f"cannot list revisions in {self.table}: {e}") from e

    def read(self, item_id: str) -> bytes:
        try:
            cur = self.conn.execute(
                f"SELECT {self.blob_column} FROM {self.table} WHERE {self.id_column} = ?",
                (item_id,),
            )
            row = cur.fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"cannot read revision {item_id}: {e}", blob_id=item_id) from e
        if row is None or row[0] is None:
            raise StorageError(f"revision {item_id} has no form data", blob_id=item_id)
        return bytes(row[0])

    def write(self, item_id: str, data: bytes) -> None:
        try:
            with self.conn:
                cur = self.conn.execute(
                    f"UPDATE {self.table} SET {self.blob_column} = ? WHERE {self.id_column} = ?",
                    (sqlite3.Binary(data), item_id),
                )
                if cur.rowcount != 1:
                    raise StorageError(f"revision {item_id} vanished before write", blob_id=item_id)
        except sqlite3.Error as e:
            raise StorageError(f"cannot write revision {item_id}: {e}", blob_id=item_id) from e

    def ran_migrations(self) -> List[str]:
        try:
            ensure_ledger_table(self.conn, self.ledger_table)
            cur = self.conn.execute(f"SELECT migration_name FROM {self.ledger_table} ORDER BY rowid")
            return [row[0] for row in cur.fetchall()]
        except sqlite3.Error as e:
            raise StorageError(f"cannot read {self.ledger_table}: {e}") from e

    def record_migrations(self, names: Iterable[str]) -> None:
        ran_at = datetime.now(timezone.utc).isoformat(timespec="seconds")
        rows = [(name, ran_at) for name in names]
        try:
            ensure_ledger_table(self.conn, self.ledger_table)
            with self.conn:
                self.conn.executemany(
                    f"INSERT OR IGNORE INTO {self.ledger_table} (migration_name, ran_at_utc) VALUES (?, ?)",
                    rows,
                )
        except sqlite3.Error as e:
            raise StorageError(f"cannot update {self.ledger_table}: {e}") from e
        logger.info("Recorded %d migration(s) in %s", len(rows), self.ledger_table)
