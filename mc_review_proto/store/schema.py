"""
Idempotent bootstrap of the revisions and migration-ledger tables.

Uses CREATE TABLE IF NOT EXISTS so it can be re-run safely at any time.
"""

from __future__ import annotations

import logging
import re
import sqlite3

from ..core.errors import ConfigurationError

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def check_identifier(name: str) -> str:
    """Table and column names come from config and are interpolated into SQL."""
    if not _IDENTIFIER.match(name or ""):
        raise ConfigurationError(f"invalid SQL identifier in config: {name!r}")
    return name


def ensure_ledger_table(conn: sqlite3.Connection, ledger_table: str) -> None:
    conn.execute(
        f"""
        CREATE TABLE IF NOT EXISTS {check_identifier(ledger_table)} (
            migration_name TEXT PRIMARY KEY,
            ran_at_utc TEXT NOT NULL
        );
        """
    )
    conn.commit()


def ensure_schema(
    conn: sqlite3.Connection,
    *,
    table: str,
    id_column: str,
    blob_column: str,
    ledger_table: str,
) -> None:
    """Create the revisions table (id, form data blob) and the ledger table if missing."""
    conn.execute(
        f"""
        CREATE TABLE IF NOT EXISTS {check_identifier(table)} (
            {check_identifier(id_column)} TEXT PRIMARY KEY,
            {check_identifier(blob_column)} BLOB,
            created_at_utc TEXT
        );
        """
    )
    conn.commit()
    ensure_ledger_table(conn, ledger_table)
    logger.debug("Ensured tables %s and %s", table, ledger_table)
