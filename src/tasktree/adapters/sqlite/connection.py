"""Database connection management for the local SQLite store.

Connections are opened with foreign key enforcement switched on, which the
cascade delete of the ``tasks`` table depends on, and WAL journaling for
file databases.
"""

from __future__ import annotations

import os
import sqlite3
import time
from pathlib import Path

from platformdirs import user_data_dir

MEMORY_DB = ":memory:"
DEFAULT_DB_NAME = "tasktree.db"


def default_db_path() -> Path:
    """Location of the database used by the default ``local`` context."""
    return Path(user_data_dir("tasktree")) / DEFAULT_DB_NAME


def open_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """Open and configure a connection.

    Args:
        db_path: Path to database file, ``":memory:"`` for a private
            in-memory database, or None for the default location.

    Returns:
        sqlite3.Connection configured for tasktree usage
    """
    if str(db_path) == MEMORY_DB:
        connection = sqlite3.connect(MEMORY_DB)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON")
        return connection

    db_path = default_db_path() if db_path is None else Path(db_path).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    is_new_database = not db_path.exists()

    connection = sqlite3.connect(
        str(db_path),
        timeout=30.0,  # Wait up to 30s for locks
    )
    connection.row_factory = sqlite3.Row  # Enable dict-like access
    connection.execute("PRAGMA foreign_keys = ON")
    connection.execute("PRAGMA journal_mode = WAL")

    # Owner read/write only
    if is_new_database:
        os.chmod(db_path, 0o600)

    return connection


def execute_with_retry(
    connection: sqlite3.Connection,
    sql: str,
    params: tuple | list | dict | None = None,
    max_retries: int = 3,
) -> sqlite3.Cursor:
    """Execute SQL, retrying while another process holds the write lock.

    Args:
        connection: Database connection
        sql: SQL statement to execute
        params: Parameters for SQL statement
        max_retries: Maximum number of attempts

    Returns:
        Cursor after successful execution

    Raises:
        sqlite3.OperationalError: If database remains locked after retries
    """
    for attempt in range(max_retries):
        try:
            return connection.execute(sql, params or ())
        except sqlite3.OperationalError as e:
            if "database is locked" in str(e) and attempt < max_retries - 1:
                # Exponential backoff: 0.1s, 0.2s, 0.4s
                time.sleep(0.1 * (2**attempt))
                continue
            raise

    raise sqlite3.OperationalError("Max retries exceeded")
