"""Database schema definitions for the local SQLite store.

One self-referencing ``tasks`` table. ``parent_id`` cascades on delete, so
removing a task removes its whole subtree; ``status`` and ``priority`` are
guarded by CHECK constraints mirroring the model validation.
"""

from __future__ import annotations

import sqlite3

SCHEMA_VERSION = 1

CREATE_SCHEMA_VERSION_TABLE = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at DATETIME NOT NULL
)
"""

# Labels are a JSON array stored as TEXT
CREATE_TASKS_TABLE = """
CREATE TABLE IF NOT EXISTS tasks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL CHECK (length(trim(title)) > 0),
    description TEXT,
    status TEXT NOT NULL DEFAULT 'not_started'
        CHECK (status IN ('not_started', 'in_progress', 'done')),
    deadline DATETIME,
    parent_id INTEGER,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL,
    labels TEXT NOT NULL DEFAULT '[]',
    priority INTEGER NOT NULL DEFAULT 0 CHECK (priority BETWEEN 0 AND 5),

    FOREIGN KEY (parent_id) REFERENCES tasks(id) ON DELETE CASCADE
)
"""

CREATE_TASK_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_parent ON tasks(parent_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_deadline ON tasks(deadline)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_priority ON tasks(priority)",
]

ALL_TABLES = [
    CREATE_SCHEMA_VERSION_TABLE,
    CREATE_TASKS_TABLE,
]


def initialize_schema(connection: sqlite3.Connection) -> None:
    """Create tables and indexes if missing and record the schema version.

    Args:
        connection: sqlite3.Connection object
    """
    cursor = connection.cursor()

    for create_statement in ALL_TABLES:
        cursor.execute(create_statement)

    for index_statement in CREATE_TASK_INDEXES:
        cursor.execute(index_statement)

    cursor.execute(
        "INSERT OR IGNORE INTO schema_version (version, applied_at) VALUES (?, datetime('now'))",
        (SCHEMA_VERSION,),
    )

    connection.commit()


def get_schema_version(connection: sqlite3.Connection) -> int:
    """Get current schema version from database.

    Returns:
        Schema version number, or 0 if not initialized
    """
    try:
        cursor = connection.execute("SELECT MAX(version) FROM schema_version")
    except sqlite3.OperationalError:
        return 0
    result = cursor.fetchone()
    return result[0] if result[0] is not None else 0
