"""SQLite implementation of TaskRepository."""

from __future__ import annotations

import sqlite3
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from tasktree.adapters.sqlite.connection import execute_with_retry, open_connection
from tasktree.adapters.sqlite.schema import SCHEMA_VERSION, get_schema_version, initialize_schema
from tasktree.adapters.sqlite.utils import (
    now_iso,
    placeholders,
    row_to_task,
    to_db_datetime,
    to_db_values,
)
from tasktree.exceptions import IntegrityError, StorageError
from tasktree.models import Task, TaskCreate, TaskFilters, TaskSortOptions, TaskUpdate
from tasktree.repositories import TaskRepository
from tasktree.services.query import query
from tasktree.utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = ("title", "description", "status", "deadline", "parent_id", "labels", "priority")


class SqliteTaskRepository(TaskRepository):
    """SQLite implementation of task repository."""

    def __init__(self, db_path: str | Path | None = None):
        """Initialize SQLite task repository.

        Args:
            db_path: Database file path, ``":memory:"``, or None for the
                default location.
        """
        self.db_path = db_path
        self._connection: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection; the schema is created on first use."""
        if self._connection is None:
            try:
                connection = open_connection(self.db_path)
                version = get_schema_version(connection)
                if version > SCHEMA_VERSION:
                    connection.close()
                    raise StorageError(
                        f"Database {self.db_path} has schema version {version}, "
                        f"newer than the supported version {SCHEMA_VERSION}"
                    )
                initialize_schema(connection)
            except (sqlite3.Error, OSError) as e:
                raise StorageError(f"Cannot open database {self.db_path}: {e}") from e
            self._connection = connection
        return self._connection

    async def connect(self) -> None:
        _ = self.connection

    async def disconnect(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    async def ensure_initialized(self, seed: Sequence[TaskCreate] | None = None) -> int:
        """Create the schema and seed an empty database in one transaction."""
        count = self.connection.execute("SELECT COUNT(*) FROM tasks").fetchone()[0]
        if count or not seed:
            return 0

        assigned: dict[int, int] = {}
        try:
            for position, task_data in enumerate(seed, start=1):
                parent_id = assigned.get(task_data.parent_id) if task_data.parent_id else None
                assigned[position] = self._insert(
                    task_data.model_copy(update={"parent_id": parent_id})
                )
            self.connection.commit()
        except sqlite3.Error as e:
            self.connection.rollback()
            raise StorageError(f"Seeding failed: {e}") from e

        logger.info("seeded %d tasks into %s", len(seed), self.db_path)
        return len(seed)

    def _insert(self, task_data: TaskCreate) -> int:
        now = now_iso()
        values = to_db_values(task_data.model_dump(include=set(_COLUMNS)))
        cursor = execute_with_retry(
            self.connection,
            f"""INSERT INTO tasks ({", ".join(_COLUMNS)}, created_at, updated_at)
                VALUES ({placeholders(len(_COLUMNS) + 2)})""",
            [values[column] for column in _COLUMNS] + [now, now],
        )
        return cursor.lastrowid

    async def create(self, task_data: TaskCreate) -> Task:
        try:
            task_id = self._insert(task_data)
            self.connection.commit()
        except sqlite3.IntegrityError as e:
            self.connection.rollback()
            raise IntegrityError(
                f"Cannot create task under parent {task_data.parent_id}: {e}"
            ) from e
        except sqlite3.Error as e:
            self.connection.rollback()
            raise StorageError(f"Insert failed: {e}") from e

        return await self.get(task_id)

    async def get(self, task_id: int) -> Task | None:
        row = self.connection.execute(
            "SELECT * FROM tasks WHERE id = ?", (task_id,)
        ).fetchone()
        return row_to_task(row) if row else None

    async def update(self, task_id: int, updates: TaskUpdate) -> Task | None:
        values = to_db_values(updates.changes())
        set_parts = [f"{key} = ?" for key in values]
        params: list[Any] = list(values.values())

        # Always refresh updated_at
        set_parts.append("updated_at = ?")
        params.append(now_iso())
        params.append(task_id)

        try:
            cursor = execute_with_retry(
                self.connection,
                f"UPDATE tasks SET {', '.join(set_parts)} WHERE id = ?",
                params,
            )
            self.connection.commit()
        except sqlite3.IntegrityError as e:
            self.connection.rollback()
            raise IntegrityError(f"Cannot update task {task_id}: {e}") from e
        except sqlite3.Error as e:
            self.connection.rollback()
            raise StorageError(f"Update failed: {e}") from e

        if cursor.rowcount == 0:
            return None
        return await self.get(task_id)

    async def delete(self, task_id: int) -> bool:
        """Delete a task; the foreign key cascade removes the subtree."""
        try:
            cursor = execute_with_retry(
                self.connection, "DELETE FROM tasks WHERE id = ?", (task_id,)
            )
            self.connection.commit()
        except sqlite3.Error as e:
            self.connection.rollback()
            raise StorageError(f"Delete failed: {e}") from e
        return cursor.rowcount > 0

    async def delete_many(self, task_ids: Sequence[int]) -> int:
        """Remove ``task_ids`` in one transaction.

        Rows removed through the cascade are not counted by SQLite, so the
        result is measured by counting the ids before and after.
        """
        if not task_ids:
            return 0
        ids = list(task_ids)
        in_clause = placeholders(len(ids))
        count_sql = f"SELECT COUNT(*) FROM tasks WHERE id IN ({in_clause})"

        try:
            before = self.connection.execute(count_sql, ids).fetchone()[0]
            execute_with_retry(
                self.connection, f"DELETE FROM tasks WHERE id IN ({in_clause})", ids
            )
            after = self.connection.execute(count_sql, ids).fetchone()[0]
            self.connection.commit()
        except sqlite3.Error as e:
            self.connection.rollback()
            raise StorageError(f"Subtree delete rolled back: {e}") from e
        return before - after

    async def list_all(self) -> list[Task]:
        rows = self.connection.execute("SELECT * FROM tasks ORDER BY id").fetchall()
        return [row_to_task(row) for row in rows]

    async def list_filtered(
        self, filters: TaskFilters, sort: TaskSortOptions | None = None
    ) -> list[Task]:
        """Narrow by status, priority and deadline in SQL, then run the engine.

        Labels and search text are left to the engine: label matching needs
        the decoded JSON list and LIKE is not Unicode case-insensitive.
        """
        sql = "SELECT * FROM tasks WHERE 1=1"
        params: list[Any] = []

        if filters.status:
            sql += f" AND status IN ({placeholders(len(filters.status))})"
            params.extend(status.value for status in filters.status)

        if filters.priority:
            sql += f" AND priority IN ({placeholders(len(filters.priority))})"
            params.extend(filters.priority)

        if filters.deadline_range is not None:
            sql += " AND deadline IS NOT NULL"
            if filters.deadline_range.start is not None:
                sql += " AND deadline >= ?"
                params.append(to_db_datetime(filters.deadline_range.start))
            if filters.deadline_range.end is not None:
                sql += " AND deadline <= ?"
                params.append(to_db_datetime(filters.deadline_range.end))

        sql += " ORDER BY id"
        rows = self.connection.execute(sql, params).fetchall()
        return query((row_to_task(row) for row in rows), filters, sort)

    async def list_roots(self) -> list[Task]:
        rows = self.connection.execute(
            "SELECT * FROM tasks WHERE parent_id IS NULL ORDER BY id"
        ).fetchall()
        return [row_to_task(row) for row in rows]

    async def list_children(self, parent_id: int) -> list[Task]:
        rows = self.connection.execute(
            "SELECT * FROM tasks WHERE parent_id = ? ORDER BY id", (parent_id,)
        ).fetchall()
        return [row_to_task(row) for row in rows]
