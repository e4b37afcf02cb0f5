"""Repository abstraction layer for tasktree.

This module defines the storage port every backend implements, following the
hexagonal architecture (Ports & Adapters) pattern. The services only talk to
:class:`TaskRepository`; adapters in :mod:`tasktree.adapters` provide the
in-memory, local SQLite and remote REST implementations.

All backends honour the same contract, including cascade delete: removing a
task removes its whole descendant subtree, whether the backend does that with
a foreign key constraint or by hand.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from tasktree.models import Task, TaskCreate, TaskFilters, TaskSortOptions, TaskUpdate


class TaskRepository(ABC):
    """Abstract base class for task persistence operations.

    Repositories are async context managers: ``async with repo:`` connects
    on entry and disconnects on exit.
    """

    async def __aenter__(self) -> TaskRepository:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()

    @abstractmethod
    async def connect(self) -> None:
        """Open the backend connection.

        Raises:
            StorageError: If the backend is unreachable
        """
        raise NotImplementedError("TaskRepository.connect() must be implemented by adapter")

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the backend connection. Safe to call twice."""
        raise NotImplementedError(
            "TaskRepository.disconnect() must be implemented by adapter"
        )

    @abstractmethod
    async def ensure_initialized(self, seed: Sequence[TaskCreate] | None = None) -> int:
        """Prepare the backend schema and optionally seed an empty store.

        Idempotent: if the store already holds tasks nothing is seeded.

        Args:
            seed: Tasks to insert into an empty store. ``parent_id`` values
                are 1-based positions within ``seed`` and are rewired to the
                ids assigned on insert.

        Returns:
            Number of seeded tasks
        """
        raise NotImplementedError(
            "TaskRepository.ensure_initialized() must be implemented by adapter"
        )

    @abstractmethod
    async def create(self, task_data: TaskCreate) -> Task:
        """Create a new task.

        Args:
            task_data: TaskCreate object with task details

        Returns:
            Created Task with generated id and timestamps

        Raises:
            StorageError: If the backend rejects the insert
        """
        raise NotImplementedError("TaskRepository.create() must be implemented by adapter")

    @abstractmethod
    async def get(self, task_id: int) -> Task | None:
        """Get a task by id, or None if it does not exist."""
        raise NotImplementedError("TaskRepository.get() must be implemented by adapter")

    @abstractmethod
    async def update(self, task_id: int, updates: TaskUpdate) -> Task | None:
        """Merge the fields set on ``updates`` into an existing task.

        ``updated_at`` is refreshed on every call.

        Returns:
            Updated Task, or None if the task does not exist
        """
        raise NotImplementedError("TaskRepository.update() must be implemented by adapter")

    @abstractmethod
    async def delete(self, task_id: int) -> bool:
        """Delete a task and, recursively, every descendant.

        Returns:
            True if at least one record was removed, False if the task did
            not exist
        """
        raise NotImplementedError("TaskRepository.delete() must be implemented by adapter")

    @abstractmethod
    async def delete_many(self, task_ids: Sequence[int]) -> int:
        """Remove the given ids as one unit.

        Used by the cascade delete once it has collected a subtree.

        Returns:
            Number of records removed

        Raises:
            StorageError: If the removal failed part-way
        """
        raise NotImplementedError(
            "TaskRepository.delete_many() must be implemented by adapter"
        )

    @abstractmethod
    async def list_all(self) -> list[Task]:
        """List every task in storage order."""
        raise NotImplementedError("TaskRepository.list_all() must be implemented by adapter")

    @abstractmethod
    async def list_filtered(
        self, filters: TaskFilters, sort: TaskSortOptions | None = None
    ) -> list[Task]:
        """List tasks matching ``filters`` ordered by ``sort``.

        Results must equal ``query(list_all(), filters, sort)``.
        """
        raise NotImplementedError(
            "TaskRepository.list_filtered() must be implemented by adapter"
        )

    @abstractmethod
    async def list_roots(self) -> list[Task]:
        """List tasks without a parent."""
        raise NotImplementedError(
            "TaskRepository.list_roots() must be implemented by adapter"
        )

    @abstractmethod
    async def list_children(self, parent_id: int) -> list[Task]:
        """List direct children of ``parent_id``."""
        raise NotImplementedError(
            "TaskRepository.list_children() must be implemented by adapter"
        )
