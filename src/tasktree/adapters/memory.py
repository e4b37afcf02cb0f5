"""In-memory implementation of TaskRepository.

Used for the ``memory`` context and as the fast backend in tests. Records
live in an insertion-ordered dict; ids come from a monotonic counter and are
never reused, even after deletes.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from tasktree.models import Task, TaskCreate, TaskFilters, TaskSortOptions, TaskUpdate
from tasktree.repositories import TaskRepository
from tasktree.services.query import query
from tasktree.services.tree_builder import iter_subtree_ids


class InMemoryTaskRepository(TaskRepository):
    """Process-local task store."""

    def __init__(self, tasks: Sequence[Task] | None = None):
        self._tasks: dict[int, Task] = {}
        self._next_id = 1
        for task in tasks or []:
            self._tasks[task.id] = task
            self._next_id = max(self._next_id, task.id + 1)

    async def connect(self) -> None:
        return None

    async def disconnect(self) -> None:
        return None

    async def ensure_initialized(self, seed: Sequence[TaskCreate] | None = None) -> int:
        if self._tasks or not seed:
            return 0
        assigned: dict[int, int] = {}
        for position, task_data in enumerate(seed, start=1):
            parent_id = assigned.get(task_data.parent_id) if task_data.parent_id else None
            task = await self.create(task_data.model_copy(update={"parent_id": parent_id}))
            assigned[position] = task.id
        return len(seed)

    async def create(self, task_data: TaskCreate) -> Task:
        now = datetime.now(UTC)
        task = Task(
            id=self._next_id,
            created_at=now,
            updated_at=now,
            **task_data.model_dump(),
        )
        self._tasks[task.id] = task
        self._next_id += 1
        return task

    async def get(self, task_id: int) -> Task | None:
        return self._tasks.get(task_id)

    async def update(self, task_id: int, updates: TaskUpdate) -> Task | None:
        current = self._tasks.get(task_id)
        if current is None:
            return None
        merged = current.model_dump()
        merged.update(updates.changes())
        merged["updated_at"] = datetime.now(UTC)
        task = Task(**merged)
        self._tasks[task_id] = task
        return task

    async def delete(self, task_id: int) -> bool:
        subtree = iter_subtree_ids(self._tasks.values(), task_id)
        return await self.delete_many(subtree) > 0

    async def delete_many(self, task_ids: Sequence[int]) -> int:
        removed = 0
        for task_id in task_ids:
            if self._tasks.pop(task_id, None) is not None:
                removed += 1
        return removed

    async def list_all(self) -> list[Task]:
        return list(self._tasks.values())

    async def list_filtered(
        self, filters: TaskFilters, sort: TaskSortOptions | None = None
    ) -> list[Task]:
        return query(self._tasks.values(), filters, sort)

    async def list_roots(self) -> list[Task]:
        return [task for task in self._tasks.values() if task.is_root]

    async def list_children(self, parent_id: int) -> list[Task]:
        return [task for task in self._tasks.values() if task.parent_id == parent_id]
