"""Task service - Business logic for task operations.

This service layer sits between commands and repositories. It owns the rules
that span more than one record: a parent must exist, a task may not be moved
under itself or its descendants, and deleting a task deletes its subtree.
"""

from __future__ import annotations

from typing import Any, TypeVar

import pydantic

from tasktree.exceptions import IntegrityError, NotFoundError, StorageError, ValidationError
from tasktree.models import (
    DeleteResult,
    Task,
    TaskCreate,
    TaskFilters,
    TaskSortOptions,
    TaskTreeNode,
    TaskUpdate,
)
from tasktree.repositories import TaskRepository
from tasktree.services.tree_builder import build_tree, iter_subtree_ids
from tasktree.utils.logger import get_logger

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


def describe_validation_error(error: pydantic.ValidationError) -> str:
    """Flatten a pydantic error into one readable line."""
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        message = item["msg"].removeprefix("Value error, ")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


def validate_model(model_cls: type[ModelT], data: ModelT | dict[str, Any]) -> ModelT:
    """Return ``data`` as ``model_cls``, raising ValidationError on bad input."""
    if isinstance(data, model_cls):
        return data
    try:
        return model_cls.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError(describe_validation_error(e)) from e


class TaskService:
    """Service for task business logic.

    All mutations go through this class, so the hierarchy invariants hold
    whichever repository is plugged in.
    """

    def __init__(self, task_repository: TaskRepository):
        """Initialize the task service.

        Args:
            task_repository: TaskRepository implementation for data access
        """
        self.repository = task_repository

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def find(self, task_id: int) -> Task | None:
        """Get a task by id, or None if it does not exist."""
        return await self.repository.get(task_id)

    async def get(self, task_id: int) -> Task:
        """Get a task by id.

        Raises:
            NotFoundError: If the task does not exist
        """
        task = await self.repository.get(task_id)
        if task is None:
            raise NotFoundError(task_id)
        return task

    async def list_all(self) -> list[Task]:
        return await self.repository.list_all()

    async def list_roots(self) -> list[Task]:
        return await self.repository.list_roots()

    async def list_children(self, parent_id: int) -> list[Task]:
        return await self.repository.list_children(parent_id)

    async def list_filtered(
        self,
        filters: TaskFilters | dict[str, Any] | None = None,
        sort: TaskSortOptions | dict[str, Any] | None = None,
    ) -> list[Task]:
        """List tasks matching ``filters`` in ``sort`` order.

        Args:
            filters: TaskFilters or an equivalent dict; None matches everything
            sort: TaskSortOptions or dict; None means created_at descending

        Raises:
            ValidationError: If filters or sort are malformed
        """
        filters = validate_model(TaskFilters, filters or {})
        sort = validate_model(TaskSortOptions, sort or {})
        return await self.repository.list_filtered(filters, sort)

    async def tree(
        self,
        filters: TaskFilters | dict[str, Any] | None = None,
        sort: TaskSortOptions | dict[str, Any] | None = None,
    ) -> list[TaskTreeNode]:
        """Filtered, sorted view arranged as a forest.

        Tasks whose parent was filtered out are shown as roots.
        """
        return build_tree(await self.list_filtered(filters, sort))

    async def collect_descendants(self, task_id: int) -> list[int]:
        """Ids of every descendant of ``task_id`` (not including it), breadth first."""
        return iter_subtree_ids(await self.repository.list_all(), task_id)[1:]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def _require_parent(self, parent_id: int) -> None:
        if await self.repository.get(parent_id) is None:
            raise IntegrityError(f"Parent task {parent_id} does not exist")

    async def create(self, data: TaskCreate | dict[str, Any]) -> Task:
        """Create a task; the repository assigns id and timestamps.

        Raises:
            ValidationError: If the data is malformed
            IntegrityError: If ``parent_id`` does not exist
        """
        task_data = validate_model(TaskCreate, data)
        if task_data.parent_id is not None:
            await self._require_parent(task_data.parent_id)

        task = await self.repository.create(task_data)
        logger.info("created task %s (parent=%s)", task.id, task.parent_id)
        return task

    async def update(self, task_id: int, patch: TaskUpdate | dict[str, Any]) -> Task:
        """Apply the fields set on ``patch`` and refresh ``updated_at``.

        Raises:
            ValidationError: If the patch is malformed
            NotFoundError: If the task does not exist
            IntegrityError: If the new parent is missing, the task itself or
                one of its descendants
        """
        updates = validate_model(TaskUpdate, patch)
        await self.get(task_id)

        changes = updates.changes()
        new_parent = changes.get("parent_id")
        if new_parent is not None:
            if new_parent == task_id:
                raise IntegrityError(f"Task {task_id} cannot be its own parent")
            await self._require_parent(new_parent)
            if new_parent in await self.collect_descendants(task_id):
                raise IntegrityError(
                    f"Moving task {task_id} under its descendant {new_parent} would create a cycle"
                )

        task = await self.repository.update(task_id, updates)
        if task is None:
            raise NotFoundError(task_id)
        logger.info("updated task %s (%s)", task_id, ", ".join(sorted(changes)) or "touch")
        return task

    async def delete_subtree(self, task_id: int) -> DeleteResult:
        """Delete a task and all of its descendants.

        Two phases: collect the subtree ids with a worklist, then ask the
        repository to remove exactly those ids in one call.

        Returns:
            DeleteResult listing removed ids (empty if the task did not exist)

        Raises:
            StorageError: If the backend removed fewer records than collected
        """
        subtree = iter_subtree_ids(await self.repository.list_all(), task_id)
        if not subtree:
            return DeleteResult(task_id=task_id)

        removed = await self.repository.delete_many(subtree)
        if removed < len(subtree):
            logger.error(
                "partial cascade for task %s: removed %d of %d", task_id, removed, len(subtree)
            )
            raise StorageError(
                f"Deleting task {task_id} removed {removed} of {len(subtree)} records"
            )

        logger.info("deleted task %s with %d descendants", task_id, len(subtree) - 1)
        return DeleteResult(task_id=task_id, removed_ids=subtree)

    async def delete(self, task_id: int) -> bool:
        """Delete a task and its subtree; False if the task did not exist."""
        result = await self.delete_subtree(task_id)
        return result.deleted
