"""Exception hierarchy for tasktree.

Every error raised by the core derives from :class:`TaskTreeError`, so the CLI
can map each class to a semantic exit code in one place.
"""

from __future__ import annotations


class TaskTreeError(Exception):
    """Base class for all tasktree errors."""


class ValidationError(TaskTreeError):
    """Malformed input to create/update/import (empty title, bad priority, unknown status)."""


class NotFoundError(TaskTreeError):
    """A task id does not exist in the store."""

    def __init__(self, task_id: int):
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class IntegrityError(TaskTreeError):
    """A parent reference is unresolvable or would create a cycle."""


class StorageError(TaskTreeError):
    """The storage backend is unreachable or rejected an operation."""


class DecodeError(TaskTreeError):
    """Import text could not be parsed at all."""
