"""Services module for tasktree - Business logic layer."""

from .task_service import TaskService

__all__ = [
    "TaskService",
]
