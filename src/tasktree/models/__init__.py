"""tasktree domain models.

This package contains Pydantic models that represent the core domain entities
of the application. They are used throughout the application for data
validation, serialization, and type safety.
"""

from .config_models import AppConfig, Context
from .core import (
    PRIORITY_MAX,
    PRIORITY_MIN,
    DeadlineRange,
    SortDirection,
    SortField,
    Task,
    TaskCreate,
    TaskFilters,
    TaskSortOptions,
    TaskStats,
    TaskStatus,
    TaskTreeNode,
    TaskUpdate,
)
from .transfer import (
    DecodedBatch,
    DeleteResult,
    ExportFormat,
    ExportOptions,
    ImportRecord,
    ImportResult,
)

__all__ = [
    # Task models
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TaskStatus",
    "TaskTreeNode",
    "TaskStats",
    "PRIORITY_MIN",
    "PRIORITY_MAX",
    # Query models
    "TaskFilters",
    "DeadlineRange",
    "TaskSortOptions",
    "SortField",
    "SortDirection",
    # Transfer models
    "ExportFormat",
    "ExportOptions",
    "ImportRecord",
    "ImportResult",
    "DecodedBatch",
    "DeleteResult",
    # Config models
    "AppConfig",
    "Context",
]
