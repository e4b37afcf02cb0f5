"""Task data models."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

PRIORITY_MIN = 0
PRIORITY_MAX = 5


class TaskStatus(str, Enum):
    """Task lifecycle status."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    DONE = "done"


def ensure_aware(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes; aware datetimes pass through."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def normalize_labels(labels: list[str] | None) -> list[str]:
    """Strip, drop empties and collapse duplicates (first occurrence wins)."""
    seen: dict[str, None] = {}
    for label in labels or []:
        label = str(label).strip()
        if label and label not in seen:
            seen[label] = None
    return list(seen)


def _check_title(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("title must not be empty")
    return value


class Task(BaseModel):
    """Task model representing a complete task entity.

    Attributes:
        id: Identifier assigned by the storage backend
        title: Short task title (non-empty)
        description: Optional detailed description
        status: Lifecycle status
        deadline: Optional time zone-aware deadline
        parent_id: Id of the parent task, None for root tasks
        created_at: Creation timestamp (immutable)
        updated_at: Last update timestamp
        labels: Free-text labels with set semantics
        priority: Priority level (0-5)
    """

    id: int
    title: str
    description: str | None = None
    status: TaskStatus = TaskStatus.NOT_STARTED
    deadline: datetime | None = None
    parent_id: int | None = None
    created_at: datetime
    updated_at: datetime
    labels: list[str] = Field(default_factory=list)
    priority: int = Field(default=0, ge=PRIORITY_MIN, le=PRIORITY_MAX)

    @field_validator("title")
    @classmethod
    def _title(cls, v: str) -> str:
        return _check_title(v)

    @field_validator("deadline", "created_at", "updated_at")
    @classmethod
    def _aware(cls, v: datetime | None) -> datetime | None:
        return ensure_aware(v)

    @field_validator("labels")
    @classmethod
    def _labels(cls, v: list[str]) -> list[str]:
        return normalize_labels(v)

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


class TaskCreate(BaseModel):
    """Model for creating a new task.

    Attributes:
        title: Task title (required)
        description: Optional detailed description
        status: Initial status (default: not_started)
        deadline: Optional deadline
        parent_id: Optional parent task id for subtasks
        labels: Labels (default: none)
        priority: Priority level 0-5 (default: 0)
    """

    title: str
    description: str | None = None
    status: TaskStatus = TaskStatus.NOT_STARTED
    deadline: datetime | None = None
    parent_id: int | None = None
    labels: list[str] = Field(default_factory=list)
    priority: int = Field(default=0, ge=PRIORITY_MIN, le=PRIORITY_MAX)

    @field_validator("title")
    @classmethod
    def _title(cls, v: str) -> str:
        return _check_title(v)

    @field_validator("deadline")
    @classmethod
    def _aware(cls, v: datetime | None) -> datetime | None:
        return ensure_aware(v)

    @field_validator("labels")
    @classmethod
    def _labels(cls, v: list[str]) -> list[str]:
        return normalize_labels(v)


class TaskUpdate(BaseModel):
    """Model for updating an existing task.

    All fields are optional. Only fields explicitly set by the caller are
    applied, so ``TaskUpdate(deadline=None)`` clears the deadline while
    ``TaskUpdate()`` changes nothing.
    """

    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None
    deadline: datetime | None = None
    parent_id: int | None = None
    labels: list[str] | None = None
    priority: int | None = Field(default=None, ge=PRIORITY_MIN, le=PRIORITY_MAX)

    @field_validator("title")
    @classmethod
    def _title(cls, v: str | None) -> str | None:
        return None if v is None else _check_title(v)

    @field_validator("deadline")
    @classmethod
    def _aware(cls, v: datetime | None) -> datetime | None:
        return ensure_aware(v)

    @field_validator("labels")
    @classmethod
    def _labels(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else normalize_labels(v)

    @model_validator(mode="after")
    def _required_fields_not_cleared(self) -> TaskUpdate:
        for name in ("title", "status", "labels", "priority"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")
        return self

    def changes(self) -> dict:
        """Return only the fields the caller set."""
        return self.model_dump(exclude_unset=True)


class DeadlineRange(BaseModel):
    """Inclusive deadline bounds; a missing bound is unbounded on that side."""

    model_config = ConfigDict(extra="forbid")

    start: datetime | None = None
    end: datetime | None = None

    @field_validator("start", "end")
    @classmethod
    def _aware(cls, v: datetime | None) -> datetime | None:
        return ensure_aware(v)

    @model_validator(mode="after")
    def _ordered(self) -> DeadlineRange:
        if self.start and self.end and self.start > self.end:
            raise ValueError("deadline range start must not be after end")
        return self


class TaskFilters(BaseModel):
    """Filters for querying tasks.

    Dimensions combine with AND. A dimension that is None or empty does
    not constrain the result.

    Attributes:
        status: Keep tasks whose status is in the list
        labels: Keep tasks sharing at least one label with the list
        priority: Keep tasks whose priority is in the list
        deadline_range: Keep tasks with a deadline inside the range
        search_text: Case-insensitive substring of title or description
    """

    model_config = ConfigDict(extra="forbid")

    status: list[TaskStatus] | None = None
    labels: list[str] | None = None
    priority: list[int] | None = None
    deadline_range: DeadlineRange | None = None
    search_text: str | None = None

    @field_validator("priority")
    @classmethod
    def _priority_range(cls, v: list[int] | None) -> list[int] | None:
        for p in v or []:
            if not PRIORITY_MIN <= p <= PRIORITY_MAX:
                raise ValueError(f"priority filter {p} outside {PRIORITY_MIN}-{PRIORITY_MAX}")
        return v


class SortField(str, Enum):
    TITLE = "title"
    STATUS = "status"
    DEADLINE = "deadline"
    PRIORITY = "priority"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class TaskSortOptions(BaseModel):
    """Single sort key and direction."""

    model_config = ConfigDict(extra="forbid")

    field: SortField = SortField.CREATED_AT
    direction: SortDirection = SortDirection.DESC


class TaskTreeNode(BaseModel):
    """A task plus its nested children; derived, never persisted.

    ``expanded`` belongs to the presentation layer.
    """

    task: Task
    children: list[TaskTreeNode] = Field(default_factory=list)
    level: int = Field(default=0, ge=0)
    expanded: bool = True


class TaskStats(BaseModel):
    """Counts shown on the dashboard."""

    total: int = 0
    not_started: int = 0
    in_progress: int = 0
    done: int = 0
    overdue: int = 0
    due_soon: int = 0
