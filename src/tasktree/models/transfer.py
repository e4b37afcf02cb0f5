"""Import/export data models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from .core import PRIORITY_MAX, PRIORITY_MIN, TaskCreate, TaskStatus, ensure_aware, normalize_labels


class ExportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"
    MARKDOWN = "markdown"


class ExportOptions(BaseModel):
    """Options applied before a task set is encoded.

    Attributes:
        include_completed: Keep tasks with status ``done``
        include_description: Keep descriptions (blanked otherwise)
        include_labels: Keep labels (emptied otherwise)
    """

    include_completed: bool = True
    include_description: bool = True
    include_labels: bool = True


class ImportRecord(BaseModel):
    """One decoded record, validated before it is replayed through create.

    ``id`` is the record's identity inside the imported text (the original id
    for JSON, a bullet sequence number for Markdown, absent for CSV). It is
    only used to rewire ``parent_id`` references within the same batch.
    """

    id: int | None = None
    title: str
    description: str | None = None
    status: TaskStatus = TaskStatus.NOT_STARTED
    deadline: datetime | None = None
    parent_id: int | None = None
    labels: list[str] = Field(default_factory=list)
    priority: int = Field(default=0, ge=PRIORITY_MIN, le=PRIORITY_MAX)

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, v):
        if not isinstance(v, str) or not v.strip():
            raise ValueError("title must be a non-empty string")
        return v.strip()

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return v

    @field_validator("deadline", "parent_id", mode="before")
    @classmethod
    def _blank_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("deadline")
    @classmethod
    def _aware(cls, v: datetime | None) -> datetime | None:
        return ensure_aware(v)

    @field_validator("labels", mode="before")
    @classmethod
    def _labels(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(";")
        return normalize_labels(v)

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return 0
        return v

    def to_create(self, parent_id: int | None) -> TaskCreate:
        return TaskCreate(
            title=self.title,
            description=self.description,
            status=self.status,
            deadline=self.deadline,
            parent_id=parent_id,
            labels=self.labels,
            priority=self.priority,
        )


class DecodedBatch(BaseModel):
    """Raw records produced by a decoder plus the rows it had to skip."""

    records: list[dict] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


class ImportResult(BaseModel):
    """Outcome of an import batch.

    ``success`` is False only when the text could not be decoded at all;
    partial success is reported through ``imported_count`` and ``errors``.
    """

    success: bool = True
    imported_count: int = 0
    errors: list[str] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


class DeleteResult(BaseModel):
    """Ids removed by a cascade delete (target first, then descendants)."""

    task_id: int
    removed_ids: list[int] = Field(default_factory=list)

    @property
    def deleted(self) -> bool:
        return bool(self.removed_ids)

    @property
    def count(self) -> int:
        return len(self.removed_ids)
