"""Utility functions for SQLite adapter."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from tasktree.models import Task


def now_iso() -> str:
    """Get current timestamp in ISO format.

    Returns:
        ISO format datetime string in UTC
    """
    return datetime.now(UTC).isoformat()


def to_db_datetime(value: datetime | None) -> str | None:
    """Normalize a datetime to a UTC ISO string.

    Storing every timestamp in UTC keeps text comparisons in SQL ordered
    the same way as the datetimes themselves.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat()


def row_to_dict(row: Any) -> dict[str, Any]:
    """Convert sqlite3.Row to dictionary.

    Args:
        row: sqlite3.Row object

    Returns:
        Dictionary with column names as keys
    """
    if row is None:
        return {}
    return dict(row)


def row_to_task(row: Any) -> Task:
    """Build a Task from a ``tasks`` row, decoding the JSON labels column."""
    data = row_to_dict(row)
    data["labels"] = json.loads(data.get("labels") or "[]")
    return Task.model_validate(data)


def to_db_values(fields: dict[str, Any]) -> dict[str, Any]:
    """Convert model field values to their column representation."""
    values: dict[str, Any] = {}
    for key, value in fields.items():
        if key == "labels":
            value = json.dumps(value or [])
        elif key == "deadline":
            value = to_db_datetime(value)
        elif key == "status" and value is not None:
            value = getattr(value, "value", value)
        values[key] = value
    return values


def placeholders(count: int) -> str:
    """Return ``?, ?, ...`` for an IN clause of ``count`` items."""
    return ", ".join("?" for _ in range(count))
