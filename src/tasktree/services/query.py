"""Filter and sort engine.

``query`` is the single definition of filter/sort semantics. Backends that
push part of a filter into their own query language still run the result
through it, so every backend answers the same question the same way.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any

from tasktree.exceptions import ValidationError
from tasktree.models import (
    SortDirection,
    SortField,
    Task,
    TaskFilters,
    TaskSortOptions,
)

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

DEFAULT_SORT = TaskSortOptions()

_SORT_KEYS: dict[SortField, Callable[[Task], Any]] = {
    SortField.TITLE: lambda t: t.title.casefold(),
    SortField.STATUS: lambda t: t.status.value,
    SortField.DEADLINE: lambda t: t.deadline or EPOCH,
    SortField.PRIORITY: lambda t: t.priority,
    SortField.CREATED_AT: lambda t: t.created_at,
    SortField.UPDATED_AT: lambda t: t.updated_at,
}


def matches(task: Task, filters: TaskFilters) -> bool:
    """Return True when ``task`` satisfies every set dimension of ``filters``."""
    if filters.status and task.status not in filters.status:
        return False

    if filters.labels and not set(task.labels) & set(filters.labels):
        return False

    if filters.priority and task.priority not in filters.priority:
        return False

    if filters.deadline_range is not None:
        if task.deadline is None:
            return False
        start, end = filters.deadline_range.start, filters.deadline_range.end
        if start is not None and task.deadline < start:
            return False
        if end is not None and task.deadline > end:
            return False

    if filters.search_text and filters.search_text.strip():
        needle = filters.search_text.strip().casefold()
        haystacks = [task.title, task.description or ""]
        if not any(needle in text.casefold() for text in haystacks):
            return False

    return True


def sort_tasks(tasks: Iterable[Task], sort: TaskSortOptions | None = None) -> list[Task]:
    """Stable sort by a single key; ties keep their input order in both directions."""
    sort = sort or DEFAULT_SORT
    return sorted(
        tasks,
        key=_SORT_KEYS[sort.field],
        reverse=sort.direction == SortDirection.DESC,
    )


def query(
    tasks: Iterable[Task],
    filters: TaskFilters | None = None,
    sort: TaskSortOptions | None = None,
) -> list[Task]:
    """Filter then sort a flat task list.

    Args:
        tasks: Flat task collection
        filters: Conjunctive filters; None keeps everything
        sort: Sort key and direction; None means created_at descending

    Returns:
        New list of the matching tasks in sorted order
    """
    if filters is not None:
        tasks = [task for task in tasks if matches(task, filters)]
    return sort_tasks(tasks, sort)


def parse_sort(value: str | None) -> TaskSortOptions:
    """Parse ``field[:direction]`` (e.g. ``priority:desc``).

    An empty value gives the default order. A field without a direction
    sorts ascending.
    """
    if not value or not value.strip():
        return DEFAULT_SORT

    field_name, _, direction = value.strip().partition(":")
    try:
        field = SortField(field_name.strip().lower())
    except ValueError as e:
        choices = ", ".join(f.value for f in SortField)
        raise ValidationError(
            f"Invalid sort field '{field_name}'. Choose from: {choices}"
        ) from e
    try:
        order = SortDirection(direction.strip().lower() or SortDirection.ASC.value)
    except ValueError as e:
        raise ValidationError(
            f"Invalid sort direction '{direction}'. Use 'asc' or 'desc'"
        ) from e
    return TaskSortOptions(field=field, direction=order)
