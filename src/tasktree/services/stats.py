"""Summary counts for the ``stats`` command."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta

from tasktree.models import Task, TaskStats, TaskStatus

DUE_SOON_WINDOW = timedelta(days=7)


def compute_stats(tasks: Iterable[Task], now: datetime | None = None) -> TaskStats:
    """Count tasks by status and by deadline urgency.

    A task is overdue when its deadline has passed and it is not done. It is
    due soon when the deadline falls within the next seven days and it is
    neither done nor overdue.
    """
    now = now or datetime.now(UTC)
    stats = TaskStats()
    for task in tasks:
        stats.total += 1
        if task.status == TaskStatus.NOT_STARTED:
            stats.not_started += 1
        elif task.status == TaskStatus.IN_PROGRESS:
            stats.in_progress += 1
        else:
            stats.done += 1

        if task.deadline is None or task.status == TaskStatus.DONE:
            continue
        if task.deadline < now:
            stats.overdue += 1
        elif task.deadline <= now + DUE_SOON_WINDOW:
            stats.due_soon += 1
    return stats
