"""Helpers shared by the codecs."""

from __future__ import annotations

from collections.abc import Iterable

from tasktree.models import ExportOptions, Task, TaskStatus


def apply_export_options(tasks: Iterable[Task], options: ExportOptions | None) -> list[Task]:
    """Drop completed tasks and blank excluded fields as ``options`` ask.

    The input tasks are not modified.
    """
    options = options or ExportOptions()
    blanked: dict = {}
    if not options.include_description:
        blanked["description"] = None
    if not options.include_labels:
        blanked["labels"] = []

    prepared = []
    for task in tasks:
        if not options.include_completed and task.status == TaskStatus.DONE:
            continue
        prepared.append(task.model_copy(update=blanked) if blanked else task)
    return prepared
