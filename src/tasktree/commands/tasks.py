"""Task commands: add, show, edit, delete, list."""

import typer

from tasktree.models import TaskStatus
from tasktree.services.context_manager import get_task_service
from tasktree.services.query import parse_sort
from tasktree.services.tree_builder import build_tree
from tasktree.utils.ui.formatters import (
    format_info,
    format_output,
    format_success,
    format_task_detail,
    format_task_tree,
)

from .decorators import command_wrapper
from .options import deadline_range_option, parse_datetime_option


@command_wrapper
async def add_task(
    title: str = typer.Argument(..., help="Task title"),
    description: str | None = typer.Option(None, "--description", "-d", help="Details"),
    status: TaskStatus = typer.Option(TaskStatus.NOT_STARTED, "--status", "-s"),
    deadline: str | None = typer.Option(
        None, "--deadline", help="ISO date or datetime, e.g. 2025-03-01T17:00"
    ),
    parent: int | None = typer.Option(None, "--parent", "-p", help="Parent task ID"),
    label: list[str] | None = typer.Option(None, "--label", "-l", help="Label (repeatable)"),
    priority: int = typer.Option(0, "--priority", help="Priority 0-5"),
    output: str = typer.Option("pretty", "--output", "-o", help="pretty, json or yaml"),
) -> None:
    """Create a task, optionally under a parent."""
    service = get_task_service()
    async with service.repository:
        task = await service.create(
            {
                "title": title,
                "description": description,
                "status": status,
                "deadline": parse_datetime_option(deadline, "--deadline"),
                "parent_id": parent,
                "labels": label or [],
                "priority": priority,
            }
        )

    if output in ("json", "yaml"):
        format_output(task.model_dump(mode="json"), output)
    else:
        format_success(f"Created task #{task.id}: {task.title}")


@command_wrapper
async def show_task(
    task_id: int = typer.Argument(..., help="Task ID"),
    output: str = typer.Option("pretty", "--output", "-o", help="pretty, json or yaml"),
) -> None:
    """Show one task."""
    service = get_task_service()
    async with service.repository:
        task = await service.get(task_id)
        children = await service.list_children(task_id)

    if output in ("json", "yaml"):
        format_output(task.model_dump(mode="json"), output)
    else:
        format_task_detail(task, children)


@command_wrapper
async def edit_task(
    task_id: int = typer.Argument(..., help="Task ID"),
    title: str | None = typer.Option(None, "--title", "-t"),
    description: str | None = typer.Option(None, "--description", "-d"),
    status: TaskStatus | None = typer.Option(None, "--status", "-s"),
    deadline: str | None = typer.Option(None, "--deadline"),
    parent: int | None = typer.Option(None, "--parent", "-p", help="Move under this task"),
    label: list[str] | None = typer.Option(
        None, "--label", "-l", help="Replace labels (repeatable)"
    ),
    priority: int | None = typer.Option(None, "--priority"),
    clear_deadline: bool = typer.Option(False, "--clear-deadline"),
    clear_parent: bool = typer.Option(False, "--clear-parent", help="Make it a root task"),
    clear_description: bool = typer.Option(False, "--clear-description"),
) -> None:
    """Change fields of a task."""
    patch: dict = {}
    if title is not None:
        patch["title"] = title
    if description is not None:
        patch["description"] = description
    if status is not None:
        patch["status"] = status
    if deadline is not None:
        patch["deadline"] = parse_datetime_option(deadline, "--deadline")
    if parent is not None:
        patch["parent_id"] = parent
    if label:
        patch["labels"] = label
    if priority is not None:
        patch["priority"] = priority
    if clear_deadline:
        patch["deadline"] = None
    if clear_parent:
        patch["parent_id"] = None
    if clear_description:
        patch["description"] = None

    if not patch:
        format_info("Nothing to change")
        return

    service = get_task_service()
    async with service.repository:
        task = await service.update(task_id, patch)
    format_success(f"Updated task #{task.id}: {', '.join(sorted(patch))}")


@command_wrapper
async def delete_task(
    task_id: int = typer.Argument(..., help="Task ID"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Delete a task together with all of its subtasks."""
    service = get_task_service()
    async with service.repository:
        task = await service.get(task_id)

        if not force:
            descendants = await service.collect_descendants(task_id)
            suffix = f" and {len(descendants)} subtask(s)" if descendants else ""
            if not typer.confirm(f"Delete task '{task.title}'{suffix}?"):
                format_info("Cancelled")
                raise typer.Exit(0)

        result = await service.delete_subtree(task_id)

    format_success(f"Deleted {result.count} task(s)")


@command_wrapper
async def list_tasks(
    status: list[TaskStatus] | None = typer.Option(
        None, "--status", "-s", help="Keep these statuses (repeatable)"
    ),
    label: list[str] | None = typer.Option(
        None, "--label", "-l", help="Keep tasks with any of these labels"
    ),
    priority: list[int] | None = typer.Option(
        None, "--priority", help="Keep these priorities (repeatable)"
    ),
    due_after: str | None = typer.Option(None, "--due-after", help="Deadline on or after"),
    due_before: str | None = typer.Option(None, "--due-before", help="Deadline on or before"),
    search: str | None = typer.Option(None, "--search", "-q", help="Text in title or description"),
    sort: str | None = typer.Option(
        None, "--sort", help="field[:asc|desc], default created_at:desc"
    ),
    output: str = typer.Option(
        "pretty", "--output", "-o", help="pretty (tree), table, json or yaml"
    ),
) -> None:
    """List tasks as a tree, filtered and sorted."""
    filters = {
        "status": status or None,
        "labels": label or None,
        "priority": priority or None,
        "deadline_range": deadline_range_option(due_after, due_before),
        "search_text": search,
    }
    sort_options = parse_sort(sort)

    service = get_task_service()
    async with service.repository:
        tasks = await service.list_filtered(filters, sort_options)

    if output == "pretty":
        format_task_tree(build_tree(tasks))
    else:
        format_output([task.model_dump(mode="json") for task in tasks], output)
