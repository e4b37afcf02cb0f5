"""Output formatters for different formats."""

import json
from datetime import UTC, datetime
from typing import Any

import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from tasktree.models import Task, TaskStats, TaskStatus, TaskTreeNode

console = Console()

STATUS_ICONS = {
    TaskStatus.NOT_STARTED: "⏳",
    TaskStatus.IN_PROGRESS: "🔄",
    TaskStatus.DONE: "✅",
}

STATUS_STYLES = {
    TaskStatus.NOT_STARTED: "",
    TaskStatus.IN_PROGRESS: "yellow",
    TaskStatus.DONE: "dim",
}

# Priority 0 is "none" and is not shown
PRIORITY_COLORS = {
    1: "green",
    2: "cyan",
    3: "yellow",
    4: "bright_red",
    5: "bold red",
}

TABLE_COLUMNS = ["id", "title", "status", "priority", "deadline", "parent_id", "labels"]


def format_output(data: Any, output_format: str = "pretty") -> None:
    """Format and display output based on format."""
    if output_format == "json":
        print(json.dumps(data, indent=2, default=str, ensure_ascii=False))
    elif output_format == "yaml":
        print(yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True))
    elif output_format == "table":
        format_table(data)
    else:
        format_pretty(data)


def format_table(data: Any) -> None:
    """Format data as a table."""
    if not data:
        console.print("[yellow]No items found[/yellow]")
        return

    if isinstance(data, dict):
        format_single_item(data)
    elif isinstance(data, list) and isinstance(data[0], dict):
        format_dict_table(data)
    else:
        for item in data:
            console.print(item)


def _cell(value: Any) -> str:
    if isinstance(value, bool):
        return "✓" if value else "✗"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if value is None:
        return "-"
    return str(value)


def format_dict_table(items: list[dict]) -> None:
    """Format a list of dictionaries as a table."""
    columns = [col for col in TABLE_COLUMNS if col in items[0]] or list(items[0].keys())

    table = Table(show_header=True, header_style="bold magenta")
    for col in columns:
        table.add_column(col.replace("_", " ").title())

    for item in items:
        table.add_row(*(escape(_cell(item.get(col))) for col in columns))

    console.print(table)


def format_single_item(item: dict) -> None:
    """Format a single item as key-value pairs."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")

    for key, value in item.items():
        table.add_row(key.replace("_", " ").title(), escape(_cell(value)))

    console.print(table)


def format_pretty(data: Any) -> None:
    """Pretty output for plain data; task trees go through format_task_tree."""
    if isinstance(data, dict):
        format_single_item(data)
    else:
        format_table(data)


def format_error(message: str) -> None:
    """Format and display an error message."""
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    console.print(f"[bold green]Success:[/bold green] {escape(message)}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {escape(message)}")


def format_info(message: str) -> None:
    """Format and display an info message."""
    console.print(f"[bold blue]Info:[/bold blue] {escape(message)}")


# ============================================================================
# Task rendering
# ============================================================================


def is_overdue(task: Task, now: datetime | None = None) -> bool:
    """A task is overdue when its deadline has passed and it is not done."""
    if task.deadline is None or task.status == TaskStatus.DONE:
        return False
    return task.deadline < (now or datetime.now(UTC))


def format_deadline(deadline: datetime) -> str:
    """Compact deadline: ``DD/MM HH:MM``, with the year when it is not this year."""
    now = datetime.now(UTC)
    if deadline.year != now.year:
        return deadline.strftime("%d/%m/%Y %H:%M")
    return deadline.strftime("%d/%m %H:%M")


def task_label(task: Task) -> Text:
    """One-line rendering of a task used by the tree and list views."""
    line = Text()
    line.append(f"{STATUS_ICONS[task.status]} ")
    line.append(task.title, style=STATUS_STYLES[task.status] or "bold")
    line.append(f"  #{task.id}", style="dim")

    if task.priority:
        line.append(f"  P{task.priority}", style=PRIORITY_COLORS[task.priority])
    if task.deadline:
        style = "bold red" if is_overdue(task) else "cyan"
        line.append(f"  • {format_deadline(task.deadline)}", style=style)
    for label in task.labels:
        line.append(f" #{label}", style="blue")
    return line


def format_task_tree(forest: list[TaskTreeNode], title: str = "Tasks") -> None:
    """Render a forest as a Rich tree."""
    if not forest:
        console.print("[yellow]No tasks found[/yellow]")
        return

    root = Tree(Text(f"📋 {title}", style="bold cyan"), guide_style="dim")
    # (node, rich branch to attach it to)
    stack = [(node, root) for node in reversed(forest)]
    while stack:
        node, branch = stack.pop()
        child_branch = branch.add(task_label(node.task), expanded=node.expanded)
        stack.extend((child, child_branch) for child in reversed(node.children))
    console.print(root)


def format_task_detail(task: Task, children: list[Task] | None = None) -> None:
    """Show every field of one task."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value")

    table.add_row("ID", str(task.id))
    table.add_row("Title", Text(task.title, style="bold"))
    table.add_row("Status", f"{STATUS_ICONS[task.status]} {task.status.value}")
    table.add_row("Priority", str(task.priority))
    table.add_row(
        "Deadline",
        Text(
            task.deadline.isoformat() if task.deadline else "-",
            style="bold red" if is_overdue(task) else "",
        ),
    )
    table.add_row("Parent", "-" if task.parent_id is None else f"#{task.parent_id}")
    table.add_row("Labels", escape(", ".join(task.labels)) or "-")
    table.add_row("Description", escape(task.description or "-"))
    table.add_row("Created", task.created_at.isoformat())
    table.add_row("Updated", task.updated_at.isoformat())
    if children is not None:
        table.add_row("Subtasks", str(len(children)))

    console.print(table)


def format_stats(stats: TaskStats) -> None:
    """Dashboard counts."""
    table = Table(title="Task statistics", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")

    table.add_row("Total", str(stats.total))
    table.add_row(f"{STATUS_ICONS[TaskStatus.NOT_STARTED]} Not started", str(stats.not_started))
    table.add_row(f"{STATUS_ICONS[TaskStatus.IN_PROGRESS]} In progress", str(stats.in_progress))
    table.add_row(f"{STATUS_ICONS[TaskStatus.DONE]} Done", str(stats.done))
    table.add_row(Text("Overdue", style="bold red"), str(stats.overdue))
    table.add_row(Text("Due within 7 days", style="yellow"), str(stats.due_soon))

    console.print(table)
