"""Markdown codec: the task forest as a nested bullet list.

Each task is ``- <glyph> **title**`` indented two spaces per level, followed
by optional description, labels and deadline sub-lines one level deeper.

Lossy: decoding recovers only title, status and nesting. Sub-lines are
skipped, and records get sequence numbers as ids so children can point to
their parent bullet.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import UTC, datetime

from tasktree.codecs.common import apply_export_options
from tasktree.models import DecodedBatch, ExportOptions, Task, TaskStatus, TaskTreeNode
from tasktree.services.tree_builder import build_tree, flatten

INDENT = "  "

STATUS_GLYPHS = {
    TaskStatus.NOT_STARTED: "⏳",
    TaskStatus.IN_PROGRESS: "🔄",
    TaskStatus.DONE: "✅",
}
GLYPH_STATUSES = {glyph: status for status, glyph in STATUS_GLYPHS.items()}

BULLET_RE = re.compile(r"^(\s*)- (.+)$")
TASK_RE = re.compile(
    "^(" + "|".join(STATUS_GLYPHS.values()) + r")\ufe0f?\s*\*\*(.+)\*\*"
)


def _one_line(text: str) -> str:
    return " ".join(text.split())


def _render(node: TaskTreeNode) -> list[str]:
    task = node.task
    indent = INDENT * node.level
    lines = [f"{indent}- {STATUS_GLYPHS[task.status]} **{_one_line(task.title)}**"]
    if task.description:
        description = _one_line(task.description)
        # A leading dash would read back as a bullet
        if description.startswith("-"):
            description = "\\" + description
        lines.append(f"{indent}{INDENT}{description}")
    if task.labels:
        lines.append(f"{indent}{INDENT}*Labels: {', '.join(task.labels)}*")
    if task.deadline:
        lines.append(f"{indent}{INDENT}*Deadline: {task.deadline.date().isoformat()}*")
    return lines


def encode(
    tasks: Iterable[Task],
    options: ExportOptions | None = None,
    *,
    generated_at: datetime | None = None,
) -> str:
    """Render tasks as a Markdown outline.

    Tasks whose parent is not exported are rendered as top-level bullets.
    """
    generated_at = generated_at or datetime.now(UTC)
    lines = [
        "# Task Export",
        "",
        f"Generated on: {generated_at.strftime('%Y-%m-%d %H:%M %Z').strip()}",
        "",
    ]
    for node in flatten(build_tree(apply_export_options(tasks, options))):
        lines.extend(_render(node))
    return "\n".join(lines) + "\n"


def decode(text: str) -> DecodedBatch:
    """Rebuild title, status and nesting from a Markdown outline.

    The parent of a bullet is the nearest preceding bullet with a smaller
    indentation level. Bullets without a status glyph and bold title are
    reported and skipped.
    """
    batch = DecodedBatch()
    # (level, record id) of the current ancestor chain
    stack: list[tuple[int, int]] = []
    next_id = 1

    for line_no, line in enumerate(text.splitlines(), start=1):
        bullet = BULLET_RE.match(line)
        if not bullet:
            continue
        indent, content = bullet.groups()
        match = TASK_RE.match(content.strip())
        if not match:
            batch.errors.append(f"Line {line_no}: bullet is not a task: {content.strip()!r}")
            continue

        level = len(indent.expandtabs(2)) // 2
        while stack and stack[-1][0] >= level:
            stack.pop()

        glyph, title = match.groups()
        batch.records.append(
            {
                "id": next_id,
                "title": title,
                "status": GLYPH_STATUSES[glyph].value,
                "parent_id": stack[-1][1] if stack else None,
            }
        )
        stack.append((level, next_id))
        next_id += 1

    return batch
