"""Unit tests for tasktree.utils.ui.formatters."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta

import yaml
from conftest import make_task

from tasktree.models import TaskStats, TaskStatus, TaskTreeNode
from tasktree.utils.ui.formatters import (
    format_deadline,
    format_error,
    format_output,
    format_stats,
    format_task_detail,
    format_task_tree,
    is_overdue,
    task_label,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Plain data
# ---------------------------------------------------------------------------


class TestFormatOutput:
    def test_json_keeps_unicode(self, capsys):
        format_output({"title": "Café ✅"}, "json")
        out = capsys.readouterr().out
        assert json.loads(out) == {"title": "Café ✅"}
        assert "Café" in out

    def test_yaml_keeps_key_order(self, capsys):
        format_output({"b": 1, "a": 2}, "yaml")
        out = capsys.readouterr().out
        assert yaml.safe_load(out) == {"b": 1, "a": 2}
        assert out.index("b:") < out.index("a:")

    def test_table_of_dicts(self, capsys):
        format_output([{"id": 1, "title": "Write", "labels": ["x", "y"], "parent_id": None}], "table")
        out = capsys.readouterr().out
        assert "Write" in out
        assert "x, y" in out

    def test_empty_table(self, capsys):
        format_output([], "table")
        assert "No items found" in capsys.readouterr().out

    def test_error_escapes_markup(self, capsys):
        format_error("bad [value]")
        assert "bad [value]" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


class TestOverdue:
    def test_past_deadline(self):
        assert is_overdue(make_task(1, deadline=NOW - timedelta(hours=1)), now=NOW)

    def test_done_task_never_overdue(self):
        task = make_task(1, deadline=NOW - timedelta(days=3), status=TaskStatus.DONE)
        assert not is_overdue(task, now=NOW)

    def test_no_deadline(self):
        assert not is_overdue(make_task(1), now=NOW)

    def test_future_deadline(self):
        assert not is_overdue(make_task(1, deadline=NOW + timedelta(days=1)), now=NOW)


class TestTaskLabel:
    def test_contains_icon_title_and_id(self):
        text = task_label(make_task(7, "Plan trip", priority=3, labels=["home"])).plain
        assert text.startswith("⏳ Plan trip")
        assert "#7" in text
        assert "P3" in text
        assert "#home" in text

    def test_priority_zero_hidden(self):
        assert "P0" not in task_label(make_task(1)).plain

    def test_done_icon(self):
        assert task_label(make_task(1, status=TaskStatus.DONE)).plain.startswith("✅")

    def test_deadline_other_year_includes_year(self):
        deadline = datetime(1999, 12, 31, 23, 59, tzinfo=UTC)
        assert format_deadline(deadline) == "31/12/1999 23:59"


class TestTaskTree:
    def test_nested_titles_printed_in_order(self, capsys):
        forest = [
            TaskTreeNode(
                task=make_task(1, "Root"),
                children=[TaskTreeNode(task=make_task(2, "Child", parent_id=1), level=1)],
            ),
            TaskTreeNode(task=make_task(3, "Sibling")),
        ]
        format_task_tree(forest)
        out = capsys.readouterr().out
        assert out.index("Root") < out.index("Child") < out.index("Sibling")

    def test_empty_forest(self, capsys):
        format_task_tree([])
        assert "No tasks found" in capsys.readouterr().out

    def test_collapsed_node_hides_children(self, capsys):
        forest = [
            TaskTreeNode(
                task=make_task(1, "Root"),
                children=[TaskTreeNode(task=make_task(2, "Hidden child", parent_id=1), level=1)],
                expanded=False,
            )
        ]
        format_task_tree(forest)
        assert "Hidden child" not in capsys.readouterr().out


class TestDetailAndStats:
    def test_detail(self, capsys):
        format_task_detail(make_task(4, "Detail me", description="Long text"), children=[])
        out = capsys.readouterr().out
        assert "Detail me" in out
        assert "Long text" in out
        assert "Subtasks" in out

    def test_stats(self, capsys):
        format_stats(TaskStats(total=3, not_started=1, in_progress=1, done=1, overdue=2))
        out = capsys.readouterr().out
        assert "Task statistics" in out
        assert "Overdue" in out
