"""Unit tests for the CSV codec."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from conftest import make_task

from tasktree.codecs import csv_codec
from tasktree.exceptions import DecodeError
from tasktree.models import ExportOptions, TaskStatus

HEADER_LINE = '"Title","Description","Status","Deadline","Parent ID","Labels","Priority"'


class TestEncode:
    def test_header_and_quoting(self):
        text = csv_codec.encode([make_task(1, 'Say "hi"', labels=["a", "b"], priority=3)])
        lines = text.splitlines()
        assert lines[0] == HEADER_LINE
        assert lines[1] == '"Say ""hi""","","not_started","","","a;b","3"'

    def test_deadline_and_parent(self):
        deadline = datetime(2025, 3, 1, 17, 0, tzinfo=UTC)
        text = csv_codec.encode([make_task(2, "Child", parent_id=1, deadline=deadline)])
        assert '"2025-03-01T17:00:00+00:00","1"' in text

    def test_empty_set_is_header_only(self):
        assert csv_codec.encode([]) == HEADER_LINE + "\n"

    def test_options(self):
        tasks = [make_task(1, labels=["x"]), make_task(2, status=TaskStatus.DONE)]
        text = csv_codec.encode(tasks, ExportOptions(include_completed=False, include_labels=False))
        lines = text.splitlines()
        assert len(lines) == 2
        assert '"x"' not in lines[1]


class TestDecode:
    def test_round_trip_fields(self):
        deadline = datetime(2025, 3, 1, 17, 0, tzinfo=UTC)
        tasks = [
            make_task(1, "Write, edit", description="line one\nline two", labels=["w"], priority=1),
            make_task(2, "Ship", status=TaskStatus.IN_PROGRESS, deadline=deadline),
        ]
        batch = csv_codec.decode(csv_codec.encode(tasks))

        assert batch.errors == []
        first, second = batch.records
        assert first["title"] == "Write, edit"
        assert first["description"] == "line one\nline two"
        assert first["labels"] == "w"
        assert first["priority"] == 1
        assert second["status"] == "in_progress"
        assert second["deadline"] == deadline
        assert second["parent_id"] is None

    def test_headers_case_insensitive_any_order(self):
        text = "priority,TITLE,extra\n2,Pay bills,ignored\n"
        batch = csv_codec.decode(text)
        assert batch.records == [
            {"title": "Pay bills", "description": None, "status": "not_started", "labels": "", "priority": 2}
        ]

    def test_blank_rows_skipped(self):
        batch = csv_codec.decode("Title\n\nA\n\nB\n")
        assert [r["title"] for r in batch.records] == ["A", "B"]

    def test_bad_rows_reported_with_line(self):
        text = "Title,Priority,Deadline\nGood,1,\nShort\nBad prio,high,\nBad date,1,someday\n"
        batch = csv_codec.decode(text)

        assert [r["title"] for r in batch.records] == ["Good"]
        assert len(batch.errors) == 3
        assert batch.errors[0].startswith("Line 3: expected 3 fields")
        assert "Priority 'high'" in batch.errors[1]
        assert "Deadline 'someday'" in batch.errors[2]

    @pytest.mark.parametrize("text", ["", "\n\n", "Name,Status\nx,done\n"])
    def test_unusable_header(self, text):
        with pytest.raises(DecodeError):
            csv_codec.decode(text)
