"""Unit tests for the JSON codec."""

from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest
from conftest import make_task

from tasktree.codecs import json_codec
from tasktree.exceptions import DecodeError
from tasktree.models import ExportOptions, TaskStatus


def _sample():
    return [
        make_task(1, "Plan trip", labels=["travel"], priority=2, description="Summer"),
        make_task(
            2,
            "Book hotel",
            parent_id=1,
            status=TaskStatus.DONE,
            deadline=datetime(2025, 6, 1, 12, 0, tzinfo=UTC),
        ),
    ]


class TestEncode:
    def test_pretty_printed_list(self):
        text = json_codec.encode(_sample())
        assert text.startswith("[\n  {")
        data = json.loads(text)
        assert [item["id"] for item in data] == [1, 2]
        assert data[1]["status"] == "done"
        assert data[1]["parent_id"] == 1

    def test_round_trip_is_lossless(self):
        tasks = _sample()
        assert json_codec.decode_tasks(json_codec.encode(tasks)) == tasks

    def test_non_ascii_kept(self):
        text = json_codec.encode([make_task(1, "Café ☕")])
        assert "Café ☕" in text

    def test_options_drop_completed_and_blank_fields(self):
        options = ExportOptions(include_completed=False, include_description=False)
        data = json.loads(json_codec.encode(_sample(), options))
        assert len(data) == 1
        assert data[0]["description"] is None
        assert data[0]["labels"] == ["travel"]


class TestDecode:
    def test_records_are_raw_dicts(self):
        batch = json_codec.decode(json_codec.encode(_sample()))
        assert batch.errors == []
        assert batch.records[0]["title"] == "Plan trip"

    def test_accepts_tasks_envelope(self):
        batch = json_codec.decode('{"tasks": [{"title": "x"}]}')
        assert batch.records == [{"title": "x"}]

    def test_non_object_items_reported(self):
        batch = json_codec.decode('[{"title": "x"}, 3, "y"]')
        assert len(batch.records) == 1
        assert batch.errors == [
            "Record 2: expected an object, got int",
            "Record 3: expected an object, got str",
        ]

    @pytest.mark.parametrize("text", ["not json", "{", '{"title": "x"}', "42"])
    def test_undecodable_text(self, text):
        with pytest.raises(DecodeError):
            json_codec.decode(text)

    def test_decode_tasks_rejects_incomplete_task(self):
        with pytest.raises(DecodeError, match="Record 1"):
            json_codec.decode_tasks('[{"title": "no id"}]')
