"""Unit tests for the Markdown outline codec."""

from __future__ import annotations

from datetime import UTC, datetime

from conftest import make_task

from tasktree.codecs import markdown_codec
from tasktree.models import TaskStatus

GENERATED = datetime(2025, 1, 2, 3, 4, tzinfo=UTC)


def _tree():
    return [
        make_task(1, "Education", status=TaskStatus.IN_PROGRESS, labels=["learning"]),
        make_task(2, "Languages", parent_id=1, description="Pick  one\nlanguage"),
        make_task(
            3,
            "Workbook",
            parent_id=2,
            status=TaskStatus.DONE,
            deadline=datetime(2025, 4, 30, 18, 0, tzinfo=UTC),
        ),
        make_task(4, "Finance"),
    ]


class TestEncode:
    def test_outline(self):
        text = markdown_codec.encode(_tree(), generated_at=GENERATED)
        assert text == (
            "# Task Export\n"
            "\n"
            "Generated on: 2025-01-02 03:04 UTC\n"
            "\n"
            "- 🔄 **Education**\n"
            "  *Labels: learning*\n"
            "  - ⏳ **Languages**\n"
            "    Pick one language\n"
            "    - ✅ **Workbook**\n"
            "      *Deadline: 2025-04-30*\n"
            "- ⏳ **Finance**\n"
        )

    def test_orphan_rendered_at_top_level(self):
        text = markdown_codec.encode([make_task(5, "Lonely", parent_id=1)], generated_at=GENERATED)
        assert "\n- ⏳ **Lonely**\n" in text


class TestDecode:
    def test_recovers_title_status_and_nesting(self):
        batch = markdown_codec.decode(markdown_codec.encode(_tree(), generated_at=GENERATED))

        assert batch.errors == []
        assert batch.records == [
            {"id": 1, "title": "Education", "status": "in_progress", "parent_id": None},
            {"id": 2, "title": "Languages", "status": "not_started", "parent_id": 1},
            {"id": 3, "title": "Workbook", "status": "done", "parent_id": 2},
            {"id": 4, "title": "Finance", "status": "not_started", "parent_id": None},
        ]

    def test_sibling_after_deep_child(self):
        text = "- ⏳ **A**\n  - ⏳ **B**\n    - ⏳ **C**\n  - ⏳ **D**\n"
        parents = [r["parent_id"] for r in markdown_codec.decode(text).records]
        assert parents == [None, 1, 2, 1]

    def test_variation_selector_accepted(self):
        batch = markdown_codec.decode("- ✅️ **Done thing**\n")
        assert batch.records[0]["status"] == "done"

    def test_plain_bullets_reported(self):
        batch = markdown_codec.decode("# Notes\n- just a note\n- ⏳ **Real**\n")
        assert [r["title"] for r in batch.records] == ["Real"]
        assert batch.errors == ["Line 2: bullet is not a task: 'just a note'"]

    def test_empty_text(self):
        batch = markdown_codec.decode("")
        assert batch.records == []
        assert batch.errors == []


class TestRoundTripEdgeCases:
    def _decode_encoded(self, *tasks):
        return markdown_codec.decode(markdown_codec.encode(list(tasks), generated_at=GENERATED))

    def test_description_that_looks_like_a_task_is_not_imported(self):
        batch = self._decode_encoded(make_task(1, "Groceries", description="- ✅ **Milk** from the shop"))
        assert batch.records == [
            {"id": 1, "title": "Groceries", "status": "not_started", "parent_id": None}
        ]
        assert batch.errors == []

    def test_description_starting_with_dash_is_escaped(self):
        text = markdown_codec.encode(
            [make_task(1, "Groceries", description="- milk, eggs")], generated_at=GENERATED
        )
        assert "  \\- milk, eggs\n" in text

        batch = markdown_codec.decode(text)
        assert [r["title"] for r in batch.records] == ["Groceries"]
        assert batch.errors == []

    def test_title_with_bold_markers_survives(self):
        batch = self._decode_encoded(
            make_task(1, "Fix **bold** rendering"),
            make_task(2, "Trailing**", parent_id=1),
        )
        assert [r["title"] for r in batch.records] == ["Fix **bold** rendering", "Trailing**"]
        assert batch.records[1]["parent_id"] == 1
