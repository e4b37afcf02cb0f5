"""Unit tests for the task, query and transfer models."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from tasktree.models import (
    DeadlineRange,
    DeleteResult,
    ImportRecord,
    ImportResult,
    TaskCreate,
    TaskFilters,
    TaskSortOptions,
    TaskStatus,
    TaskUpdate,
)
from tasktree.models.config_models import AppConfig, Context


class TestTaskCreate:
    def test_defaults(self):
        data = TaskCreate(title="Write report")
        assert data.status == TaskStatus.NOT_STARTED
        assert data.priority == 0
        assert data.labels == []
        assert data.parent_id is None

    def test_title_is_stripped(self):
        assert TaskCreate(title="  Plan trip ").title == "Plan trip"

    @pytest.mark.parametrize("title", ["", "   "])
    def test_blank_title_rejected(self, title):
        with pytest.raises(ValidationError):
            TaskCreate(title=title)

    @pytest.mark.parametrize("priority", [-1, 6])
    def test_priority_out_of_range_rejected(self, priority):
        with pytest.raises(ValidationError):
            TaskCreate(title="x", priority=priority)

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            TaskCreate(title="x", status="blocked")

    def test_labels_deduplicated_in_order(self):
        data = TaskCreate(title="x", labels=["b", " a", "b", "", "a"])
        assert data.labels == ["b", "a"]

    def test_naive_deadline_becomes_utc(self):
        data = TaskCreate(title="x", deadline=datetime(2025, 3, 1, 17, 0))
        assert data.deadline.tzinfo is UTC


class TestTaskUpdate:
    def test_changes_only_set_fields(self):
        assert TaskUpdate(title="New").changes() == {"title": "New"}

    def test_explicit_none_clears_optional_field(self):
        assert TaskUpdate(deadline=None).changes() == {"deadline": None}

    def test_empty_update_has_no_changes(self):
        assert TaskUpdate().changes() == {}

    @pytest.mark.parametrize("field", ["title", "status", "labels", "priority"])
    def test_required_fields_cannot_be_cleared(self, field):
        with pytest.raises(ValidationError):
            TaskUpdate(**{field: None})


class TestQueryModels:
    def test_deadline_range_must_be_ordered(self):
        with pytest.raises(ValidationError):
            DeadlineRange(
                start=datetime(2025, 2, 1, tzinfo=UTC),
                end=datetime(2025, 1, 1, tzinfo=UTC),
            )

    def test_filters_reject_unknown_keys(self):
        with pytest.raises(ValidationError):
            TaskFilters(colour="red")

    def test_filters_reject_bad_priority(self):
        with pytest.raises(ValidationError):
            TaskFilters(priority=[9])

    def test_default_sort_is_newest_first(self):
        sort = TaskSortOptions()
        assert sort.field.value == "created_at"
        assert sort.direction.value == "desc"


class TestTransferModels:
    def test_import_record_blank_strings_become_none(self):
        record = ImportRecord.model_validate(
            {"title": "x", "description": " ", "deadline": "", "parent_id": "", "priority": ""}
        )
        assert record.description is None
        assert record.deadline is None
        assert record.parent_id is None
        assert record.priority == 0

    def test_import_record_splits_label_string(self):
        record = ImportRecord.model_validate({"title": "x", "labels": "a;b; c"})
        assert record.labels == ["a", "b", "c"]

    def test_import_record_to_create_uses_given_parent(self):
        record = ImportRecord(id=7, title="x", parent_id=3)
        assert record.to_create(42).parent_id == 42

    def test_import_result_has_errors(self):
        assert not ImportResult().has_errors
        assert ImportResult(errors=["bad"]).has_errors

    def test_delete_result_counts(self):
        result = DeleteResult(task_id=1, removed_ids=[1, 2, 3])
        assert result.deleted
        assert result.count == 3
        assert not DeleteResult(task_id=9).deleted


class TestConfigModels:
    def test_remote_context_requires_source(self):
        with pytest.raises(ValidationError):
            Context(name="cloud", type="remote", source="  ")

    def test_memory_context_without_source(self):
        assert Context(name="scratch", type="memory").source == ""

    def test_duplicate_context_rejected(self):
        config = AppConfig(contexts=[Context(name="a", type="memory")])
        with pytest.raises(ValueError, match="already exists"):
            config.add_context(Context(name="a", type="memory"))

    def test_missing_context_lookup(self):
        with pytest.raises(ValueError, match="not found"):
            AppConfig().get_context("nope")
