"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from real filesystem state and
helpers to build tasks without a storage backend.
"""

from __future__ import annotations

import logging.handlers
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest

from tasktree.adapters import InMemoryTaskRepository
from tasktree.models import Task, TaskStatus
from tasktree.services.task_service import TaskService

BASE_TIME = datetime(2025, 1, 1, 9, 0, tzinfo=UTC)


def make_task(
    id: int,
    title: str | None = None,
    *,
    parent_id: int | None = None,
    status: TaskStatus = TaskStatus.NOT_STARTED,
    deadline: datetime | None = None,
    labels: list[str] | None = None,
    priority: int = 0,
    description: str | None = None,
    created_offset: int | None = None,
) -> Task:
    """Build a Task directly; ``created_at`` grows with the id unless overridden."""
    created = BASE_TIME + timedelta(minutes=id if created_offset is None else created_offset)
    return Task(
        id=id,
        title=title or f"Task {id}",
        description=description,
        status=status,
        deadline=deadline,
        parent_id=parent_id,
        created_at=created,
        updated_at=created,
        labels=labels or [],
        priority=priority,
    )


# ---------------------------------------------------------------------------
# Filesystem isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path):
    """Keep logs, config and data files inside *tmp_path*.

    Also resets the logger singleton and the cached services so every test
    starts from a fresh configuration.
    """
    import tasktree.utils.logger as logger_mod
    from tasktree.services.config_service import get_config_service
    from tasktree.services.context_manager import get_task_repository

    log_dir = tmp_path / "logs"
    config_dir = tmp_path / "config"
    data_dir = tmp_path / "data"

    logger_mod._logger = None
    get_config_service.cache_clear()
    get_task_repository.cache_clear()
    with (
        patch("tasktree.utils.logger.user_log_dir", return_value=str(log_dir)),
        patch("tasktree.services.config_service.user_config_dir", return_value=str(config_dir)),
        patch("tasktree.services.config_service.user_data_dir", return_value=str(data_dir)),
    ):
        yield tmp_path

    app_logger = logger_mod._logger
    if app_logger is not None:
        # Only ours; pytest may have attached capture handlers too
        for handler in list(app_logger.handlers):
            if isinstance(handler, logging.handlers.RotatingFileHandler):
                handler.close()
                app_logger.removeHandler(handler)
    logger_mod._logger = None
    get_config_service.cache_clear()
    get_task_repository.cache_clear()


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


@pytest.fixture
def memory_repo() -> InMemoryTaskRepository:
    return InMemoryTaskRepository()


@pytest.fixture
def task_service(memory_repo) -> TaskService:
    return TaskService(memory_repo)
