"""Storage selection for tasktree.

The active context decides which TaskRepository backs the services. It is
resolved once per process; business logic receives the repository and never
reads configuration itself.

Usage Pattern:
    from tasktree.services.context_manager import get_task_service

    service = get_task_service()
    async with service.repository:
        tasks = await service.list_filtered(filters, sort)
"""

from __future__ import annotations

from functools import lru_cache

from tasktree.adapters import InMemoryTaskRepository, RestApiTaskRepository, SqliteTaskRepository
from tasktree.models.config_models import APIConfig, Context
from tasktree.repositories import TaskRepository
from tasktree.services.config_service import get_config_service
from tasktree.services.task_service import TaskService
from tasktree.services.transfer_service import TransferService
from tasktree.utils.logger import get_logger

logger = get_logger(__name__)


def create_repository(context: Context, api: APIConfig | None = None) -> TaskRepository:
    """Build the repository a context describes."""
    api = api or APIConfig()
    if context.type == "memory":
        return InMemoryTaskRepository()
    if context.type == "local":
        return SqliteTaskRepository(db_path=context.source)
    if context.type == "remote":
        return RestApiTaskRepository(
            base_url=context.source,
            api_key=context.api_key,
            timeout=api.timeout,
            retry=api.retry,
        )
    raise ValueError(
        f"Invalid context type: {context.type}. Must be 'memory', 'local' or 'remote'"
    )


@lru_cache(maxsize=1)
def get_task_repository() -> TaskRepository:
    """Get the cached repository for the active context."""
    config = get_config_service().config
    context = config.get_current_context()
    logger.debug("using context %s (%s)", context.name, context.type)
    return create_repository(context, config.api)


def get_task_service() -> TaskService:
    return TaskService(get_task_repository())


def get_transfer_service() -> TransferService:
    return TransferService(get_task_service())
