"""REST API adapter - TaskRepository over a PostgREST endpoint (e.g. Supabase).

The remote ``tasks`` table is created with ``sql/supabase_schema.sql``; its
``parent_id`` foreign key cascades on delete, so the server removes subtrees
on its own and a subtree delete is one request.

``base_url`` is the REST root, for Supabase ``https://<project>.supabase.co/rest/v1``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

import httpx

from tasktree.exceptions import IntegrityError, StorageError
from tasktree.models import Task, TaskCreate, TaskFilters, TaskSortOptions, TaskUpdate
from tasktree.repositories import TaskRepository
from tasktree.services.query import query
from tasktree.utils.logger import get_logger

logger = get_logger(__name__)

TASKS_PATH = "/tasks"

# PostgreSQL error codes returned in PostgREST error bodies
_PG_FOREIGN_KEY_VIOLATION = "23503"
_PG_CHECK_VIOLATION = "23514"


def _in_list(values) -> str:
    return "in.(" + ",".join(str(v) for v in values) + ")"


class RestClient:
    """Thin httpx wrapper adding auth headers, retries and error mapping."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        retry: int = 3,
        backoff: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.retry = retry
        self.backoff = backoff
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._get_headers(),
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Any = None,
        representation: bool = False,
    ) -> Any:
        """Send a request and return the decoded JSON body (None when empty).

        Transport failures and 5xx responses are retried with exponential
        backoff; 4xx responses are not.

        Raises:
            IntegrityError: If the server reports a foreign key violation
            StorageError: For any other failure
        """
        client = self._get_client()
        headers = {"Prefer": "return=representation"} if representation else None

        last_error: Exception | None = None
        for attempt in range(self.retry + 1):
            try:
                response = await client.request(
                    method, path, json=json, params=params, headers=headers
                )
                response.raise_for_status()
                return response.json() if response.content else None
            except httpx.HTTPStatusError as e:
                if e.response.status_code < 500:
                    raise self._client_error(method, path, e.response) from e
                last_error = e
            except httpx.RequestError as e:
                last_error = e

            if attempt < self.retry:
                delay = self.backoff * (2**attempt)
                logger.warning(
                    "%s %s failed (%s), retrying in %.1fs", method, path, last_error, delay
                )
                await asyncio.sleep(delay)

        raise StorageError(
            f"{method} {path} failed after {self.retry + 1} attempts: {last_error}"
        ) from last_error

    @staticmethod
    def _client_error(method: str, path: str, response: httpx.Response) -> Exception:
        try:
            body = response.json()
        except ValueError:
            body = {}
        code = body.get("code") if isinstance(body, dict) else None
        message = (body.get("message") if isinstance(body, dict) else None) or response.text
        if code == _PG_FOREIGN_KEY_VIOLATION:
            return IntegrityError(f"Parent reference rejected by server: {message}")
        if code == _PG_CHECK_VIOLATION:
            return StorageError(f"Server rejected values: {message}")
        return StorageError(
            f"{method} {path} returned {response.status_code}: {message}"
        )


def _row_to_task(row: dict[str, Any]) -> Task:
    row = dict(row)
    row["labels"] = row.get("labels") or []
    return Task.model_validate(row)


def _to_payload(fields: dict[str, Any]) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for key, value in fields.items():
        if isinstance(value, datetime):
            value = value.isoformat()
        elif key == "status" and value is not None:
            value = getattr(value, "value", value)
        payload[key] = value
    return payload


class RestApiTaskRepository(TaskRepository):
    """Task repository backed by a PostgREST ``tasks`` table."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        retry: int = 3,
        backoff: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize REST API task repository.

        Args:
            base_url: PostgREST root URL
            api_key: Sent as ``apikey`` and bearer token
            timeout: Per-request timeout in seconds
            retry: Extra attempts after a transport failure or 5xx
            backoff: Base delay of the exponential backoff
            transport: Optional httpx transport (used by tests)
        """
        self.client = RestClient(
            base_url,
            api_key=api_key,
            timeout=timeout,
            retry=retry,
            backoff=backoff,
            transport=transport,
        )

    async def connect(self) -> None:
        self.client._get_client()

    async def disconnect(self) -> None:
        await self.client.close()

    async def _select(self, params: list[tuple[str, Any]]) -> list[Task]:
        rows = await self.client.request(
            "GET", TASKS_PATH, params=[("select", "*"), *params, ("order", "id.asc")]
        )
        return [_row_to_task(row) for row in rows or []]

    async def ensure_initialized(self, seed: Sequence[TaskCreate] | None = None) -> int:
        """Seed an empty remote table; the schema itself is managed server-side."""
        existing = await self.client.request(
            "GET", TASKS_PATH, params=[("select", "id"), ("limit", "1")]
        )
        if existing or not seed:
            return 0

        assigned: dict[int, int] = {}
        for position, task_data in enumerate(seed, start=1):
            parent_id = assigned.get(task_data.parent_id) if task_data.parent_id else None
            task = await self.create(task_data.model_copy(update={"parent_id": parent_id}))
            assigned[position] = task.id
        logger.info("seeded %d tasks into %s", len(seed), self.client.base_url)
        return len(seed)

    async def create(self, task_data: TaskCreate) -> Task:
        rows = await self.client.request(
            "POST",
            TASKS_PATH,
            json=_to_payload(task_data.model_dump()),
            representation=True,
        )
        if not rows:
            raise StorageError("Server did not return the created task")
        return _row_to_task(rows[0])

    async def get(self, task_id: int) -> Task | None:
        tasks = await self._select([("id", f"eq.{task_id}")])
        return tasks[0] if tasks else None

    async def update(self, task_id: int, updates: TaskUpdate) -> Task | None:
        payload = _to_payload(updates.changes())
        payload["updated_at"] = datetime.now(UTC).isoformat()
        rows = await self.client.request(
            "PATCH",
            TASKS_PATH,
            params=[("id", f"eq.{task_id}")],
            json=payload,
            representation=True,
        )
        return _row_to_task(rows[0]) if rows else None

    async def delete(self, task_id: int) -> bool:
        rows = await self.client.request(
            "DELETE", TASKS_PATH, params=[("id", f"eq.{task_id}")], representation=True
        )
        return bool(rows)

    async def delete_many(self, task_ids: Sequence[int]) -> int:
        """One ``DELETE ?id=in.(...)`` request; the server runs it as one statement."""
        if not task_ids:
            return 0
        rows = await self.client.request(
            "DELETE",
            TASKS_PATH,
            params=[("id", _in_list(task_ids))],
            representation=True,
        )
        return len(rows or [])

    async def list_all(self) -> list[Task]:
        return await self._select([])

    async def list_filtered(
        self, filters: TaskFilters, sort: TaskSortOptions | None = None
    ) -> list[Task]:
        """Push status, priority and deadline bounds to the server, finish locally."""
        params: list[tuple[str, Any]] = []
        if filters.status:
            params.append(("status", _in_list(s.value for s in filters.status)))
        if filters.priority:
            params.append(("priority", _in_list(filters.priority)))
        if filters.deadline_range is not None:
            params.append(("deadline", "not.is.null"))
            if filters.deadline_range.start is not None:
                params.append(("deadline", f"gte.{filters.deadline_range.start.isoformat()}"))
            if filters.deadline_range.end is not None:
                params.append(("deadline", f"lte.{filters.deadline_range.end.isoformat()}"))
        return query(await self._select(params), filters, sort)

    async def list_roots(self) -> list[Task]:
        return await self._select([("parent_id", "is.null")])

    async def list_children(self, parent_id: int) -> list[Task]:
        return await self._select([("parent_id", f"eq.{parent_id}")])
