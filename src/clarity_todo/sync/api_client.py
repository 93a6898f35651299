# src/clarity_todo/sync/api_client.py

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

import httpx

from ..core.errors import InvalidInput, NetworkFailure
from ..tasks.task_models import Task, TaskPatch

logger = logging.getLogger(__name__)


def _make_timeout(total_s: float) -> httpx.Timeout:
    """Connect quickly, allow the rest of the budget for the response."""
    connect_s = min(5.0, total_s)
    return httpx.Timeout(total_s, connect=connect_s)


class TodoApiClient:
    """
    Async client of the /api/todos boundary.

    Every call returns the full canonical collection. Any failure (transport
    error, non-2xx status, `success=false`, malformed body) is raised as
    NetworkFailure; the caller never gets a partial result.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=_make_timeout(timeout_seconds),
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> TodoApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ---- low-level helpers ----

    async def _call(self, method: str, path: str, body: Any | None = None) -> list[Task]:
        try:
            resp = await self._client.request(method, path, json=body)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise NetworkFailure(f"Network error: {e.__class__.__name__}") from e

        try:
            envelope = resp.json()
        except ValueError:
            envelope = None

        if not isinstance(envelope, dict):
            if not resp.is_success:
                raise NetworkFailure("Network response was not ok", http_status=resp.status_code)
            raise NetworkFailure("Malformed response body", http_status=resp.status_code)

        if not resp.is_success or envelope.get("success") is not True:
            message = envelope.get("error") if isinstance(envelope.get("error"), str) else None
            logger.warning("%s %s rejected status=%s error=%s", method, path, resp.status_code, message)
            raise NetworkFailure(message or "API call failed", http_status=resp.status_code)

        data = envelope.get("data") or []
        if not isinstance(data, list):
            raise NetworkFailure("Malformed response data", http_status=resp.status_code)
        try:
            return [Task.from_wire(item) for item in data]
        except InvalidInput as e:
            raise NetworkFailure(f"Malformed task in response: {e.message}") from e

    @staticmethod
    def _task_path(task_id: str) -> str:
        return f"/api/todos/{quote(task_id, safe='')}"

    # ---- public API ----

    async def list_tasks(self) -> list[Task]:
        return await self._call("GET", "/api/todos")

    async def create_task(self, task: Task) -> list[Task]:
        return await self._call("POST", "/api/todos", task.to_wire())

    async def update_task(self, task_id: str, patch: TaskPatch) -> list[Task]:
        return await self._call("PUT", self._task_path(task_id), patch.to_wire())

    async def delete_task(self, task_id: str) -> list[Task]:
        return await self._call("DELETE", self._task_path(task_id))

    async def clear_completed(self) -> list[Task]:
        return await self._call("POST", "/api/todos/clear-completed")

    async def reorder(self, ordered_ids: Sequence[str]) -> list[Task]:
        return await self._call("POST", "/api/todos/reorder", {"orderedIds": list(ordered_ids)})
