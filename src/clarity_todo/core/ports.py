# src/clarity_todo/core/ports.py

"""
Ports (interfaces) used by the core.

The store and the sync controller depend on Protocols instead of concrete
implementations. This keeps storage and transport swappable and makes testing easier.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol

from ..tasks.task_models import Task, TaskPatch

# User-visible error surface (toast in a browser, a printed line in the console).
Notifier = Callable[[str], None]

CacheListener = Callable[[list[Task]], None]


class KeyValueStorage(Protocol):
    """Durable single-record storage: one serialized value per key."""

    def get(self, key: str) -> str | None: ...
    def put(self, key: str, value: str) -> None: ...


class TaskRepo(Protocol):
    """Server-side task list; every mutation returns the full canonical collection."""

    def list_tasks(self) -> list[Task]: ...
    def create(self, task: Task) -> list[Task]: ...
    def update(self, task_id: str, patch: TaskPatch) -> list[Task]: ...
    def delete(self, task_id: str) -> list[Task]: ...
    def clear_completed(self) -> list[Task]: ...
    def reorder(self, ordered_ids: Sequence[str]) -> list[Task]: ...


class TaskBackend(Protocol):
    """Client-side view of the boundary API (async, may raise TodoError)."""

    async def list_tasks(self) -> list[Task]: ...
    async def create_task(self, task: Task) -> list[Task]: ...
    async def update_task(self, task_id: str, patch: TaskPatch) -> list[Task]: ...
    async def delete_task(self, task_id: str) -> list[Task]: ...
    async def clear_completed(self) -> list[Task]: ...
    async def reorder(self, ordered_ids: Sequence[str]) -> list[Task]: ...
