# src/clarity_todo/core/errors.py

"""
Error taxonomy shared by the store, the HTTP boundary and the sync client.

Nothing here is fatal to the process: every error is scoped to one request
and is recovered from by re-fetching the canonical list.
"""

from __future__ import annotations


class TodoError(Exception):
    """Base class; `status_code` is what the HTTP boundary responds with."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(TodoError):
    status_code = 400


class DuplicateId(TodoError):
    status_code = 409

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task with id {task_id!r} already exists")
        self.task_id = task_id


class NotFound(TodoError):
    status_code = 404

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task {task_id!r} not found")
        self.task_id = task_id


class StorageFailure(TodoError):
    status_code = 503


class NetworkFailure(TodoError):
    """Client-side: transport error, non-2xx response or success=false envelope."""

    status_code = 502

    def __init__(self, message: str, *, http_status: int | None = None) -> None:
        super().__init__(message)
        self.http_status = http_status
