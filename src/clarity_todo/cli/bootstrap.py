# src/clarity_todo/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the server side (storage -> TaskStore -> FastAPI app),
- wires the console client side (httpx client -> SyncController -> AppState).
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from ..api.app import create_app
from ..config import get_settings
from ..core.ports import Notifier
from ..core.state import AppState
from ..sync.api_client import TodoApiClient
from ..sync.controller import SyncController
from ..tasks.kv_storage import SqliteKeyValueStorage
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_task_store(*, settings=None) -> TaskStore:
    """
    Build the durable store from the provided settings.

    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)
    storage = SqliteKeyValueStorage(settings.tasks_db_path)
    return TaskStore(storage, storage_key=settings.storage_key)


def create_server_app(*, settings=None) -> FastAPI:
    if settings is None:
        settings = get_settings()
    return create_app(create_task_store(settings=settings), title=settings.app_name)


def create_console_state(
    *, settings=None, notifier: Notifier | None = None
) -> tuple[AppState, TodoApiClient]:
    """Returns the state and the API client (caller closes the client on shutdown)."""
    if settings is None:
        settings = get_settings()

    client = TodoApiClient(settings.api_base_url, timeout_seconds=settings.api_timeout_seconds)
    controller = SyncController(
        client,
        notifier=notifier,
        default_priority=settings.default_priority,
    )
    logger.info("Console client targets %s", settings.api_base_url)
    return AppState(settings=settings, controller=controller), client
