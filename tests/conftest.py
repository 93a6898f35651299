# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from clarity_todo.core.state import AppState
from clarity_todo.sync.controller import SyncController
from clarity_todo.tasks.kv_storage import SqliteKeyValueStorage
from clarity_todo.tasks.task_store import TaskStore

from .fakes import FakeClock, RecordingNotifier, StoreBackend


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """Minimal settings object compatible with the composition root (no env reads)."""
    return SimpleNamespace(
        app_name="clarity-test",
        log_level="DEBUG",
        host="127.0.0.1",
        port=8787,
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "todos.sqlite3",
        storage_key="todos_list_v1",
        api_base_url="http://testserver",
        api_timeout_seconds=5.0,
        default_priority="none",
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(start=1_700_000_000.0)


@pytest.fixture()
def store(settings: SimpleNamespace, clock: FakeClock) -> TaskStore:
    """Real SQLite store: its atomicity and persistence are part of what we test."""
    storage = SqliteKeyValueStorage(settings.tasks_db_path)
    return TaskStore(storage, storage_key=settings.storage_key, clock=clock)


@pytest.fixture()
def backend(store: TaskStore) -> StoreBackend:
    return StoreBackend(store)


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def controller(backend: StoreBackend, notifier: RecordingNotifier) -> SyncController:
    return SyncController(backend, notifier=notifier)


@pytest.fixture()
def state(settings: SimpleNamespace, controller: SyncController) -> AppState:
    return AppState(settings=settings, controller=controller)
