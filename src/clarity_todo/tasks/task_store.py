# src/clarity_todo/tasks/task_store.py

from __future__ import annotations

import json
import logging
import threading
import time
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager

from ..core.errors import DuplicateId, InvalidInput, NotFound, StorageFailure
from ..core.ports import KeyValueStorage
from . import collection
from .task_models import MAX_ORDER, Task, TaskPatch, is_valid_order

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "todos_list_v1"


class TaskStore:
    """
    The single global task list.

    The whole collection is one JSON document under `storage_key`. Every
    operation is a read-modify-write of that document executed under
    `self._lock`, so concurrent requests never interleave their read and
    write phases. Every operation returns the full canonical collection.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage = storage
        self._key = storage_key
        self._clock = clock
        self._lock = threading.Lock()
        try:
            total = self.count()
        except StorageFailure as e:
            # Requests will surface the same failure with a 503.
            logger.warning("TaskStore ready key=%s but the list is unreadable: %s", self._key, e.message)
            return
        logger.info("TaskStore ready key=%s total=%d", self._key, total)

    # ---- low-level helpers ----

    def _load(self) -> list[Task]:
        raw = self._storage.get(self._key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageFailure(f"Stored task list is corrupt: {e}") from e
        if not isinstance(data, list):
            raise StorageFailure("Stored task list is not a list")
        try:
            return collection.canonical_sort([Task.from_wire(item) for item in data])
        except InvalidInput as e:
            raise StorageFailure(f"Stored task is malformed: {e.message}") from e

    def _save(self, tasks: Sequence[Task]) -> list[Task]:
        ordered = collection.canonical_sort(tasks)
        payload = json.dumps([t.to_wire() for t in ordered], ensure_ascii=False, allow_nan=False)
        self._storage.put(self._key, payload)
        return ordered

    @contextmanager
    def _locked(self) -> Iterator[list[Task]]:
        with self._lock:
            yield self._load()

    def _now_millis(self) -> int:
        return int(self._clock() * 1000)

    # ---- public API ----

    def count(self) -> int:
        with self._locked() as tasks:
            return len(tasks)

    def list_tasks(self) -> list[Task]:
        with self._locked() as tasks:
            return tasks

    def create(self, task: Task) -> list[Task]:
        with self._locked() as tasks:
            if any(t.id == task.id for t in tasks):
                raise DuplicateId(task.id)

            new_task = task.copy()
            new_task.text = collection.clean_text(task.text)
            if new_task.order is None:
                order = self._now_millis()
                # Keep appending even if the wall clock stepped backwards.
                highest = max((collection.effective_rank(t) for t in tasks), default=None)
                if highest is not None and order <= highest:
                    order = int(highest) + 1
                new_task.order = order
            if not is_valid_order(new_task.order):
                raise InvalidInput(f"order must be a finite number within +/-{MAX_ORDER}")

            result = self._save([*tasks, new_task])
            logger.debug("Task created id=%s order=%s", new_task.id, new_task.order)
            return result

    def update(self, task_id: str, patch: TaskPatch) -> list[Task]:
        with self._locked() as tasks:
            if not any(t.id == task_id for t in tasks):
                raise NotFound(task_id)
            result = self._save(collection.replace_task(tasks, task_id, patch))
            logger.debug("Task updated id=%s fields=%s", task_id, sorted(patch.to_wire()))
            return result

    def delete(self, task_id: str) -> list[Task]:
        with self._locked() as tasks:
            remaining = collection.remove_task(tasks, task_id)
            if len(remaining) == len(tasks):
                logger.debug("Delete of unknown task id=%s ignored", task_id)
                return tasks
            result = self._save(remaining)
            logger.debug("Task deleted id=%s", task_id)
            return result

    def clear_completed(self) -> list[Task]:
        with self._locked() as tasks:
            remaining = collection.without_completed(tasks)
            result = self._save(remaining)
            logger.info("Cleared %d completed task(s)", len(tasks) - len(remaining))
            return result

    def reorder(self, ordered_ids: Sequence[str]) -> list[Task]:
        with self._locked() as tasks:
            result = self._save(collection.reorder_tasks(tasks, ordered_ids))
            logger.debug("Reordered %d task(s) by %d id(s)", len(result), len(ordered_ids))
            return result
