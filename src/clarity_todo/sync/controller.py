# src/clarity_todo/sync/controller.py

"""
Optimistic sync controller.

Keeps a client-side cache of the task list and reconciles it with the server:

- dispatch: snapshot the cache, apply the mutation locally, send the request
- success:  the server's canonical collection replaces the cache (COMMITTED)
- failure:  the cache is restored from the snapshot (ROLLED_BACK), the user is
            notified, and the list is re-fetched from the server

Each action carries its own snapshot, taken when it is dispatched. Actions are
not ordered relative to one another; the last successful refresh is the
arbiter of truth. Failed mutations are never retried automatically.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import uuid
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum

from ..core.errors import TodoError
from ..core.ports import CacheListener, Notifier, TaskBackend
from ..tasks import collection
from ..tasks.task_models import Priority, Task, TaskPatch, utc_now_iso

logger = logging.getLogger(__name__)


class MutationAction(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    CLEAR_COMPLETED = "clear_completed"
    REORDER = "reorder"


class MutationState(StrEnum):
    IDLE = "idle"
    PENDING = "pending"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


_FAILURE_MESSAGES = {
    MutationAction.CREATE: "Failed to add task.",
    MutationAction.UPDATE: "Failed to update task.",
    MutationAction.DELETE: "Failed to delete task.",
    MutationAction.CLEAR_COMPLETED: "Failed to clear completed tasks.",
    MutationAction.REORDER: "Failed to reorder tasks.",
}


@dataclass(slots=True)
class PendingMutation:
    """
    One optimistic action and its rollback baseline.

    The request runs in its own asyncio task. `future` resolves with the cache
    contents once the action is finished: after commit, or after rollback and
    the forced re-fetch. Callers await it through `wait()`; cancelling a
    waiter does not cancel the request.
    """

    mutation_id: int
    action: MutationAction
    snapshot: list[Task]
    state: MutationState = MutationState.IDLE
    error: TodoError | None = None
    future: asyncio.Future[list[Task]] | None = field(default=None, repr=False)

    def begin(self) -> None:
        if self.state != MutationState.IDLE:
            raise RuntimeError(f"mutation {self.mutation_id} already started")
        self.future = asyncio.get_running_loop().create_future()
        self.state = MutationState.PENDING

    def commit(self) -> None:
        self._transition(MutationState.COMMITTED)

    def roll_back(self, error: TodoError) -> None:
        self.error = error
        self._transition(MutationState.ROLLED_BACK)

    def resolve(self, tasks: Sequence[Task]) -> None:
        if self.future is not None and not self.future.done():
            self.future.set_result(_copy_all(tasks))

    async def wait(self) -> PendingMutation:
        if self.future is None:
            raise RuntimeError(f"mutation {self.mutation_id} was never dispatched")
        await asyncio.shield(self.future)
        return self

    @property
    def settled(self) -> bool:
        return self.state in (MutationState.COMMITTED, MutationState.ROLLED_BACK)

    def _transition(self, state: MutationState) -> None:
        if self.state != MutationState.PENDING:
            raise RuntimeError(f"mutation {self.mutation_id} is not pending (state={self.state})")
        self.state = state


def _copy_all(tasks: Sequence[Task]) -> list[Task]:
    return [t.copy() for t in tasks]


def _clean_tags(tags: Sequence[str]) -> list[str]:
    """Strip each tag and drop the blank ones, like task text."""
    return [t.strip() for t in tags if t.strip()]


class SyncController:
    """Client-side cache of the task list with optimistic mutations."""

    def __init__(
        self,
        backend: TaskBackend,
        *,
        notifier: Notifier | None = None,
        default_priority: Priority | str = Priority.NONE,
    ) -> None:
        self._backend = backend
        self._notifier = notifier
        self._default_priority = Priority.parse(default_priority)
        self._cache: list[Task] = []
        self._inflight: dict[int, PendingMutation] = {}
        self._ids = itertools.count(1)
        self._listeners: list[CacheListener] = []
        self._running: set[asyncio.Task[None]] = set()
        self.loaded = False

    # ---- cache access ----

    @property
    def tasks(self) -> list[Task]:
        return _copy_all(self._cache)

    @property
    def pending(self) -> list[PendingMutation]:
        return list(self._inflight.values())

    def get(self, task_id: str) -> Task | None:
        for t in self._cache:
            if t.id == task_id:
                return t.copy()
        return None

    def subscribe(self, listener: CacheListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _set_cache(self, tasks: Sequence[Task]) -> None:
        self._cache = _copy_all(tasks)
        for listener in list(self._listeners):
            try:
                listener(self.tasks)
            except Exception:
                logger.exception("Cache listener failed")

    def _notify(self, message: str) -> None:
        if self._notifier is None:
            return
        try:
            self._notifier(message)
        except Exception:
            logger.exception("Notifier failed")

    # ---- reads ----

    async def refresh(self) -> bool:
        """Replace the cache with the server's list. Returns False (and notifies) on failure."""
        try:
            tasks = await self._backend.list_tasks()
        except TodoError as e:
            logger.warning("Refresh failed: %s", e.message)
            self._notify(f"Failed to load tasks: {e.message}")
            return False
        self._set_cache(tasks)
        self.loaded = True
        logger.debug("Refreshed cache: %d task(s)", len(tasks))
        return True

    # ---- dispatch ----

    def _dispatch(
        self,
        action: MutationAction,
        optimistic: list[Task],
        request: Callable[[], Awaitable[list[Task]]],
    ) -> PendingMutation:
        """Apply `optimistic` now and send `request` in the background."""
        mutation = PendingMutation(
            mutation_id=next(self._ids),
            action=action,
            snapshot=self.tasks,
        )
        mutation.begin()
        self._inflight[mutation.mutation_id] = mutation
        self._set_cache(optimistic)

        runner = asyncio.create_task(self._complete(mutation, request))
        self._running.add(runner)
        runner.add_done_callback(self._running.discard)
        return mutation

    async def _complete(
        self,
        mutation: PendingMutation,
        request: Callable[[], Awaitable[list[Task]]],
    ) -> None:
        action = mutation.action
        try:
            try:
                result = await request()
            except Exception as e:
                if isinstance(e, TodoError):
                    error = e
                else:
                    logger.exception("Unexpected error during %s", action.value)
                    error = TodoError(str(e) or e.__class__.__name__)

                mutation.roll_back(error)
                self._inflight.pop(mutation.mutation_id, None)
                self._set_cache(mutation.snapshot)
                logger.warning(
                    "Mutation %s (%s) rolled back: %s", mutation.mutation_id, action.value, error.message
                )
                self._notify(f"{_FAILURE_MESSAGES[action]} {error.message}".strip())
                await self.refresh()
                return

            mutation.commit()
            self._inflight.pop(mutation.mutation_id, None)
            self._set_cache(result)
            logger.debug("Mutation %s (%s) committed", mutation.mutation_id, action.value)
        finally:
            mutation.resolve(self._cache)

    # ---- mutations ----

    def new_task(
        self,
        text: str,
        *,
        due_date: str | None = None,
        start_time: str | None = None,
        end_time: str | None = None,
        priority: Priority | str | None = None,
        tags: Sequence[str] | None = None,
    ) -> Task:
        """Build a client-side record: fresh uuid, current createdAt, default priority."""
        return Task(
            id=str(uuid.uuid4()),
            text=collection.clean_text(text),
            completed=False,
            created_at=utc_now_iso(),
            due_date=due_date or None,
            start_time=start_time or None,
            end_time=end_time or None,
            priority=self._default_priority if priority is None else Priority.parse(priority),
            tags=_clean_tags(tags) if tags else None,
        )

    async def create(self, task: Task) -> PendingMutation:
        collection.clean_text(task.text)
        return await self._dispatch(
            MutationAction.CREATE,
            [*self._cache, task.copy()],
            lambda: self._backend.create_task(task),
        ).wait()

    async def add(self, text: str, **fields) -> PendingMutation:
        return await self.create(self.new_task(text, **fields))

    async def update(self, task_id: str, patch: TaskPatch) -> PendingMutation:
        # Validates the patch (e.g. empty text) before anything is dispatched.
        optimistic = collection.replace_task(self._cache, task_id, patch)
        return await self._dispatch(
            MutationAction.UPDATE,
            optimistic,
            lambda: self._backend.update_task(task_id, patch),
        ).wait()

    async def toggle(self, task_id: str) -> PendingMutation | None:
        task = self.get(task_id)
        if task is None:
            return None
        return await self.update(task_id, TaskPatch(completed=not task.completed))

    async def edit(
        self,
        task_id: str,
        *,
        text: str | None = None,
        due_date: str | None = None,
        start_time: str | None = None,
        end_time: str | None = None,
        priority: Priority | str | None = None,
        tags: Sequence[str] | None = None,
    ) -> PendingMutation | None:
        """
        Send only the fields that differ from the cached task.

        Returns None (and sends nothing) when the task is unknown or nothing changed.
        An empty string clears due_date/start_time/end_time.
        """
        task = self.get(task_id)
        if task is None:
            return None

        patch = TaskPatch()
        if text is not None and collection.clean_text(text) != task.text:
            patch.text = collection.clean_text(text)
        if due_date is not None and (due_date or None) != task.due_date:
            patch.due_date = due_date
        if start_time is not None and (start_time or None) != task.start_time:
            patch.start_time = start_time
        if end_time is not None and (end_time or None) != task.end_time:
            patch.end_time = end_time
        if priority is not None and Priority.parse(priority) != task.priority:
            patch.priority = Priority.parse(priority)
        if tags is not None and _clean_tags(tags) != (task.tags or []):
            patch.tags = _clean_tags(tags)

        if patch.is_empty():
            return None
        return await self.update(task_id, patch)

    async def delete(self, task_id: str) -> PendingMutation:
        return await self._dispatch(
            MutationAction.DELETE,
            collection.remove_task(self._cache, task_id),
            lambda: self._backend.delete_task(task_id),
        ).wait()

    async def clear_completed(self) -> PendingMutation:
        return await self._dispatch(
            MutationAction.CLEAR_COMPLETED,
            collection.without_completed(self._cache),
            self._backend.clear_completed,
        ).wait()

    async def reorder(self, ordered_ids: Sequence[str]) -> PendingMutation:
        ids = list(ordered_ids)
        return await self._dispatch(
            MutationAction.REORDER,
            collection.reorder_tasks(self._cache, ids),
            lambda: self._backend.reorder(ids),
        ).wait()

    async def move(self, active_id: str, over_id: str) -> PendingMutation | None:
        """Drag-and-drop: move one task onto another's slot in manual order."""
        ids = collection.move_id([t.id for t in self._cache], active_id, over_id)
        if ids is None:
            return None
        return await self.reorder(ids)
