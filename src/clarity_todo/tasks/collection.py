# src/clarity_todo/tasks/collection.py

"""
Pure operations over a task collection.

Shared by the server-side TaskStore (durable state) and the client-side
SyncController (optimistic cache), so both sides agree on what a mutation
does to the list. Functions never mutate their inputs.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..core.errors import InvalidInput
from .task_models import Task, TaskPatch


def effective_rank(task: Task) -> float:
    """`order` when present, otherwise createdAt in epoch millis (same numeric axis)."""
    if task.order is not None:
        return float(task.order)
    return task.created_millis


def canonical_sort(tasks: Iterable[Task]) -> list[Task]:
    """Total, reproducible order: rank, then createdAt, then id."""
    return sorted(tasks, key=lambda t: (effective_rank(t), t.created_millis, t.id))


def clean_text(text: str) -> str:
    cleaned = text.strip()
    if not cleaned:
        raise InvalidInput("text must not be empty")
    return cleaned


def apply_patch(task: Task, patch: TaskPatch) -> Task:
    """Field-by-field merge; id, created_at and order are never touched."""
    out = task.copy()
    if patch.text is not None:
        out.text = clean_text(patch.text)
    if patch.completed is not None:
        out.completed = patch.completed
    if patch.due_date is not None:
        out.due_date = patch.due_date or None
    if patch.start_time is not None:
        out.start_time = patch.start_time or None
    if patch.end_time is not None:
        out.end_time = patch.end_time or None
    if patch.priority is not None:
        out.priority = patch.priority
    if patch.tags is not None:
        out.tags = list(patch.tags)
    return out


def replace_task(tasks: Sequence[Task], task_id: str, patch: TaskPatch) -> list[Task]:
    return [apply_patch(t, patch) if t.id == task_id else t for t in tasks]


def remove_task(tasks: Sequence[Task], task_id: str) -> list[Task]:
    return [t for t in tasks if t.id != task_id]


def without_completed(tasks: Sequence[Task]) -> list[Task]:
    return [t for t in tasks if not t.completed]


def reorder_tasks(tasks: Sequence[Task], ordered_ids: Sequence[str]) -> list[Task]:
    """
    Re-rank `tasks` (given in canonical order) by `ordered_ids`.

    - a known id gets order = its index in ordered_ids (first occurrence wins)
    - unknown ids are ignored
    - tasks not mentioned keep their relative order and are ranked after
      every index of ordered_ids, so they always land at the end
    """
    by_id = {t.id: t for t in tasks}
    placed: list[Task] = []
    seen: set[str] = set()

    for index, task_id in enumerate(ordered_ids):
        task = by_id.get(task_id)
        if task is None or task_id in seen:
            continue
        moved = task.copy()
        moved.order = index
        placed.append(moved)
        seen.add(task_id)

    offset = len(ordered_ids)
    rest = [t for t in tasks if t.id not in seen]
    for k, task in enumerate(rest):
        moved = task.copy()
        moved.order = offset + k
        placed.append(moved)

    return placed


def move_id(ids: Sequence[str], active_id: str, over_id: str) -> list[str] | None:
    """
    Drag-and-drop helper: move `active_id` to the slot held by `over_id`.

    Returns None when nothing should happen (same id, or either id unknown).
    """
    if active_id == over_id:
        return None
    try:
        old_index = ids.index(active_id)
        new_index = ids.index(over_id)
    except ValueError:
        return None
    out = list(ids)
    out.insert(new_index, out.pop(old_index))
    return out
