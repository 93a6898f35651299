# src/clarity_todo/views/projector.py

"""
View projection.

A pure pipeline over the canonical collection:

    status filter -> search -> sort -> group

No clock reads and no dependence on dict/set iteration beyond insertion order,
so the same inputs always produce the same output. Drag-and-drop reordering is
only meaningful for SortBy.MANUAL; callers gate it with `can_reorder`.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum

from ..tasks.task_models import Task, parse_timestamp


class StatusFilter(StrEnum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


class SortBy(StrEnum):
    MANUAL = "manual"
    DUE_DATE = "dueDate"
    PRIORITY = "priority"
    CREATED_AT = "createdAt"


class GroupBy(StrEnum):
    NONE = "none"
    PRIORITY = "priority"
    DUE_DATE = "dueDate"


NO_DUE_DATE = "No Due Date"


@dataclass(frozen=True, slots=True)
class Flat:
    tasks: list[Task]


@dataclass(frozen=True, slots=True)
class Grouped:
    """Group label -> tasks; label order is first occurrence in the sorted sequence."""

    groups: dict[str, list[Task]] = field(default_factory=dict)

    def tasks(self) -> list[Task]:
        return [t for bucket in self.groups.values() for t in bucket]


ProjectionResult = Flat | Grouped


@dataclass(frozen=True, slots=True)
class ListSummary:
    total: int
    active: int
    completed: int

    @property
    def items_left_label(self) -> str:
        return f"{self.active} {'item' if self.active == 1 else 'items'} left"

    @property
    def clear_completed_enabled(self) -> bool:
        return self.completed > 0


_SUFFIXES = {1: "st", 2: "nd", 3: "rd"}


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return f"{day}th"
    return f"{day}{_SUFFIXES.get(day % 10, 'th')}"


_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def format_calendar_date(d: date) -> str:
    """'January 5th, 2024' (locale-independent)."""
    return f"{_MONTHS[d.month - 1]} {_ordinal(d.day)}, {d.year}"


def due_date_label(task: Task) -> str:
    dt = parse_timestamp(task.due_date)
    if dt is None:
        return NO_DUE_DATE
    return format_calendar_date(dt.date())


def _filter_status(tasks: Iterable[Task], status: StatusFilter) -> list[Task]:
    if status == StatusFilter.ACTIVE:
        return [t for t in tasks if not t.completed]
    if status == StatusFilter.COMPLETED:
        return [t for t in tasks if t.completed]
    return list(tasks)


def matches_search(task: Task, term: str) -> bool:
    needle = term.strip().casefold()
    if not needle:
        return True
    if needle in task.text.casefold():
        return True
    return any(needle in tag.casefold() for tag in task.tags or ())


def _sort(tasks: list[Task], sort_by: SortBy) -> list[Task]:
    if sort_by == SortBy.DUE_DATE:
        dated: list[tuple[float, Task]] = []
        undated: list[Task] = []
        for t in tasks:
            dt = parse_timestamp(t.due_date)
            if dt is None:
                undated.append(t)
            else:
                dated.append((dt.timestamp(), t))
        dated.sort(key=lambda pair: pair[0])
        return [t for _, t in dated] + undated
    if sort_by == SortBy.PRIORITY:
        return sorted(tasks, key=lambda t: t.priority_rank, reverse=True)
    if sort_by == SortBy.CREATED_AT:
        return sorted(tasks, key=lambda t: t.created_millis, reverse=True)
    return list(tasks)


def _group(tasks: list[Task], group_by: GroupBy) -> ProjectionResult:
    if group_by == GroupBy.NONE:
        return Flat(tasks)

    groups: dict[str, list[Task]] = {}
    for t in tasks:
        if group_by == GroupBy.PRIORITY:
            key = t.priority.label if t.priority is not None else "No Priority"
        else:
            key = due_date_label(t)
        groups.setdefault(key, []).append(t)
    return Grouped(groups)


def project(
    tasks: Sequence[Task],
    status: StatusFilter | str = StatusFilter.ALL,
    search_term: str = "",
    sort_by: SortBy | str = SortBy.MANUAL,
    group_by: GroupBy | str = GroupBy.NONE,
) -> ProjectionResult:
    """
    Filter, search, sort and group `tasks` (given in canonical order).

    Sorts are stable, so ties keep the canonical order. Raises ValueError for an
    unknown status/sort/group value.
    """
    status = StatusFilter(status)
    sort_by = SortBy(sort_by)
    group_by = GroupBy(group_by)

    visible = _filter_status(tasks, status)
    visible = [t for t in visible if matches_search(t, search_term)]
    return _group(_sort(visible, sort_by), group_by)


def can_reorder(sort_by: SortBy | str) -> bool:
    return SortBy(sort_by) == SortBy.MANUAL


def reorder_disabled_reason(sort_by: SortBy | str) -> str | None:
    if can_reorder(sort_by):
        return None
    return "Drag-and-drop reordering is only available with manual sorting."


def summarize(tasks: Sequence[Task]) -> ListSummary:
    active = sum(1 for t in tasks if not t.completed)
    return ListSummary(total=len(tasks), active=active, completed=len(tasks) - active)
