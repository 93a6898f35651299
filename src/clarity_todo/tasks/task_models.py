# src/clarity_todo/tasks/task_models.py

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from ..core.errors import InvalidInput


class Priority(StrEnum):
    """Task priority; ordering is none < low < medium < high."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @property
    def label(self) -> str:
        return _PRIORITY_LABEL[self]

    @classmethod
    def parse(cls, raw: Any) -> Priority:
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise InvalidInput(f"Invalid priority: {raw!r}") from None


_PRIORITY_RANK = {
    Priority.NONE: 0,
    Priority.LOW: 1,
    Priority.MEDIUM: 2,
    Priority.HIGH: 3,
}

_PRIORITY_LABEL = {
    Priority.NONE: "No Priority",
    Priority.LOW: "Low",
    Priority.MEDIUM: "Medium",
    Priority.HIGH: "High",
}


def parse_timestamp(raw: str | None) -> datetime | None:
    """
    Parse an ISO-8601 timestamp as sent by browsers ("2024-01-05T00:00:00.000Z").

    Returns None for empty or unparseable input. Naive values are treated as UTC.
    """
    if not raw:
        return None
    s = raw.strip()
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def timestamp_millis(raw: str | None) -> float | None:
    dt = parse_timestamp(raw)
    return None if dt is None else dt.timestamp() * 1000.0


def utc_now_iso() -> str:
    """Current time in the same shape JS `toISOString()` produces."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def _opt_str(raw: Any, name: str) -> str | None:
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise InvalidInput(f"{name} must be a string")
    return raw


def _opt_tags(raw: Any) -> list[str] | None:
    if raw is None:
        return None
    if not isinstance(raw, list) or not all(isinstance(t, str) for t in raw):
        raise InvalidInput("tags must be a list of strings")
    return list(raw)


# Orders are epoch millis or small indexes; JSON clients cannot represent more than 2**53 exactly.
MAX_ORDER = 2**53


def is_valid_order(value: Any) -> bool:
    """A finite number within +/- MAX_ORDER (bools are not numbers here)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if isinstance(value, float) and not math.isfinite(value):
        return False
    return -MAX_ORDER <= value <= MAX_ORDER


@dataclass(slots=True)
class Task:
    id: str
    text: str
    completed: bool
    created_at: str

    due_date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    order: float | None = None
    priority: Priority | None = None
    tags: list[str] | None = field(default=None)

    @property
    def created_millis(self) -> float:
        return timestamp_millis(self.created_at) or 0.0

    @property
    def priority_rank(self) -> int:
        return (self.priority or Priority.NONE).rank

    def copy(self) -> Task:
        return Task(
            id=self.id,
            text=self.text,
            completed=self.completed,
            created_at=self.created_at,
            due_date=self.due_date,
            start_time=self.start_time,
            end_time=self.end_time,
            order=self.order,
            priority=self.priority,
            tags=None if self.tags is None else list(self.tags),
        )

    def to_wire(self) -> dict[str, Any]:
        """camelCase JSON shape shared by storage and the HTTP API; unset fields are omitted."""
        out: dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "completed": self.completed,
            "createdAt": self.created_at,
        }
        if self.due_date is not None:
            out["dueDate"] = self.due_date
        if self.start_time is not None:
            out["startTime"] = self.start_time
        if self.end_time is not None:
            out["endTime"] = self.end_time
        if self.order is not None:
            out["order"] = self.order
        if self.priority is not None:
            out["priority"] = self.priority.value
        if self.tags is not None:
            out["tags"] = list(self.tags)
        return out

    @classmethod
    def from_wire(cls, data: Any) -> Task:
        if not isinstance(data, dict):
            raise InvalidInput("task must be an object")

        task_id = data.get("id")
        if not isinstance(task_id, str) or not task_id:
            raise InvalidInput("id must be a non-empty string")
        text = data.get("text")
        if not isinstance(text, str):
            raise InvalidInput("text must be a string")
        completed = data.get("completed", False)
        if not isinstance(completed, bool):
            raise InvalidInput("completed must be a boolean")
        created_at = data.get("createdAt")
        if not isinstance(created_at, str) or not created_at:
            raise InvalidInput("createdAt must be a timestamp string")

        order = data.get("order")
        if order is not None and not is_valid_order(order):
            raise InvalidInput(f"order must be a finite number within +/-{MAX_ORDER}")

        raw_priority = data.get("priority")
        return cls(
            id=task_id,
            text=text,
            completed=completed,
            created_at=created_at,
            due_date=_opt_str(data.get("dueDate"), "dueDate"),
            start_time=_opt_str(data.get("startTime"), "startTime"),
            end_time=_opt_str(data.get("endTime"), "endTime"),
            order=order,
            priority=None if raw_priority is None else Priority.parse(raw_priority),
            tags=_opt_tags(data.get("tags")),
        )


@dataclass(slots=True)
class TaskPatch:
    """
    Partial update. None means "leave unchanged".

    An empty string clears due_date/start_time/end_time. id, created_at and order
    are not members: they cannot be patched.
    """

    text: str | None = None
    completed: bool | None = None
    due_date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    priority: Priority | None = None
    tags: list[str] | None = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def to_wire(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, Priority):
                value = value.value
            elif isinstance(value, list):
                value = list(value)
            out[_WIRE_NAMES[f.name]] = value
        return out

    @classmethod
    def from_wire(cls, data: Any) -> TaskPatch:
        """Build a patch from a JSON body; unknown and immutable keys are ignored."""
        if not isinstance(data, dict):
            raise InvalidInput("update body must be an object")

        text = _opt_str(data.get("text"), "text")
        completed = data.get("completed")
        if completed is not None and not isinstance(completed, bool):
            raise InvalidInput("completed must be a boolean")
        raw_priority = data.get("priority")
        return cls(
            text=text,
            completed=completed,
            due_date=_opt_str(data.get("dueDate"), "dueDate"),
            start_time=_opt_str(data.get("startTime"), "startTime"),
            end_time=_opt_str(data.get("endTime"), "endTime"),
            priority=None if raw_priority is None else Priority.parse(raw_priority),
            tags=_opt_tags(data.get("tags")),
        )


_WIRE_NAMES = {
    "text": "text",
    "completed": "completed",
    "due_date": "dueDate",
    "start_time": "startTime",
    "end_time": "endTime",
    "priority": "priority",
    "tags": "tags",
}
