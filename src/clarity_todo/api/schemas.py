# src/clarity_todo/api/schemas.py

"""Request bodies accepted by the /api/todos boundary (camelCase on the wire)."""

from __future__ import annotations

from typing import Annotated, Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..tasks.task_models import MAX_ORDER, Priority, Task, TaskPatch, is_valid_order, parse_timestamp

TagStr = Annotated[str, Field(min_length=1)]


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TaskCreateIn(_WireModel):
    """Full new task as built by the client."""

    id: str = Field(min_length=1)
    text: str = Field(min_length=1)
    completed: bool
    created_at: str = Field(alias="createdAt")
    due_date: Optional[str] = Field(default=None, alias="dueDate")
    start_time: Optional[str] = Field(default=None, alias="startTime")
    end_time: Optional[str] = Field(default=None, alias="endTime")
    order: Optional[Union[int, float]] = None
    priority: Optional[Priority] = None
    tags: Optional[list[TagStr]] = None

    @field_validator("created_at")
    @classmethod
    def _iso_timestamp(cls, v: str) -> str:
        if parse_timestamp(v) is None:
            raise ValueError("must be an ISO-8601 datetime")
        return v

    @field_validator("order")
    @classmethod
    def _finite_order(cls, v: Optional[Union[int, float]]) -> Optional[Union[int, float]]:
        if v is not None and not is_valid_order(v):
            raise ValueError(f"must be a finite number within +/-{MAX_ORDER}")
        return v

    def to_task(self) -> Task:
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


class TaskUpdateIn(_WireModel):
    """Partial update; id/createdAt/order in the body are ignored."""

    text: Optional[str] = Field(default=None, min_length=1)
    completed: Optional[bool] = None
    due_date: Optional[str] = Field(default=None, alias="dueDate")
    start_time: Optional[str] = Field(default=None, alias="startTime")
    end_time: Optional[str] = Field(default=None, alias="endTime")
    priority: Optional[Priority] = None
    tags: Optional[list[TagStr]] = None

    def to_patch(self) -> TaskPatch:
        return TaskPatch(
            text=self.text,
            completed=self.completed,
            due_date=self.due_date,
            start_time=self.start_time,
            end_time=self.end_time,
            priority=self.priority,
            tags=None if self.tags is None else list(self.tags),
        )


class ReorderIn(_WireModel):
    ordered_ids: list[str] = Field(alias="orderedIds")


def envelope(data: Any = None, *, error: str | None = None) -> dict[str, Any]:
    """`{success, data?, error?}`."""
    if error is not None:
        return {"success": False, "error": error}
    return {"success": True, "data": data}
