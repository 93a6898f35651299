# tests/test_collection.py

from __future__ import annotations

import pytest

from clarity_todo.core.errors import InvalidInput
from clarity_todo.tasks import collection
from clarity_todo.tasks.task_models import Priority, Task, TaskPatch

from .fakes import make_task


def test_apply_patch_never_mutates_input() -> None:
    task = make_task("a", "old", tags=["x"])
    patched = collection.apply_patch(task, TaskPatch(text="new", tags=["y"]))

    assert task.text == "old"
    assert task.tags == ["x"]
    assert patched.text == "new"
    assert patched.tags == ["y"]


def test_apply_patch_rejects_blank_text() -> None:
    with pytest.raises(InvalidInput):
        collection.apply_patch(make_task("a"), TaskPatch(text=" \t"))


def test_reorder_tasks_covers_every_id() -> None:
    tasks = [make_task(i, order=n) for n, i in enumerate("abcde")]
    result = collection.reorder_tasks(tasks, ["d", "a", "x"])

    assert [t.id for t in result] == ["d", "a", "b", "c", "e"]
    assert sorted(t.id for t in result) == sorted(t.id for t in tasks)
    assert [t.order for t in result] == [0, 1, 3, 4, 5]


def test_canonical_sort_breaks_ties_by_created_at_then_id() -> None:
    tasks = [
        make_task("b", order=1, created_at="2024-01-02T00:00:00Z"),
        make_task("a", order=1, created_at="2024-01-02T00:00:00Z"),
        make_task("c", order=1, created_at="2024-01-01T00:00:00Z"),
    ]
    assert [t.id for t in collection.canonical_sort(tasks)] == ["c", "a", "b"]


@pytest.mark.parametrize(
    ("active", "over", "expected"),
    [
        ("a", "c", ["b", "c", "a", "d"]),
        ("d", "a", ["d", "a", "b", "c"]),
        ("b", "b", None),
        ("zz", "a", None),
    ],
)
def test_move_id(active: str, over: str, expected: list[str] | None) -> None:
    assert collection.move_id(["a", "b", "c", "d"], active, over) == expected


def test_task_wire_format_omits_unset_fields() -> None:
    task = Task(id="a", text="t", completed=False, created_at="2024-01-01T00:00:00.000Z")
    assert task.to_wire() == {
        "id": "a",
        "text": "t",
        "completed": False,
        "createdAt": "2024-01-01T00:00:00.000Z",
    }


def test_task_from_wire_reads_camel_case() -> None:
    task = Task.from_wire(
        {
            "id": "a",
            "text": "t",
            "completed": True,
            "createdAt": "2024-01-01T00:00:00.000Z",
            "dueDate": "2024-01-05T00:00:00.000Z",
            "startTime": "09:00",
            "endTime": "10:30",
            "order": 3,
            "priority": "medium",
            "tags": ["work", "work"],
        }
    )
    assert task.due_date == "2024-01-05T00:00:00.000Z"
    assert task.start_time == "09:00"
    assert task.end_time == "10:30"
    assert task.order == 3
    assert task.priority == Priority.MEDIUM
    assert task.tags == ["work", "work"]


def test_patch_wire_round_trip_drops_immutable_keys() -> None:
    patch = TaskPatch.from_wire({"id": "other", "createdAt": "x", "order": 9, "completed": True})
    assert patch.to_wire() == {"completed": True}


@pytest.mark.parametrize("order", [float("inf"), float("-inf"), float("nan"), 10**400, True])
def test_task_from_wire_rejects_unbounded_order(order) -> None:
    with pytest.raises(InvalidInput):
        Task.from_wire(
            {"id": "a", "text": "t", "completed": False, "createdAt": "2024-01-01T00:00:00Z",
             "order": order}
        )
