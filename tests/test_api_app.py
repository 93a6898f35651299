# tests/test_api_app.py

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from clarity_todo.api.app import create_app
from clarity_todo.core.errors import StorageFailure
from clarity_todo.tasks.task_store import TaskStore


def _body(task_id: str, text: str = "Buy milk", **extra) -> dict:
    return {
        "id": task_id,
        "text": text,
        "completed": False,
        "createdAt": "2024-01-01T10:00:00.000Z",
        **extra,
    }


@pytest.fixture()
def client(store: TaskStore) -> TestClient:
    return TestClient(create_app(store))


def test_list_empty(client: TestClient) -> None:
    resp = client.get("/api/todos")
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "data": []}


def test_create_returns_full_collection(client: TestClient) -> None:
    client.post("/api/todos", json=_body("a"))
    resp = client.post("/api/todos", json=_body("b", "Walk dog", priority="high", tags=["pets"]))

    assert resp.status_code == 200
    payload = resp.json()
    assert payload["success"] is True
    assert [t["id"] for t in payload["data"]] == ["a", "b"]
    assert payload["data"][1]["priority"] == "high"
    assert payload["data"][1]["tags"] == ["pets"]
    assert isinstance(payload["data"][0]["order"], int)


@pytest.mark.parametrize(
    "body",
    [
        _body("a", ""),
        _body("a", "   "),
        _body("a", createdAt="yesterday"),
        _body("a", priority="urgent"),
        _body("a", tags=[""]),
        {"text": "no id", "completed": False, "createdAt": "2024-01-01T00:00:00Z"},
    ],
)
def test_create_rejects_invalid_body(client: TestClient, store: TaskStore, body: dict) -> None:
    resp = client.post("/api/todos", json=body)

    assert resp.status_code == 400
    payload = resp.json()
    assert payload["success"] is False
    assert payload["error"]
    assert store.list_tasks() == []


def test_create_duplicate_is_conflict(client: TestClient) -> None:
    client.post("/api/todos", json=_body("a"))
    resp = client.post("/api/todos", json=_body("a", "again"))

    assert resp.status_code == 409
    assert resp.json() == {"success": False, "error": "Task with id 'a' already exists"}


def test_update_merges_and_ignores_immutable_fields(client: TestClient) -> None:
    client.post("/api/todos", json=_body("a", dueDate="2024-01-05"))

    resp = client.put(
        "/api/todos/a",
        json={"completed": True, "id": "zzz", "createdAt": "2030-01-01T00:00:00Z", "order": 99},
    )

    assert resp.status_code == 200
    (task,) = resp.json()["data"]
    assert task["id"] == "a"
    assert task["completed"] is True
    assert task["createdAt"] == "2024-01-01T10:00:00.000Z"
    assert task["dueDate"] == "2024-01-05"
    assert task["order"] != 99


def test_update_empty_string_clears_due_date(client: TestClient) -> None:
    client.post("/api/todos", json=_body("a", dueDate="2024-01-05"))
    resp = client.put("/api/todos/a", json={"dueDate": ""})
    assert "dueDate" not in resp.json()["data"][0]


def test_update_unknown_id_is_not_found(client: TestClient) -> None:
    resp = client.put("/api/todos/missing", json={"completed": True})
    assert resp.status_code == 404
    assert resp.json()["success"] is False


def test_update_rejects_empty_text(client: TestClient) -> None:
    client.post("/api/todos", json=_body("a"))
    resp = client.put("/api/todos/a", json={"text": ""})
    assert resp.status_code == 400


def test_delete_is_idempotent(client: TestClient) -> None:
    client.post("/api/todos", json=_body("a"))

    first = client.delete("/api/todos/a")
    second = client.delete("/api/todos/a")

    assert first.status_code == second.status_code == 200
    assert first.json() == second.json() == {"success": True, "data": []}


def test_clear_completed(client: TestClient) -> None:
    client.post("/api/todos", json=_body("1", completed=True))
    client.post("/api/todos", json=_body("2"))

    resp = client.post("/api/todos/clear-completed")

    assert [t["id"] for t in resp.json()["data"]] == ["2"]


def test_reorder(client: TestClient) -> None:
    for task_id in ("1", "2", "3"):
        client.post("/api/todos", json=_body(task_id))

    resp = client.post("/api/todos/reorder", json={"orderedIds": ["3", "1"]})

    assert [(t["id"], t["order"]) for t in resp.json()["data"]] == [("3", 0), ("1", 1), ("2", 2)]


def test_reorder_requires_ordered_ids(client: TestClient) -> None:
    resp = client.post("/api/todos/reorder", json={"ids": ["1"]})
    assert resp.status_code == 400
    assert "orderedIds" in resp.json()["error"]


def test_storage_failure_maps_to_503(store: TaskStore, monkeypatch: pytest.MonkeyPatch) -> None:
    def broken() -> list:
        raise StorageFailure("disk unavailable")

    monkeypatch.setattr(store, "list_tasks", broken)
    resp = TestClient(create_app(store)).get("/api/todos")

    assert resp.status_code == 503
    assert resp.json() == {"success": False, "error": "disk unavailable"}


@pytest.mark.parametrize("order", ["1e309", "-1e309", "NaN", "1" + "0" * 400])
def test_create_rejects_unbounded_order_and_keeps_working(
    client: TestClient, store: TaskStore, order: str
) -> None:
    raw = (
        '{"id": "a", "text": "Buy milk", "completed": false, '
        f'"createdAt": "2024-01-01T10:00:00.000Z", "order": {order}}}'
    )

    resp = client.post("/api/todos", content=raw, headers={"Content-Type": "application/json"})

    assert resp.status_code == 400
    assert "order" in resp.json()["error"]
    assert store.list_tasks() == []

    follow_up = client.post("/api/todos", json=_body("b"))
    assert follow_up.status_code == 200
    assert [t["id"] for t in follow_up.json()["data"]] == ["b"]
