# tests/test_api_client.py

from __future__ import annotations

import json

import httpx
import pytest

from clarity_todo.api.app import create_app
from clarity_todo.core.errors import NetworkFailure
from clarity_todo.sync.api_client import TodoApiClient
from clarity_todo.sync.controller import MutationState, SyncController
from clarity_todo.tasks.task_models import TaskPatch
from clarity_todo.tasks.task_store import TaskStore

from .fakes import RecordingNotifier, make_task

WIRE_TASK = {
    "id": "a",
    "text": "Buy milk",
    "completed": False,
    "createdAt": "2024-01-01T00:00:00.000Z",
    "order": 1,
}


def _client(handler) -> TodoApiClient:
    return TodoApiClient("http://testserver", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_list_parses_envelope_data() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True, "data": [WIRE_TASK]})

    async with _client(handler) as client:
        tasks = await client.list_tasks()

    assert [t.id for t in tasks] == ["a"]
    assert tasks[0].order == 1
    assert seen[0].method == "GET"
    assert seen[0].url.path == "/api/todos"


@pytest.mark.asyncio
async def test_success_without_data_is_empty_list() -> None:
    async with _client(lambda r: httpx.Response(200, json={"success": True})) as client:
        assert await client.clear_completed() == []


@pytest.mark.asyncio
async def test_success_false_raises_with_server_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, json={"success": False, "error": "Task with id 'a' already exists"})

    async with _client(handler) as client:
        with pytest.raises(NetworkFailure) as excinfo:
            await client.create_task(make_task("a"))

    assert excinfo.value.message == "Task with id 'a' already exists"
    assert excinfo.value.http_status == 409


@pytest.mark.asyncio
async def test_success_false_with_2xx_is_still_a_failure() -> None:
    async with _client(lambda r: httpx.Response(200, json={"success": False})) as client:
        with pytest.raises(NetworkFailure) as excinfo:
            await client.list_tasks()
    assert excinfo.value.message == "API call failed"


@pytest.mark.asyncio
async def test_non_json_error_response() -> None:
    async with _client(lambda r: httpx.Response(502, text="Bad Gateway")) as client:
        with pytest.raises(NetworkFailure) as excinfo:
            await client.list_tasks()
    assert excinfo.value.message == "Network response was not ok"
    assert excinfo.value.http_status == 502


@pytest.mark.asyncio
async def test_malformed_task_in_response() -> None:
    body = {"success": True, "data": [{"id": "a"}]}
    async with _client(lambda r: httpx.Response(200, json=body)) as client:
        with pytest.raises(NetworkFailure):
            await client.list_tasks()


@pytest.mark.asyncio
async def test_transport_error_becomes_network_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(NetworkFailure) as excinfo:
            await client.delete_task("a")
    assert excinfo.value.message.startswith("Network error")


@pytest.mark.asyncio
async def test_request_shapes() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True, "data": []})

    async with _client(handler) as client:
        await client.update_task("a/b c", TaskPatch(completed=True, due_date=""))
        await client.reorder(["b", "a"])

    update, reorder = seen
    assert update.method == "PUT"
    assert update.url.raw_path == b"/api/todos/a%2Fb%20c"
    assert json.loads(update.content) == {"completed": True, "dueDate": ""}
    assert reorder.url.path == "/api/todos/reorder"
    assert json.loads(reorder.content) == {"orderedIds": ["b", "a"]}


@pytest.mark.asyncio
async def test_controller_against_real_app(store: TaskStore) -> None:
    transport = httpx.ASGITransport(app=create_app(store))
    notifier = RecordingNotifier()

    async with TodoApiClient("http://testserver", transport=transport) as client:
        controller = SyncController(client, notifier=notifier)
        assert await controller.refresh()

        first = await controller.add("Buy milk")
        second = await controller.add("Walk dog", priority="high")
        assert first.state == second.state == MutationState.COMMITTED

        ids = [t.id for t in controller.tasks]
        await controller.move(ids[1], ids[0])
        assert [t.id for t in controller.tasks] == [ids[1], ids[0]]

        duplicate = await controller.create(controller.tasks[0])
        assert duplicate.state == MutationState.ROLLED_BACK
        assert notifier.messages[-1].startswith("Failed to add task.")

    assert [t.to_wire() for t in controller.tasks] == [t.to_wire() for t in store.list_tasks()]
