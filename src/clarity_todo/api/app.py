# src/clarity_todo/api/app.py

"""
HTTP boundary for the task list.

Validation happens here (pydantic schemas) before the store is touched. Every
response uses the `{success, data?, error?}` envelope; store errors keep their
own HTTP status (see TodoError.status_code).

Endpoints are plain `def` functions, so FastAPI runs them in its threadpool;
the TaskStore lock serializes the read-modify-write sequences.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..core.errors import TodoError
from ..core.ports import TaskRepo
from ..tasks.task_models import Task
from .schemas import ReorderIn, TaskCreateIn, TaskUpdateIn, envelope

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/todos", tags=["todos"])


def get_store(request: Request) -> TaskRepo:
    return request.app.state.task_store


def _ok(tasks: list[Task]) -> dict[str, Any]:
    return envelope([t.to_wire() for t in tasks])


@router.get("")
def list_todos(store: TaskRepo = Depends(get_store)) -> dict[str, Any]:
    return _ok(store.list_tasks())


@router.post("")
def create_todo(body: TaskCreateIn, store: TaskRepo = Depends(get_store)) -> dict[str, Any]:
    return _ok(store.create(body.to_task()))


@router.post("/clear-completed")
def clear_completed(store: TaskRepo = Depends(get_store)) -> dict[str, Any]:
    return _ok(store.clear_completed())


@router.post("/reorder")
def reorder_todos(body: ReorderIn, store: TaskRepo = Depends(get_store)) -> dict[str, Any]:
    return _ok(store.reorder(body.ordered_ids))


@router.put("/{task_id}")
def update_todo(
    task_id: str, body: TaskUpdateIn, store: TaskRepo = Depends(get_store)
) -> dict[str, Any]:
    return _ok(store.update(task_id, body.to_patch()))


@router.delete("/{task_id}")
def delete_todo(task_id: str, store: TaskRepo = Depends(get_store)) -> dict[str, Any]:
    return _ok(store.delete(task_id))


def _validation_message(exc: RequestValidationError) -> str:
    parts: list[str] = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        where = ".".join(loc) or "body"
        parts.append(f"{where}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts) or "Invalid request"


def create_app(task_store: TaskRepo, *, title: str = "clarity") -> FastAPI:
    """Build the ASGI app around an already-constructed store."""
    app = FastAPI(title=title)
    app.state.task_store = task_store
    app.include_router(router)

    @app.exception_handler(RequestValidationError)
    async def _on_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        message = _validation_message(exc)
        logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=envelope(error=message),
        )

    @app.exception_handler(TodoError)
    async def _on_todo_error(request: Request, exc: TodoError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        else:
            logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=envelope(error=exc.message))

    @app.exception_handler(Exception)
    async def _on_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=envelope(error="Internal server error"),
        )

    return app
