"""Task API endpoints for the board.

This module provides a FastAPI router with list/create/update/delete over the
task repository stored on ``app.state``.  It is mounted under ``/api/tasks``
by the ``create_app`` factory.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from loguru import logger
from pydantic import BaseModel

from ..domain.models import Task, TaskStatus, validate_title
from ..storage.interfaces import TaskRepository


# ---------------------------------------------------------------------------
# Pydantic request / response models
# ---------------------------------------------------------------------------

class CreateTaskRequest(BaseModel):
    title: Any = None
    description: Any = ""
    status: Any = None


class UpdateTaskRequest(BaseModel):
    title: Any = None
    description: Any = None
    status: Any = None


class TaskResponse(BaseModel):
    id: str
    title: str
    description: str
    status: TaskStatus
    created_at: str
    updated_at: str

    @classmethod
    def from_task(cls, task: Task) -> "TaskResponse":
        return cls(**task.to_dict())


class DeleteResponse(BaseModel):
    message: str
    id: str
    deleted: bool


def get_repository(request: Request) -> TaskRepository:
    return request.app.state.repository


def _require_text(fields: dict[str, Any]) -> None:
    """Raise ``ValueError`` for a field that is present but not a string."""
    for key, value in fields.items():
        if value is not None and not isinstance(value, str):
            raise ValueError(f"'{key}' must be a string, got {type(value).__name__}")


# ---------------------------------------------------------------------------
# Router factory
# ---------------------------------------------------------------------------

def create_task_router() -> APIRouter:
    """Create the task API router.

    Handlers resolve the repository through :func:`get_repository`, so tests
    and alternative stores swap it via ``app.state`` or
    ``app.dependency_overrides``.
    """
    router = APIRouter(prefix="/api/tasks", tags=["tasks"])

    @router.get("", response_model=list[TaskResponse])
    async def list_tasks(repo: TaskRepository = Depends(get_repository)) -> list[TaskResponse]:
        return [TaskResponse.from_task(t) for t in repo.list()]

    @router.post("", response_model=TaskResponse, status_code=201)
    async def create_task(
        body: CreateTaskRequest,
        repo: TaskRepository = Depends(get_repository),
    ) -> TaskResponse:
        try:
            _require_text(body.model_dump())
            task = Task(
                title=validate_title(body.title),
                description=body.description or "",
                status=TaskStatus.parse(body.status) if body.status is not None else TaskStatus.TODO,
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        repo.insert(task)
        logger.info("Created task {}: {}", task.id, task.title)
        return TaskResponse.from_task(task)

    @router.get("/{task_id}", response_model=TaskResponse)
    async def get_task(task_id: str, repo: TaskRepository = Depends(get_repository)) -> TaskResponse:
        task = repo.get(task_id)
        if task is None:
            raise HTTPException(status_code=404, detail=f"Task {task_id} not found")
        return TaskResponse.from_task(task)

    @router.put("/{task_id}", response_model=TaskResponse)
    async def update_task(
        task_id: str,
        body: UpdateTaskRequest,
        repo: TaskRepository = Depends(get_repository),
    ) -> TaskResponse:
        changes = body.model_dump(exclude_unset=True)
        try:
            _require_text(changes)
            task = repo.update(task_id, changes)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        if task is None:
            raise HTTPException(status_code=404, detail=f"Task {task_id} not found")
        logger.info("Updated task {} fields={}", task_id, sorted(changes))
        return TaskResponse.from_task(task)

    @router.delete("/{task_id}", response_model=DeleteResponse)
    async def delete_task(task_id: str, repo: TaskRepository = Depends(get_repository)) -> DeleteResponse:
        deleted = repo.delete(task_id)
        if deleted:
            logger.info("Deleted task {}", task_id)
        else:
            logger.debug("Delete for unknown task {} ignored", task_id)
        return DeleteResponse(message="Task deleted", id=task_id, deleted=deleted)

    return router
