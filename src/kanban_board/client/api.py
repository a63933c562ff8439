"""Async HTTP client for the Task API."""

from __future__ import annotations

from typing import Any, Optional

import httpx
from loguru import logger

from ..domain.models import Task, TaskStatus


class ApiError(RuntimeError):
    """A Task API call failed (transport error, error status or bad payload)."""

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


def _error_detail(resp: httpx.Response) -> Any:
    try:
        payload = resp.json()
    except ValueError:
        return resp.text or None
    if isinstance(payload, dict) and "detail" in payload:
        return payload["detail"]
    return payload


class TaskApiClient:
    """Thin wrapper over ``httpx.AsyncClient`` speaking the ``/tasks`` routes.

    ``base_url`` is the API root (for example ``http://localhost:5001/api``).
    Pass ``transport`` to talk to an in-process app or a mock.  No timeout is
    applied unless one is given.
    """

    def __init__(
        self,
        base_url: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url + "/",
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "TaskApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise ApiError(f"{method} {path} failed: {exc}") from exc
        if resp.is_error:
            detail = _error_detail(resp)
            raise ApiError(
                f"{method} {path} returned {resp.status_code}: {detail}",
                status_code=resp.status_code,
                detail=detail,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise ApiError(f"{method} {path} returned invalid JSON", status_code=resp.status_code) from exc

    @staticmethod
    def _parse_task(payload: Any) -> Task:
        try:
            return Task.from_dict(payload)
        except ValueError as exc:
            raise ApiError(f"Malformed task payload: {exc}") from exc

    async def get_tasks(self) -> list[Task]:
        payload = await self._request("GET", "tasks")
        if not isinstance(payload, list):
            raise ApiError(f"Expected a task list, got {type(payload).__name__}")
        return [self._parse_task(item) for item in payload]

    async def add_task(
        self,
        title: str,
        description: str = "",
        status: TaskStatus = TaskStatus.TODO,
    ) -> Task:
        body = {"title": title, "description": description, "status": TaskStatus.parse(status).value}
        return self._parse_task(await self._request("POST", "tasks", json=body))

    async def update_task(self, task_id: str, changes: dict[str, Any]) -> Task:
        body = {k: (v.value if isinstance(v, TaskStatus) else v) for k, v in changes.items()}
        return self._parse_task(await self._request("PUT", f"tasks/{task_id}", json=body))

    async def delete_task(self, task_id: str) -> dict[str, Any]:
        payload = await self._request("DELETE", f"tasks/{task_id}")
        logger.debug("Delete {} answered {}", task_id, payload)
        return payload if isinstance(payload, dict) else {}
