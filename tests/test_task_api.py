"""Tests for the Task API endpoints."""

from __future__ import annotations

from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from kanban_board.config import Settings
from kanban_board.server.api import create_app
from kanban_board.storage import FileTaskRepository, StoreConnectionError


@pytest.fixture
def app(tmp_path: Path):
    """Create a test app backed by a temp YAML store."""
    settings = Settings(database_url=str(tmp_path / "store" / "tasks.yaml"))
    return create_app(settings=settings, enable_cors=False)


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def _create(client: AsyncClient, **body) -> dict:
    resp = await client.post("/api/tasks", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.anyio
class TestTaskCRUD:
    async def test_root(self, client: AsyncClient) -> None:
        resp = await client.get("/")
        assert resp.status_code == 200
        assert resp.json()["status"] == "running"

    async def test_list_empty(self, client: AsyncClient) -> None:
        resp = await client.get("/api/tasks")
        assert resp.status_code == 200
        assert resp.json() == []

    async def test_create_defaults_to_todo(self, client: AsyncClient) -> None:
        task = await _create(client, title="Design the new logo", description="SVG please")
        assert task["title"] == "Design the new logo"
        assert task["description"] == "SVG please"
        assert task["status"] == "To Do"
        assert task["id"].startswith("task-")
        assert task["created_at"]
        assert task["updated_at"]

    async def test_create_with_status(self, client: AsyncClient) -> None:
        task = await _create(client, title="Ship it", status="Done")
        assert task["status"] == "Done"

    async def test_create_without_description(self, client: AsyncClient) -> None:
        task = await _create(client, title="Bare")
        assert task["description"] == ""

    @pytest.mark.parametrize("body", [{}, {"title": ""}, {"title": "   "}, {"title": None}])
    async def test_create_requires_title(self, client: AsyncClient, body: dict) -> None:
        resp = await client.post("/api/tasks", json=body)
        assert resp.status_code == 400
        assert "title" in resp.json()["detail"]

        resp = await client.get("/api/tasks")
        assert resp.json() == []

    @pytest.mark.parametrize("status", ["Blocked", ""])
    async def test_create_rejects_unknown_status(self, client: AsyncClient, status: str) -> None:
        resp = await client.post("/api/tasks", json={"title": "X", "status": status})
        assert resp.status_code == 400
        assert "status" in resp.json()["detail"]

        resp = await client.get("/api/tasks")
        assert resp.json() == []

    @pytest.mark.parametrize(
        "body, field",
        [
            ({"title": 42}, "title"),
            ({"title": "X", "description": ["a"]}, "description"),
            ({"title": "X", "status": 1}, "status"),
        ],
    )
    async def test_create_rejects_non_string_fields(self, client: AsyncClient, body: dict, field: str) -> None:
        resp = await client.post("/api/tasks", json=body)
        assert resp.status_code == 400
        assert field in resp.json()["detail"]

    async def test_list_returns_full_collection_in_order(self, client: AsyncClient) -> None:
        first = await _create(client, title="One")
        second = await _create(client, title="Two")
        resp = await client.get("/api/tasks")
        assert [t["id"] for t in resp.json()] == [first["id"], second["id"]]

    async def test_get_one_and_missing(self, client: AsyncClient) -> None:
        task = await _create(client, title="Find me")
        resp = await client.get(f"/api/tasks/{task['id']}")
        assert resp.status_code == 200
        assert resp.json()["title"] == "Find me"

        resp = await client.get("/api/tasks/nope")
        assert resp.status_code == 404


@pytest.mark.anyio
class TestUpdate:
    async def test_status_only(self, client: AsyncClient) -> None:
        task = await _create(client, title="Move me", description="keep")
        resp = await client.put(f"/api/tasks/{task['id']}", json={"status": "In Progress"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "In Progress"
        assert data["title"] == "Move me"
        assert data["description"] == "keep"

    async def test_edit_preserves_status_and_id(self, client: AsyncClient) -> None:
        task = await _create(client, title="Old", status="Done")
        resp = await client.put(
            f"/api/tasks/{task['id']}", json={"title": "New", "description": "Details"}
        )
        data = resp.json()
        assert data["id"] == task["id"]
        assert data["status"] == "Done"
        assert data["title"] == "New"
        assert data["description"] == "Details"
        assert data["created_at"] == task["created_at"]

    async def test_client_cannot_change_id(self, client: AsyncClient) -> None:
        task = await _create(client, title="Fixed id")
        resp = await client.put(f"/api/tasks/{task['id']}", json={"id": "task-hijacked", "title": "Still"})
        assert resp.status_code == 200
        assert resp.json()["id"] == task["id"]

    async def test_empty_title_rejected(self, client: AsyncClient) -> None:
        task = await _create(client, title="Keep")
        resp = await client.put(f"/api/tasks/{task['id']}", json={"title": ""})
        assert resp.status_code == 400
        resp = await client.get(f"/api/tasks/{task['id']}")
        assert resp.json()["title"] == "Keep"

    async def test_invalid_status_rejected(self, client: AsyncClient) -> None:
        task = await _create(client, title="Keep")
        resp = await client.put(f"/api/tasks/{task['id']}", json={"status": "Archived"})
        assert resp.status_code == 400
        resp = await client.get(f"/api/tasks/{task['id']}")
        assert resp.json()["status"] == "To Do"

    async def test_non_string_title_rejected(self, client: AsyncClient) -> None:
        task = await _create(client, title="Keep")
        resp = await client.put(f"/api/tasks/{task['id']}", json={"title": 7})
        assert resp.status_code == 400
        resp = await client.get(f"/api/tasks/{task['id']}")
        assert resp.json()["title"] == "Keep"

    async def test_missing_task(self, client: AsyncClient) -> None:
        resp = await client.put("/api/tasks/nope", json={"status": "Done"})
        assert resp.status_code == 404


@pytest.mark.anyio
class TestDelete:
    async def test_delete_removes_exactly_one(self, client: AsyncClient) -> None:
        keep = await _create(client, title="Keep")
        drop = await _create(client, title="Drop")

        resp = await client.delete(f"/api/tasks/{drop['id']}")
        assert resp.status_code == 200
        assert resp.json() == {"message": "Task deleted", "id": drop["id"], "deleted": True}

        resp = await client.get("/api/tasks")
        assert [t["id"] for t in resp.json()] == [keep["id"]]

    async def test_delete_is_idempotent(self, client: AsyncClient) -> None:
        task = await _create(client, title="Once")
        await client.delete(f"/api/tasks/{task['id']}")
        resp = await client.delete(f"/api/tasks/{task['id']}")
        assert resp.status_code == 200
        assert resp.json()["deleted"] is False


@pytest.mark.anyio
async def test_tasks_persist_across_apps(tmp_path: Path) -> None:
    settings = Settings(database_url=str(tmp_path / "tasks.yaml"))
    first = create_app(settings=settings, enable_cors=False)
    async with AsyncClient(transport=ASGITransport(app=first), base_url="http://test") as c:
        created = await _create(c, title="Durable")

    second = create_app(settings=settings, enable_cors=False)
    async with AsyncClient(transport=ASGITransport(app=second), base_url="http://test") as c:
        resp = await c.get("/api/tasks")
    assert [t["id"] for t in resp.json()] == [created["id"]]
    assert isinstance(second.state.repository, FileTaskRepository)


def test_create_app_fails_on_corrupt_store(tmp_path: Path) -> None:
    store = tmp_path / "tasks.yaml"
    store.write_text("tasks: [unterminated\n", encoding="utf-8")
    with pytest.raises(StoreConnectionError):
        create_app(settings=Settings(database_url=str(store)))


def test_cors_headers(tmp_path: Path) -> None:
    from fastapi.testclient import TestClient

    app = create_app(settings=Settings(database_url="memory://"))
    client = TestClient(app)
    resp = client.get("/api/tasks", headers={"Origin": "http://localhost:3000"})
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "*"
