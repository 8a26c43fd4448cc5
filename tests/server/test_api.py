"""Tests for the reference server endpoints."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from tasksync.server.app import create_app
from tasksync.server.database import Database


@pytest.fixture
def db(tmp_path: Path) -> Generator[Database, None, None]:
    """Create a test database."""
    database = Database(tmp_path / "server.db")
    yield database
    database.close()


@pytest.fixture
def client(db: Database) -> TestClient:
    """Create a test client with the app."""
    return TestClient(create_app(db))


def make_item(
    task_id: str,
    operation: str = "create",
    updated_at: str = "2025-01-01T10:00:00.000000+00:00",
    **fields: Any,
) -> dict[str, Any]:
    """Build one /batch item."""
    data: dict[str, Any] = {"id": task_id, "updated_at": updated_at}
    if operation != "delete":
        data.update({"title": "Task", "description": None, "completed": False})
    data.update(fields)
    return {
        "id": f"entry-{task_id}-{operation}",
        "task_id": task_id,
        "operation": operation,
        "data": data,
        "created_at": updated_at,
        "retry_count": 0,
    }


def post_batch(client: TestClient, *items: dict[str, Any]) -> list[dict[str, Any]]:
    """Send items and return processed_items."""
    response = client.post("/batch", json={"items": list(items), "client_timestamp": None})
    assert response.status_code == 200
    result: list[dict[str, Any]] = response.json()["processed_items"]
    return result


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    def test_health_check(self, client: TestClient) -> None:
        """Health endpoint should return OK."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["timestamp"]


class TestBatchEndpoint:
    """Tests for POST /batch."""

    def test_create_unknown_task(self, client: TestClient, db: Database) -> None:
        """Should store the task and return a server_id."""
        [result] = post_batch(client, make_item("t1", title="Buy milk"))

        assert result["client_id"] == "t1"
        assert result["status"] == "success"
        assert result["server_id"].startswith("srv-")
        stored = db.get_task("t1")
        assert stored is not None
        assert stored.title == "Buy milk"

    def test_update_with_newer_data(self, client: TestClient, db: Database) -> None:
        """Should apply updates that are not older than the stored copy."""
        [created] = post_batch(client, make_item("t1"))
        [updated] = post_batch(
            client,
            make_item(
                "t1",
                "update",
                updated_at="2025-01-02T10:00:00.000000+00:00",
                title="Renamed",
            ),
        )

        assert updated["status"] == "success"
        assert updated["server_id"] == created["server_id"]
        stored = db.get_task("t1")
        assert stored is not None
        assert stored.title == "Renamed"

    def test_equal_timestamp_is_applied(self, client: TestClient) -> None:
        """Should only report conflict when the stored copy is strictly newer."""
        post_batch(client, make_item("t1"))
        [result] = post_batch(client, make_item("t1", "update", title="Same time"))
        assert result["status"] == "success"

    def test_stale_update_conflicts(self, client: TestClient) -> None:
        """Should answer conflict with the stored version."""
        post_batch(
            client,
            make_item("t1", updated_at="2025-01-02T10:00:00.000000+00:00", title="Server"),
        )
        [result] = post_batch(client, make_item("t1", "update", title="Stale"))

        assert result["status"] == "conflict"
        resolved = result["resolved_data"]
        assert resolved["title"] == "Server"
        assert resolved["updated_at"] == "2025-01-02T10:00:00.000000+00:00"
        assert resolved["server_id"] == result["server_id"]

    def test_delete(self, client: TestClient, db: Database) -> None:
        """Should soft-delete stored tasks."""
        post_batch(client, make_item("t1"))
        [result] = post_batch(
            client, make_item("t1", "delete", updated_at="2025-01-02T10:00:00.000000+00:00")
        )

        assert result["status"] == "success"
        stored = db.get_task("t1")
        assert stored is not None
        assert stored.is_deleted is True
        assert db.list_tasks() == []
        assert len(db.list_tasks(include_deleted=True)) == 1

    def test_delete_unknown_task(self, client: TestClient) -> None:
        """Should accept deletes of tasks it never stored."""
        [result] = post_batch(client, make_item("ghost", "delete"))
        assert result["status"] == "success"
        assert result["server_id"] is None

    def test_missing_title(self, client: TestClient) -> None:
        """Should answer error for items without a title."""
        [result] = post_batch(client, make_item("t1", title=""))
        assert result["status"] == "error"
        assert result["error"] == "Title is required"

    def test_missing_updated_at(self, client: TestClient) -> None:
        """Should answer error for items without a modification time."""
        item = make_item("t1")
        del item["data"]["updated_at"]
        [result] = post_batch(client, item)
        assert result["status"] == "error"

    def test_missing_data(self, client: TestClient) -> None:
        """Should answer error for items without data."""
        item = make_item("t1")
        item["data"] = None
        [result] = post_batch(client, item)
        assert result["status"] == "error"

    def test_items_processed_independently(self, client: TestClient) -> None:
        """Should answer each item, in order."""
        results = post_batch(
            client,
            make_item("t1"),
            make_item("t2", title=""),
            make_item("t3"),
        )
        assert [(r["client_id"], r["status"]) for r in results] == [
            ("t1", "success"),
            ("t2", "error"),
            ("t3", "success"),
        ]

    def test_invalid_operation(self, client: TestClient) -> None:
        """Should reject unknown operations as a malformed request."""
        item = make_item("t1")
        item["operation"] = "merge"
        response = client.post("/batch", json={"items": [item]})
        assert response.status_code == 422
