"""Tests for the tasksync HTTP client."""

from __future__ import annotations

import json
from datetime import UTC, datetime

import httpx
import pytest

from tasksync.client.api import HTTPClient
from tasksync.client.sync.probe import ConnectivityProbe
from tasksync.client.sync.types import QueueEntry
from tasksync.core.config import SyncConfig
from tasksync.core.errors import BatchTransportError
from tasksync.core.types import ItemStatus, Operation


def make_config(server_url: str = "http://test") -> SyncConfig:
    """Create a SyncConfig for testing."""
    return SyncConfig(server_url=server_url)


def make_entry(task_id: str = "task-1") -> QueueEntry:
    """Create a queue entry for testing."""
    return QueueEntry(
        id="entry-1",
        task_id=task_id,
        operation=Operation.CREATE,
        data={"id": task_id, "title": "Buy milk", "updated_at": "2025-01-01T10:00:00Z"},
        created_at=datetime(2025, 1, 1, 10, 0, 0, tzinfo=UTC),
    )


class TestHealthCheck:
    """Tests for HTTPClient.health_check."""

    def test_health_check_success(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should return True when server is healthy."""
        httpx_mock.add_response(url="http://test/health", json={"status": "ok"})

        with HTTPClient(make_config()) as client:
            assert client.health_check() is True

    def test_health_check_failure(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should return False when server answers with an error status."""
        httpx_mock.add_response(url="http://test/health", status_code=500)

        with HTTPClient(make_config()) as client:
            assert client.health_check() is False

    def test_health_check_timeout(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should return False on timeouts."""
        httpx_mock.add_exception(httpx.ReadTimeout("timed out"))

        with HTTPClient(make_config()) as client:
            assert client.health_check() is False

    def test_health_check_uses_probe_timeout(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should bound the request with the probe timeout."""
        httpx_mock.add_response(url="http://test/health", json={"status": "ok"})

        with HTTPClient(make_config()) as client:
            client.health_check()

        request = httpx_mock.get_request()
        assert request.extensions["timeout"]["connect"] == 5.0

    def test_probe_unreachable(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should report unreachable on connection errors."""
        httpx_mock.add_exception(httpx.ConnectError("connection refused"))

        with HTTPClient(make_config()) as client:
            assert ConnectivityProbe(client).is_reachable() is False


class TestSendBatch:
    """Tests for HTTPClient.send_batch."""

    def test_send_batch(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should post entries and parse per-item results."""
        httpx_mock.add_response(
            url="http://test/batch",
            method="POST",
            json={
                "processed_items": [
                    {"client_id": "task-1", "status": "success", "server_id": "srv-1"}
                ]
            },
        )

        with HTTPClient(make_config()) as client:
            results = client.send_batch([make_entry()])

        assert len(results) == 1
        assert results[0].client_id == "task-1"
        assert results[0].status == ItemStatus.SUCCESS
        assert results[0].server_id == "srv-1"

        body = json.loads(httpx_mock.get_request().content)
        assert body["client_timestamp"]
        item = body["items"][0]
        assert item["id"] == "entry-1"
        assert item["task_id"] == "task-1"
        assert item["operation"] == "create"
        assert item["retry_count"] == 0
        assert item["data"]["title"] == "Buy milk"

    def test_send_batch_conflict(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should carry resolved_data through."""
        httpx_mock.add_response(
            url="http://test/batch",
            method="POST",
            json={
                "processed_items": [
                    {
                        "client_id": "task-1",
                        "status": "conflict",
                        "resolved_data": {"title": "Remote", "updated_at": "2025-01-02T00:00:00Z"},
                    }
                ]
            },
        )

        with HTTPClient(make_config()) as client:
            results = client.send_batch([make_entry()])

        assert results[0].status == ItemStatus.CONFLICT
        assert results[0].resolved_data == {
            "title": "Remote",
            "updated_at": "2025-01-02T00:00:00Z",
        }

    def test_send_batch_http_error(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should raise BatchTransportError on non-success status."""
        httpx_mock.add_response(url="http://test/batch", method="POST", status_code=503)

        with HTTPClient(make_config()) as client, pytest.raises(BatchTransportError) as exc_info:
            client.send_batch([make_entry()])

        assert exc_info.value.status_code == 503

    def test_send_batch_connection_error(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should raise BatchTransportError when the request cannot be sent."""
        httpx_mock.add_exception(httpx.ConnectError("connection refused"))

        with HTTPClient(make_config()) as client, pytest.raises(BatchTransportError):
            client.send_batch([make_entry()])

    def test_send_batch_malformed_body(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should raise BatchTransportError when processed_items is missing."""
        httpx_mock.add_response(url="http://test/batch", method="POST", json={"ok": True})

        with HTTPClient(make_config()) as client, pytest.raises(
            BatchTransportError, match="Malformed"
        ):
            client.send_batch([make_entry()])

    def test_send_batch_unknown_status(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should treat unknown item statuses as a malformed response."""
        httpx_mock.add_response(
            url="http://test/batch",
            method="POST",
            json={"processed_items": [{"client_id": "task-1", "status": "maybe"}]},
        )

        with HTTPClient(make_config()) as client, pytest.raises(BatchTransportError):
            client.send_batch([make_entry()])

    @pytest.mark.parametrize(
        "item",
        [
            {"client_id": ["task-1"], "status": "success"},
            {"client_id": "task-1", "status": "error", "error": {"code": 500}},
            {"client_id": "task-1", "status": "success", "server_id": 7},
            {"client_id": "task-1", "status": "conflict", "resolved_data": "newer"},
        ],
    )
    def test_send_batch_wrong_field_types(  # type: ignore[no-untyped-def]
        self, httpx_mock, item: dict[str, object]
    ) -> None:
        """Should treat badly typed item fields as a malformed response."""
        httpx_mock.add_response(
            url="http://test/batch", method="POST", json={"processed_items": [item]}
        )

        with HTTPClient(make_config()) as client, pytest.raises(
            BatchTransportError, match="Malformed"
        ):
            client.send_batch([make_entry()])
