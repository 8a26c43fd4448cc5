"""Tests for the Task model."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from tasksync.client.models import Task


def remote_data(**overrides: object) -> dict[str, object]:
    """Build a remote task representation."""
    data: dict[str, object] = {
        "id": "task-1",
        "title": "Remote",
        "description": None,
        "completed": True,
        "updated_at": "2025-01-01T10:00:00.000000+00:00",
    }
    data.update(overrides)
    return data


class TestTaskFromDict:
    """Tests for Task.from_dict."""

    def test_from_dict(self) -> None:
        """Should parse a remote task."""
        task = Task.from_dict(remote_data(server_id="srv-1"))

        assert task.title == "Remote"
        assert task.completed is True
        assert task.updated_at == datetime(2025, 1, 1, 10, 0, 0, tzinfo=UTC)
        assert task.created_at == task.updated_at
        assert task.server_id == "srv-1"

    @pytest.mark.parametrize("completed", ["false", 0, None])
    def test_rejects_non_bool_completed(self, completed: object) -> None:
        """Should not coerce non-boolean flags."""
        with pytest.raises(ValueError, match="completed"):
            Task.from_dict(remote_data(completed=completed))

    def test_rejects_non_text_description(self) -> None:
        """Should reject a description that is not text."""
        with pytest.raises(ValueError, match="description"):
            Task.from_dict(remote_data(description=["a"]))

    def test_missing_updated_at(self) -> None:
        """Should require updated_at."""
        data = remote_data()
        del data["updated_at"]
        with pytest.raises(KeyError):
            Task.from_dict(data)

    def test_round_trip_to_dict(self) -> None:
        """Should keep remote fields through to_dict."""
        data = Task.from_dict(remote_data()).to_dict()
        assert data["completed"] is True
        assert data["sync_status"] == "pending"
