"""Shared types and dataclasses for sync operations.

This module provides:
- QueueEntry: A pending mutation stored in the sync queue
- BatchItemResult: Per-item outcome returned by the remote /batch endpoint
- SyncErrorRecord: One failure observed during a sync run
- SyncOutcome, SyncResult: Overall sync run result
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from tasksync.core.errors import ServerUnreachableError
from tasksync.core.types import ItemStatus, Operation, format_timestamp, parse_timestamp


@dataclass
class QueueEntry:
    """A mutation waiting to be transmitted to the remote.

    Attributes:
        id: Unique identifier of the entry (distinct from the task id).
        task_id: Task the operation applies to.
        operation: create, update or delete.
        data: Snapshot of the task fields captured at enqueue time.
        created_at: Enqueue timestamp, defines processing order.
        retry_count: Number of failed transmission attempts.
        error_message: Last observed failure, if any.
    """

    id: str
    task_id: str
    operation: Operation
    data: dict[str, Any]
    created_at: datetime
    retry_count: int = 0
    error_message: str | None = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> QueueEntry:
        """Create QueueEntry from database row."""
        return cls(
            id=row["id"],
            task_id=row["task_id"],
            operation=Operation(row["operation"]),
            data=json.loads(row["data"]),
            created_at=parse_timestamp(row["created_at"]),
            retry_count=row["retry_count"],
            error_message=row["error_message"],
        )

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the /batch request body."""
        return {
            "id": self.id,
            "task_id": self.task_id,
            "operation": self.operation.value,
            "data": self.data,
            "created_at": format_timestamp(self.created_at),
            "retry_count": self.retry_count,
        }


@dataclass
class BatchItemResult:
    """Outcome of one submitted item, as reported by the remote."""

    client_id: str
    status: ItemStatus
    server_id: str | None = None
    resolved_data: dict[str, Any] | None = None
    error: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BatchItemResult:
        """Create from API response dictionary.

        Raises:
            KeyError: If client_id or status is missing.
            ValueError: If status is not a known item status or a field
                has the wrong type.
        """
        client_id = data["client_id"]
        if not isinstance(client_id, str):
            raise ValueError(f"client_id must be a string, got {client_id!r}")
        for key in ("server_id", "error"):
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"{key} must be a string, got {value!r}")
        resolved_data = data.get("resolved_data")
        if resolved_data is not None and not isinstance(resolved_data, dict):
            raise ValueError(f"resolved_data must be an object, got {resolved_data!r}")
        return cls(
            client_id=client_id,
            status=ItemStatus(data["status"]),
            server_id=data.get("server_id"),
            resolved_data=resolved_data,
            error=data.get("error"),
        )


@dataclass
class SyncErrorRecord:
    """A failure recorded during a sync run."""

    task_id: str
    operation: Operation
    error: str
    timestamp: datetime

    def to_dict(self) -> dict[str, str]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "task_id": self.task_id,
            "operation": self.operation.value,
            "error": self.error,
            "timestamp": format_timestamp(self.timestamp),
        }


class SyncOutcome(str, Enum):
    """How a sync run ended."""

    COMPLETED = "completed"
    SERVER_UNREACHABLE = "server_unreachable"


@dataclass
class SyncResult:
    """Result of a sync run."""

    outcome: SyncOutcome = SyncOutcome.COMPLETED
    synced_items: int = 0
    failed_items: int = 0
    errors: list[SyncErrorRecord] = field(default_factory=list)
    batches_sent: int = 0

    @property
    def success(self) -> bool:
        """True when the run completed and no item failed."""
        return self.outcome is SyncOutcome.COMPLETED and self.failed_items == 0

    def raise_for_outcome(self) -> None:
        """Raise ServerUnreachableError if the run was aborted by the probe."""
        if self.outcome is SyncOutcome.SERVER_UNREACHABLE:
            raise ServerUnreachableError("Server unreachable")

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "success": self.success,
            "outcome": self.outcome.value,
            "synced_items": self.synced_items,
            "failed_items": self.failed_items,
            "errors": [e.to_dict() for e in self.errors],
        }
