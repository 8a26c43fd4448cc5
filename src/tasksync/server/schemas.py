"""Pydantic schemas for API request/response models."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel

from tasksync.core.types import format_timestamp
from tasksync.server.database import as_utc
from tasksync.server.models import RemoteTask

# === Batch schemas ===


class BatchItem(BaseModel):
    """One queued client operation."""

    id: str
    task_id: str
    operation: Literal["create", "update", "delete"]
    data: Any = None
    created_at: str | None = None
    retry_count: int = 0


class BatchRequest(BaseModel):
    """Request body for batch sync."""

    items: list[BatchItem]
    client_timestamp: str | None = None


class ProcessedItem(BaseModel):
    """Per-item result of a batch sync."""

    client_id: str
    status: Literal["success", "conflict", "error"]
    server_id: str | None = None
    resolved_data: dict[str, Any] | None = None
    error: str | None = None


class BatchResponse(BaseModel):
    """Response for batch sync."""

    processed_items: list[ProcessedItem]


# === Health schema ===


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: str


# === Converters ===


def task_to_data(task: RemoteTask) -> dict[str, Any]:
    """Convert RemoteTask to the resolved_data payload."""
    return {
        "id": task.id,
        "server_id": task.server_id,
        "title": task.title,
        "description": task.description,
        "completed": task.completed,
        "created_at": format_timestamp(as_utc(task.created_at)),
        "updated_at": format_timestamp(as_utc(task.updated_at)),
        "is_deleted": task.is_deleted,
    }
