"""Batch sync API route.

Each submitted item is applied independently and answered with one of:
- success: the change was stored (server_id returned)
- conflict: the stored copy is strictly newer (returned as resolved_data)
- error: the item could not be applied (reason in error)
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from tasksync.core.types import parse_timestamp
from tasksync.server.api.deps import get_db
from tasksync.server.database import ConflictError, Database
from tasksync.server.schemas import (
    BatchItem,
    BatchRequest,
    BatchResponse,
    ProcessedItem,
    task_to_data,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["sync"])


def process_item(db: Database, item: BatchItem) -> ProcessedItem:
    """Apply one queued client operation."""
    if not isinstance(item.data, dict):
        return ProcessedItem(client_id=item.task_id, status="error", error="Missing data")
    try:
        updated_at = parse_timestamp(item.data["updated_at"])
    except (KeyError, ValueError) as e:
        return ProcessedItem(
            client_id=item.task_id, status="error", error=f"Invalid updated_at: {e}"
        )

    if item.operation == "delete":
        task = db.delete_task(item.task_id, updated_at)
        return ProcessedItem(
            client_id=item.task_id,
            status="success",
            server_id=task.server_id if task else None,
        )

    title = item.data.get("title")
    description = item.data.get("description")
    completed = item.data.get("completed", False)
    if not isinstance(title, str) or not title:
        return ProcessedItem(client_id=item.task_id, status="error", error="Title is required")
    if description is not None and not isinstance(description, str):
        return ProcessedItem(
            client_id=item.task_id, status="error", error="Description must be text"
        )
    if not isinstance(completed, bool):
        return ProcessedItem(
            client_id=item.task_id, status="error", error="Completed must be a boolean"
        )

    try:
        task = db.upsert_task(item.task_id, title, description, completed, updated_at)
    except ConflictError as e:
        logger.info("Conflict on task %s", item.task_id)
        return ProcessedItem(
            client_id=item.task_id,
            status="conflict",
            server_id=e.task.server_id,
            resolved_data=task_to_data(e.task),
        )
    return ProcessedItem(client_id=item.task_id, status="success", server_id=task.server_id)


@router.post("/batch", response_model=BatchResponse)
def process_batch(
    request: BatchRequest,
    db: Database = Depends(get_db),
) -> BatchResponse:
    """Apply a batch of queued client operations."""
    processed = [process_item(db, item) for item in request.items]
    logger.info(
        "Processed batch of %d items (%d conflicts, %d errors)",
        len(processed),
        sum(1 for p in processed if p.status == "conflict"),
        sum(1 for p in processed if p.status == "error"),
    )
    return BatchResponse(processed_items=processed)
