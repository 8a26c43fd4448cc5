"""Local task store.

This module provides:
- LocalTaskStore: CRUD over the local replica

Every mutation (create, update, soft delete) is written together with
exactly one sync queue entry in a single transaction, so the queue never
holds an operation for a state the store does not have, and vice versa.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any

from tasksync.client.models import Task
from tasksync.client.sync.queue import SyncQueue
from tasksync.core.errors import TaskNotFoundError, ValidationError
from tasksync.core.types import (
    Operation,
    SyncStatus,
    format_timestamp,
    parse_timestamp,
    utc_now,
)

if TYPE_CHECKING:
    from tasksync.client.database import LocalDatabase

logger = logging.getLogger(__name__)


def _snapshot(task: Task, operation: Operation) -> dict[str, Any]:
    """Build the queue payload for an operation on a task."""
    if operation is Operation.DELETE:
        return {"id": task.id, "updated_at": format_timestamp(task.updated_at)}
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "completed": task.completed,
        "updated_at": format_timestamp(task.updated_at),
    }


def _validate_title(title: object) -> str:
    if not isinstance(title, str) or not title:
        raise ValidationError("Title is required")
    return title


def _validate_description(description: object) -> str | None:
    if description is not None and not isinstance(description, str):
        raise ValidationError("Description must be text")
    return description


def _validate_completed(completed: object) -> bool:
    if not isinstance(completed, bool):
        raise ValidationError("Completed must be a boolean")
    return completed


class LocalTaskStore:
    """Durable record of tasks and their sync state."""

    def __init__(self, db: LocalDatabase, queue: SyncQueue | None = None) -> None:
        """Initialize the store.

        Args:
            db: Local database.
            queue: Sync queue sharing the same database (created if omitted).
        """
        self._db = db
        self._queue = queue if queue is not None else SyncQueue(db)

    @property
    def queue(self) -> SyncQueue:
        """The sync queue mutations are recorded in."""
        return self._queue

    @property
    def database(self) -> LocalDatabase:
        """The database backing this store."""
        return self._db

    # === Reads ===

    def get(self, task_id: str) -> Task | None:
        """Get an active task.

        Returns:
            Task if found and not soft-deleted, None otherwise.
        """
        task = self.get_including_deleted(task_id)
        if task is None or task.is_deleted:
            return None
        return task

    def get_including_deleted(self, task_id: str) -> Task | None:
        """Get a task regardless of its soft-delete flag."""
        row = self._db.fetch_one("SELECT * FROM tasks WHERE id = ?", (task_id,))
        return Task.from_row(row) if row else None

    def list_active(self) -> list[Task]:
        """List tasks that are not soft-deleted, oldest first."""
        rows = self._db.fetch_all(
            "SELECT * FROM tasks WHERE is_deleted = 0 ORDER BY created_at, rowid"
        )
        return [Task.from_row(row) for row in rows]

    def list_needing_sync(self) -> list[Task]:
        """List active tasks whose status is pending or error."""
        rows = self._db.fetch_all(
            """
            SELECT * FROM tasks
            WHERE sync_status IN ('pending', 'error') AND is_deleted = 0
            ORDER BY created_at, rowid
            """
        )
        return [Task.from_row(row) for row in rows]

    def count_needing_sync(self) -> int:
        """Count tasks with pending or error status, deleted ones included."""
        row = self._db.fetch_one(
            "SELECT COUNT(*) AS cnt FROM tasks WHERE sync_status IN ('pending', 'error')"
        )
        return int(row["cnt"]) if row else 0

    def last_synced_at(self) -> datetime | None:
        """Most recent successful reconciliation across all tasks."""
        row = self._db.fetch_one("SELECT MAX(last_synced_at) AS last FROM tasks")
        if row is None or row["last"] is None:
            return None
        return parse_timestamp(row["last"])

    # === Local mutations ===

    def create(
        self,
        title: str,
        description: str | None = None,
        completed: bool = False,
    ) -> Task:
        """Create a task and queue its create operation.

        Raises:
            ValidationError: If title is missing or not text, or another
                field has the wrong type.
        """
        now = utc_now()
        task = Task(
            id=str(uuid.uuid4()),
            title=_validate_title(title),
            description=_validate_description(description),
            completed=_validate_completed(completed),
            created_at=now,
            updated_at=now,
        )

        with self._db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO tasks (
                    id, title, description, completed, created_at, updated_at,
                    is_deleted, sync_status
                ) VALUES (?, ?, ?, ?, ?, ?, 0, 'pending')
                """,
                (
                    task.id,
                    task.title,
                    task.description,
                    int(task.completed),
                    format_timestamp(now),
                    format_timestamp(now),
                ),
            )
            self._queue.enqueue(task.id, Operation.CREATE, _snapshot(task, Operation.CREATE))

        logger.info("Created task %s", task.id)
        return task

    def update(
        self,
        task_id: str,
        *,
        title: str | None = None,
        description: str | None = None,
        completed: bool | None = None,
    ) -> Task:
        """Update an active task and queue its update operation.

        Only provided fields are changed.

        Raises:
            TaskNotFoundError: If the task is absent or soft-deleted.
            ValidationError: If a provided field is invalid.
        """
        if title is not None:
            _validate_title(title)
        _validate_description(description)
        if completed is not None:
            _validate_completed(completed)

        with self._db.transaction() as conn:
            existing = self.get(task_id)
            if existing is None:
                raise TaskNotFoundError(task_id)

            if title is not None:
                existing.title = title
            if description is not None:
                existing.description = description
            if completed is not None:
                existing.completed = completed
            existing.updated_at = utc_now()
            existing.sync_status = SyncStatus.PENDING

            conn.execute(
                """
                UPDATE tasks
                SET title = ?, description = ?, completed = ?, updated_at = ?,
                    sync_status = 'pending'
                WHERE id = ?
                """,
                (
                    existing.title,
                    existing.description,
                    int(existing.completed),
                    format_timestamp(existing.updated_at),
                    task_id,
                ),
            )
            self._queue.enqueue(
                task_id, Operation.UPDATE, _snapshot(existing, Operation.UPDATE)
            )

        logger.info("Updated task %s", task_id)
        return existing

    def soft_delete(self, task_id: str) -> bool:
        """Mark a task deleted and queue its delete operation.

        Returns:
            True if the task was deleted, False if absent or already deleted.
        """
        with self._db.transaction() as conn:
            existing = self.get(task_id)
            if existing is None:
                return False

            existing.is_deleted = True
            existing.updated_at = utc_now()
            conn.execute(
                """
                UPDATE tasks
                SET is_deleted = 1, updated_at = ?, sync_status = 'pending'
                WHERE id = ?
                """,
                (format_timestamp(existing.updated_at), task_id),
            )
            self._queue.enqueue(
                task_id, Operation.DELETE, _snapshot(existing, Operation.DELETE)
            )

        logger.info("Deleted task %s", task_id)
        return True

    # === Sync bookkeeping (no queue entry) ===

    def mark_synced(
        self,
        task_id: str,
        server_id: str | None = None,
        synced_at: datetime | None = None,
    ) -> None:
        """Record that the remote accepted the task's current state.

        A server_id already attached to the task is never replaced.
        """
        self._db.execute(
            """
            UPDATE tasks
            SET sync_status = 'synced', server_id = COALESCE(server_id, ?),
                last_synced_at = ?
            WHERE id = ?
            """,
            (server_id, format_timestamp(synced_at or utc_now()), task_id),
        )

    def apply_resolution(
        self,
        task_id: str,
        winner: Task,
        server_id: str | None = None,
        synced_at: datetime | None = None,
    ) -> None:
        """Persist the winning version of a conflict and mark it synced."""
        self._db.execute(
            """
            UPDATE tasks
            SET title = ?, description = ?, completed = ?, updated_at = ?,
                sync_status = 'synced', server_id = COALESCE(server_id, ?),
                last_synced_at = ?
            WHERE id = ?
            """,
            (
                winner.title,
                winner.description,
                int(winner.completed),
                format_timestamp(winner.updated_at),
                server_id,
                format_timestamp(synced_at or utc_now()),
                task_id,
            ),
        )

    def mark_error(self, task_id: str) -> None:
        """Flag a task whose sync keeps failing."""
        self._db.execute(
            "UPDATE tasks SET sync_status = 'error' WHERE id = ?", (task_id,)
        )
