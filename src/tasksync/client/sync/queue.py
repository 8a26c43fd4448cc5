"""Durable sync queue (outbox) for local task mutations.

This module provides:
- SyncQueue: SQLite-backed FIFO log of pending create/update/delete operations

Entries are appended by the task store inside the same transaction as the
mutation that produced them, and are only ever removed once the task has
reached a terminal synced/resolved state. Failed transmissions keep their
entry in place and bump its retry counter.

Ordering:
    drain() returns entries oldest first (created_at, then insertion order),
    so several operations on the same task are replayed in the order they
    were made.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import TYPE_CHECKING, Any

from tasksync.client.sync.types import QueueEntry
from tasksync.core.types import Operation, format_timestamp, utc_now

if TYPE_CHECKING:
    from tasksync.client.database import LocalDatabase

logger = logging.getLogger(__name__)


class SyncQueue:
    """Append-only queue of operations awaiting transmission."""

    def __init__(self, db: LocalDatabase) -> None:
        """Initialize the queue.

        Args:
            db: Local database holding the sync_queue table.
        """
        self._db = db

    def enqueue(
        self,
        task_id: str,
        operation: Operation,
        data: dict[str, Any],
    ) -> QueueEntry:
        """Append a new entry.

        When called inside LocalDatabase.transaction() the insert joins
        that transaction.

        Args:
            task_id: Task the operation applies to.
            operation: Kind of mutation.
            data: Snapshot transmitted to the remote as-is.

        Returns:
            The stored entry.
        """
        entry = QueueEntry(
            id=str(uuid.uuid4()),
            task_id=task_id,
            operation=Operation(operation),
            data=dict(data),
            created_at=utc_now(),
        )
        self._db.execute(
            """
            INSERT INTO sync_queue (id, task_id, operation, data, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                entry.id,
                entry.task_id,
                entry.operation.value,
                json.dumps(entry.data),
                format_timestamp(entry.created_at),
            ),
        )
        logger.debug("Queued %s for task %s", entry.operation.value, task_id)
        return entry

    def drain(self) -> list[QueueEntry]:
        """Read every entry, oldest first.

        Entries are not removed; the sync engine removes them once their
        task's outcome has been applied.
        """
        rows = self._db.fetch_all(
            "SELECT * FROM sync_queue ORDER BY created_at ASC, rowid ASC"
        )
        return [QueueEntry.from_row(row) for row in rows]

    def get(self, entry_id: str) -> QueueEntry | None:
        """Get an entry by id."""
        row = self._db.fetch_one("SELECT * FROM sync_queue WHERE id = ?", (entry_id,))
        return QueueEntry.from_row(row) if row else None

    def entries_for(self, task_id: str) -> list[QueueEntry]:
        """List the entries of one task, oldest first."""
        rows = self._db.fetch_all(
            """
            SELECT * FROM sync_queue WHERE task_id = ?
            ORDER BY created_at ASC, rowid ASC
            """,
            (task_id,),
        )
        return [QueueEntry.from_row(row) for row in rows]

    def record_failure(self, entry_id: str, message: str) -> int | None:
        """Increment an entry's retry counter and store the failure message.

        Args:
            entry_id: Entry that failed.
            message: Failure description.

        Returns:
            The new retry count, or None if the entry no longer exists.
        """
        with self._db.transaction() as conn:
            conn.execute(
                """
                UPDATE sync_queue
                SET retry_count = retry_count + 1, error_message = ?
                WHERE id = ?
                """,
                (message, entry_id),
            )
            row = conn.execute(
                "SELECT retry_count FROM sync_queue WHERE id = ?", (entry_id,)
            ).fetchone()
        if row is None:
            logger.debug("Failure recorded for vanished entry %s", entry_id)
            return None
        retry_count: int = row["retry_count"]
        return retry_count

    def remove(self, task_id: str) -> int:
        """Delete every entry for a task.

        Returns:
            Number of entries removed.
        """
        cursor = self._db.execute("DELETE FROM sync_queue WHERE task_id = ?", (task_id,))
        if cursor.rowcount:
            logger.debug("Removed %d queue entries for task %s", cursor.rowcount, task_id)
        return cursor.rowcount

    def __len__(self) -> int:
        """Get number of queued entries."""
        row = self._db.fetch_one("SELECT COUNT(*) AS cnt FROM sync_queue")
        return int(row["cnt"]) if row else 0
