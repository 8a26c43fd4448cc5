"""Sync engine reconciling the local queue with the remote authority.

This module provides:
- SyncEngine: Drains the sync queue in batches and applies per-item outcomes

A sync run goes through:
    probe -> drain -> batch -> transmit -> apply outcomes -> summary

Outcomes per item:
- success: task marked synced, all its queue entries removed
- conflict: last-write-wins between local and remote versions, winner
  persisted, task marked synced, all its queue entries removed
- error: entry's retry counter incremented; after MAX_RETRIES failures the
  task is flagged error but its entries stay queued for a later run
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict, deque
from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING

from tasksync.client.models import Task
from tasksync.client.sync.conflict import resolve
from tasksync.client.sync.probe import ConnectivityProbe
from tasksync.client.sync.types import (
    BatchItemResult,
    QueueEntry,
    SyncErrorRecord,
    SyncOutcome,
    SyncResult,
)
from tasksync.core.config import DEFAULT_BATCH_SIZE, MAX_RETRIES
from tasksync.core.errors import (
    BatchTransportError,
    ConflictResolutionMissingError,
    SyncError,
    SyncInProgressError,
)
from tasksync.core.types import ItemStatus, format_timestamp, utc_now

if TYPE_CHECKING:
    from tasksync.client.api import HTTPClient
    from tasksync.client.store import LocalTaskStore

logger = logging.getLogger(__name__)

NO_RESULT_MESSAGE = "No result returned for item"


def partition(entries: Sequence[QueueEntry], size: int) -> Iterator[Sequence[QueueEntry]]:
    """Split entries into consecutive batches of at most size items."""
    for start in range(0, len(entries), size):
        yield entries[start : start + size]


class SyncEngine:
    """Coordinates queue reconciliation between the local store and the remote."""

    def __init__(
        self,
        store: LocalTaskStore,
        client: HTTPClient,
        batch_size: int = DEFAULT_BATCH_SIZE,
        probe: ConnectivityProbe | None = None,
    ) -> None:
        """Initialize the sync engine.

        Args:
            store: Local task store (its queue is drained).
            client: HTTP client for the remote /batch endpoint.
            batch_size: Maximum number of entries per transmission.
            probe: Connectivity probe (built on client when omitted).
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self._store = store
        self._queue = store.queue
        self._db = store.database
        self._client = client
        self._batch_size = batch_size
        self._probe = probe or ConnectivityProbe(client, client.config.probe_timeout)
        self._running = threading.Lock()

    @property
    def probe(self) -> ConnectivityProbe:
        """Connectivity probe gating sync runs."""
        return self._probe

    def sync(self) -> SyncResult:
        """Perform a full sync run.

        Returns:
            SyncResult with counts and the failures encountered. When the
            remote is unreachable the outcome is SERVER_UNREACHABLE and
            nothing was written.

        Raises:
            SyncInProgressError: If another run is in progress.
        """
        if not self._running.acquire(blocking=False):
            raise SyncInProgressError("A sync run is already in progress")
        try:
            return self._run()
        finally:
            self._running.release()

    def _run(self) -> SyncResult:
        if not self._probe.is_reachable():
            return SyncResult(outcome=SyncOutcome.SERVER_UNREACHABLE)

        result = SyncResult()
        entries = self._queue.drain()
        if entries:
            logger.info(
                "Syncing %d queued operations (batch size %d)",
                len(entries),
                self._batch_size,
            )

        for batch in partition(entries, self._batch_size):
            self._process_batch(batch, result)

        self._db.set_state("last_sync_at", format_timestamp(utc_now()))
        logger.info(
            "Sync finished: %d synced, %d failed",
            result.synced_items,
            result.failed_items,
        )
        return result

    def _process_batch(self, batch: Sequence[QueueEntry], result: SyncResult) -> None:
        """Transmit one batch and apply every per-item outcome."""
        result.batches_sent += 1
        try:
            items = self._client.send_batch(batch)
        except BatchTransportError as e:
            logger.warning("Batch of %d items failed: %s", len(batch), e)
            for entry in batch:
                self._record_failure(entry, str(e), result)
            return

        # Results reference tasks, not entries: hand out a task's entries
        # in queue order.
        unmatched: dict[str, deque[QueueEntry]] = defaultdict(deque)
        for entry in batch:
            unmatched[entry.task_id].append(entry)

        for item in items:
            candidates = unmatched.get(item.client_id)
            if not candidates:
                logger.warning("Ignoring result for unknown item %s", item.client_id)
                continue
            self._apply(candidates.popleft(), item, result)

        for leftovers in unmatched.values():
            for entry in leftovers:
                self._record_failure(entry, NO_RESULT_MESSAGE, result)

    def _apply(self, entry: QueueEntry, item: BatchItemResult, result: SyncResult) -> None:
        """Apply one per-item outcome."""
        if item.status is ItemStatus.SUCCESS:
            self._apply_success(entry, item)
            result.synced_items += 1
            return

        if item.status is ItemStatus.CONFLICT:
            try:
                self._apply_conflict(entry, item)
            except SyncError as e:
                self._record_failure(entry, str(e), result)
                return
            result.synced_items += 1
            return

        self._record_failure(entry, item.error or "Unknown error", result)

    def _apply_success(self, entry: QueueEntry, item: BatchItemResult) -> None:
        with self._db.transaction():
            self._store.mark_synced(entry.task_id, server_id=item.server_id)
            self._queue.remove(entry.task_id)
        logger.debug("Task %s synced (%s)", entry.task_id, entry.operation.value)

    def _apply_conflict(self, entry: QueueEntry, item: BatchItemResult) -> None:
        """Resolve a conflict with last-write-wins and persist the winner.

        Raises:
            ConflictResolutionMissingError: If the remote supplied no usable
                version to compare against.
        """
        if not item.resolved_data:
            raise ConflictResolutionMissingError("Conflict without resolution data")

        try:
            remote = Task.from_dict({"id": entry.task_id, **item.resolved_data})
        except (KeyError, TypeError, ValueError) as e:
            raise ConflictResolutionMissingError(f"Invalid resolution data: {e}") from e

        with self._db.transaction():
            local = self._store.get_including_deleted(entry.task_id)
            if local is None:
                raise SyncError(f"Local task {entry.task_id} no longer exists")
            winner = resolve(local, remote)
            self._store.apply_resolution(
                entry.task_id,
                winner,
                server_id=item.server_id or remote.server_id,
            )
            self._queue.remove(entry.task_id)

        logger.info(
            "Conflict on task %s resolved in favour of %s version",
            entry.task_id,
            "local" if winner is local else "remote",
        )

    def _record_failure(self, entry: QueueEntry, message: str, result: SyncResult) -> None:
        """Count a failed attempt and flag the task after MAX_RETRIES."""
        with self._db.transaction():
            retry_count = self._queue.record_failure(entry.id, message)
            if retry_count is not None and retry_count >= MAX_RETRIES:
                self._store.mark_error(entry.task_id)
                logger.warning(
                    "Task %s marked error after %d failed attempts: %s",
                    entry.task_id,
                    retry_count,
                    message,
                )

        result.failed_items += 1
        result.errors.append(
            SyncErrorRecord(
                task_id=entry.task_id,
                operation=entry.operation,
                error=message,
                timestamp=utc_now(),
            )
        )
