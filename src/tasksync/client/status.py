"""Sync status reporting.

This module provides:
- SyncStatusReport: Snapshot of the replica's sync state
- get_sync_status: Compute a report from the store, queue and a fresh probe
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from tasksync.core.types import format_timestamp

if TYPE_CHECKING:
    from tasksync.client.store import LocalTaskStore
    from tasksync.client.sync.probe import ConnectivityProbe

logger = logging.getLogger(__name__)


@dataclass
class SyncStatusReport:
    """Sync status of the local replica.

    Attributes:
        pending_sync_count: Tasks in pending or error state.
        last_sync_timestamp: Most recent successful reconciliation.
        is_online: Result of a fresh connectivity probe.
        sync_queue_size: Number of queued operations.
    """

    pending_sync_count: int
    last_sync_timestamp: datetime | None
    is_online: bool
    sync_queue_size: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "pending_sync_count": self.pending_sync_count,
            "last_sync_timestamp": (
                format_timestamp(self.last_sync_timestamp)
                if self.last_sync_timestamp
                else None
            ),
            "is_online": self.is_online,
            "sync_queue_size": self.sync_queue_size,
        }


def get_sync_status(store: LocalTaskStore, probe: ConnectivityProbe) -> SyncStatusReport:
    """Compute the current sync status.

    Args:
        store: Local task store (and its queue).
        probe: Probe used for the is_online flag.

    Returns:
        SyncStatusReport built from current state.
    """
    report = SyncStatusReport(
        pending_sync_count=store.count_needing_sync(),
        last_sync_timestamp=store.last_synced_at(),
        is_online=probe.is_reachable(),
        sync_queue_size=len(store.queue),
    )
    logger.debug("Sync status: %s", report)
    return report
