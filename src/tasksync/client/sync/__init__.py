"""Sync operations between the local replica and the remote authority.

Architecture:
    LocalTaskStore -> SyncQueue -> SyncEngine -> HTTPClient (/batch)

Components:
- **SyncQueue**: Durable FIFO outbox filled by the task store
- **SyncEngine**: Drains the queue in batches and applies per-item outcomes
- **resolve**: Last-write-wins conflict resolver (local preferred on tie)
- **ConnectivityProbe**: Bounded /health check gating sync runs
"""

from tasksync.client.sync.conflict import resolve
from tasksync.client.sync.engine import SyncEngine, partition
from tasksync.client.sync.probe import ConnectivityProbe
from tasksync.client.sync.queue import SyncQueue
from tasksync.client.sync.types import (
    BatchItemResult,
    QueueEntry,
    SyncErrorRecord,
    SyncOutcome,
    SyncResult,
)

__all__ = [
    # Types and dataclasses
    "BatchItemResult",
    "QueueEntry",
    "SyncErrorRecord",
    "SyncOutcome",
    "SyncResult",
    # Classes
    "ConnectivityProbe",
    "SyncEngine",
    "SyncQueue",
    # Functions
    "partition",
    "resolve",
]
