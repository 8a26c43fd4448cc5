"""Core module - Shared configuration, types and errors."""

from tasksync.core.config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_PROBE_TIMEOUT,
    MAX_RETRIES,
    SyncConfig,
)
from tasksync.core.errors import (
    BatchTransportError,
    ConflictResolutionMissingError,
    ServerUnreachableError,
    SyncError,
    SyncInProgressError,
    TaskNotFoundError,
    TaskSyncError,
    ValidationError,
)
from tasksync.core.types import (
    ItemStatus,
    Operation,
    SyncStatus,
    format_timestamp,
    parse_timestamp,
    utc_now,
)

__all__ = [
    # Config
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_PROBE_TIMEOUT",
    "MAX_RETRIES",
    "SyncConfig",
    # Errors
    "BatchTransportError",
    "ConflictResolutionMissingError",
    "ServerUnreachableError",
    "SyncError",
    "SyncInProgressError",
    "TaskNotFoundError",
    "TaskSyncError",
    "ValidationError",
    # Types
    "ItemStatus",
    "Operation",
    "SyncStatus",
    "format_timestamp",
    "parse_timestamp",
    "utc_now",
]
