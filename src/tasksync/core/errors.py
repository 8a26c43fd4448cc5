"""Exception hierarchy for tasksync."""

from __future__ import annotations


class TaskSyncError(Exception):
    """Base exception for tasksync errors."""


class ValidationError(TaskSyncError):
    """Invalid input to a task create or update."""


class TaskNotFoundError(TaskSyncError):
    """Operation on a task that does not exist or is soft-deleted."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class SyncError(TaskSyncError):
    """Base exception for sync errors."""


class ServerUnreachableError(SyncError):
    """The remote health check failed; the sync run was not attempted."""


class BatchTransportError(SyncError):
    """A whole batch could not be delivered to the remote.

    Attributes:
        status_code: HTTP status of the response, if one was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConflictResolutionMissingError(SyncError):
    """The remote reported a conflict without supplying its version."""


class SyncInProgressError(SyncError):
    """Another sync run is already in progress."""
