"""Shared types for tasksync.

This module defines enums and timestamp helpers used by both client and server.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum


class SyncStatus(str, Enum):
    """Sync state of a single task relative to the remote."""

    PENDING = "pending"
    SYNCED = "synced"
    ERROR = "error"


class Operation(str, Enum):
    """Kind of mutation recorded in the sync queue."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class ItemStatus(str, Enum):
    """Per-item outcome reported by the remote /batch endpoint."""

    SUCCESS = "success"
    CONFLICT = "conflict"
    ERROR = "error"


def utc_now() -> datetime:
    """Get the current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def format_timestamp(value: datetime) -> str:
    """Serialize a datetime to a sortable ISO-8601 string.

    Microseconds are always written so that lexical order of stored
    values equals chronological order.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="microseconds")


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse an ISO-8601 timestamp, assuming UTC when no offset is given."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise ValueError(f"Invalid timestamp: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
