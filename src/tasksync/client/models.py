"""Task model for the local replica."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from tasksync.core.types import SyncStatus, format_timestamp, parse_timestamp


@dataclass
class Task:
    """A task in the local replica.

    Attributes:
        id: Client-assigned identifier, immutable.
        title: Non-empty title.
        description: Optional free text.
        completed: Completion flag.
        created_at: Creation time.
        updated_at: Last local modification, authoritative for conflicts.
        is_deleted: Soft-delete flag.
        sync_status: pending, synced or error.
        server_id: Identifier assigned by the remote once accepted.
        last_synced_at: Time of the last successful reconciliation.
    """

    id: str
    title: str
    description: str | None
    completed: bool
    created_at: datetime
    updated_at: datetime
    is_deleted: bool = False
    sync_status: SyncStatus = SyncStatus.PENDING
    server_id: str | None = None
    last_synced_at: datetime | None = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> Task:
        """Create Task from database row."""
        return cls(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            completed=bool(row["completed"]),
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row["updated_at"]),
            is_deleted=bool(row["is_deleted"]),
            sync_status=SyncStatus(row["sync_status"]),
            server_id=row["server_id"],
            last_synced_at=(
                parse_timestamp(row["last_synced_at"]) if row["last_synced_at"] else None
            ),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        """Create from a remote task representation.

        Only id, title and updated_at are required; the remote may omit
        the local bookkeeping fields.

        Raises:
            KeyError: If a required field is missing.
            ValueError: If a field has the wrong type or a timestamp cannot
                be parsed.
        """
        title = data["title"]
        if not isinstance(title, str) or not title:
            raise ValueError(f"invalid title {title!r}")
        completed = data.get("completed", False)
        if not isinstance(completed, bool):
            raise ValueError(f"invalid completed flag {completed!r}")
        is_deleted = data.get("is_deleted", False)
        if not isinstance(is_deleted, bool):
            raise ValueError(f"invalid is_deleted flag {is_deleted!r}")
        description = data.get("description")
        if description is not None and not isinstance(description, str):
            raise ValueError(f"invalid description {description!r}")
        updated_at = parse_timestamp(data["updated_at"])
        return cls(
            id=data["id"],
            title=title,
            description=description,
            completed=completed,
            created_at=parse_timestamp(data.get("created_at") or updated_at),
            updated_at=updated_at,
            is_deleted=is_deleted,
            server_id=data.get("server_id"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "completed": self.completed,
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
            "is_deleted": self.is_deleted,
            "sync_status": self.sync_status.value,
            "server_id": self.server_id,
            "last_synced_at": (
                format_timestamp(self.last_synced_at) if self.last_synced_at else None
            ),
        }

