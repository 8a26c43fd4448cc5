"""Server database using SQLAlchemy with SQLite.

This module provides:
- Task storage keyed by client task id
- Last-write-wins conflict detection on upsert
- Soft deletion
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session

from tasksync.server.models import Base, RemoteTask

if TYPE_CHECKING:
    from sqlalchemy import Engine


def as_utc(value: datetime) -> datetime:
    """Normalize to aware UTC; naive values read back from SQLite are UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class ConflictError(Exception):
    """Raised when the stored task is newer than the incoming change.

    Attributes:
        task: The stored (winning) task, detached from its session.
    """

    def __init__(self, task: RemoteTask) -> None:
        super().__init__(f"Task {task.id} was modified on the server")
        self.task = task


class Database:
    """SQLAlchemy database for the authoritative task copies.

    Uses SQLite with WAL mode for better concurrency with multiple readers.
    """

    def __init__(self, db_path: Path | str) -> None:
        """Initialize the database.

        Args:
            db_path: Path to the SQLite database file.
        """
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        # Create engine with check_same_thread=False for multi-threaded access
        self._engine: Engine = create_engine(
            f"sqlite:///{self._db_path}",
            connect_args={"check_same_thread": False},
            echo=False,
        )

        # Enable WAL mode
        with self._engine.connect() as conn:
            conn.exec_driver_sql("PRAGMA journal_mode=WAL")

        # Create tables if they don't exist
        Base.metadata.create_all(self._engine)

    @property
    def path(self) -> Path:
        """Path of the database file."""
        return self._db_path

    def close(self) -> None:
        """Close the database connection."""
        self._engine.dispose()

    def _session(self) -> Session:
        """Create a new database session."""
        return Session(self._engine)

    # === Task operations ===

    def get_task(self, task_id: str) -> RemoteTask | None:
        """Get a task by its client id.

        Returns:
            RemoteTask if found (deleted or not), None otherwise.
        """
        with self._session() as session:
            task = session.get(RemoteTask, task_id)
            if task:
                session.expunge(task)
            return task

    def list_tasks(self, include_deleted: bool = False) -> list[RemoteTask]:
        """List stored tasks.

        Args:
            include_deleted: Also return soft-deleted tasks.
        """
        with self._session() as session:
            stmt = select(RemoteTask).order_by(RemoteTask.created_at)
            if not include_deleted:
                stmt = stmt.where(RemoteTask.is_deleted.is_(False))
            tasks = list(session.execute(stmt).scalars().all())
            for task in tasks:
                session.expunge(task)
            return tasks

    def upsert_task(
        self,
        task_id: str,
        title: str,
        description: str | None,
        completed: bool,
        updated_at: datetime,
    ) -> RemoteTask:
        """Create a task or apply a newer version of it.

        Args:
            task_id: Client-assigned task id.
            title: Task title.
            description: Task description.
            completed: Completion flag.
            updated_at: Client modification time of this version.

        Returns:
            The stored task.

        Raises:
            ConflictError: If the stored version is strictly newer.
        """
        updated_at = as_utc(updated_at)
        with self._session() as session:
            task = session.get(RemoteTask, task_id)
            if task is None:
                task = RemoteTask(
                    id=task_id,
                    server_id=f"srv-{uuid.uuid4()}",
                    title=title,
                    description=description,
                    completed=completed,
                    created_at=updated_at,
                    updated_at=updated_at,
                )
                session.add(task)
            elif as_utc(task.updated_at) > updated_at:
                session.expunge(task)
                raise ConflictError(task)
            else:
                task.title = title
                task.description = description
                task.completed = completed
                task.updated_at = updated_at

            session.commit()
            session.refresh(task)
            session.expunge(task)
            return task

    def delete_task(self, task_id: str, updated_at: datetime) -> RemoteTask | None:
        """Soft-delete a task.

        Returns:
            The deleted task, or None if the task was never stored.
        """
        with self._session() as session:
            task = session.get(RemoteTask, task_id)
            if task is None:
                return None
            task.is_deleted = True
            task.deleted_at = datetime.now(UTC)
            task.updated_at = max(as_utc(task.updated_at), as_utc(updated_at))
            session.commit()
            session.refresh(task)
            session.expunge(task)
            return task
