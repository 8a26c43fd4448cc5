"""Local SQLite database shared by the task store and the sync queue.

This module provides:
- LocalDatabase: connection, schema and scoped transactions

Architecture:
    Tasks and their pending sync operations live in the same database
    file so that a task mutation and its queue entry can be committed
    in a single transaction (outbox pattern). The store and the queue
    both borrow the connection owned by LocalDatabase.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class LocalDatabase:
    """SQLite database for the local replica.

    Statements are serialized with a re-entrant lock so the connection can
    be shared between threads. Outside of transaction() every statement
    commits on its own (autocommit mode).
    """

    def __init__(self, db_path: Path) -> None:
        """Initialize local database.

        Args:
            db_path: Path to SQLite database file.
        """
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        self._lock = threading.RLock()

        self._conn = sqlite3.connect(
            str(self._db_path),
            check_same_thread=False,
            isolation_level=None,  # Autocommit mode
        )
        self._conn.row_factory = sqlite3.Row

        # Enable WAL mode for better concurrency
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")

        self._create_tables()

    @property
    def path(self) -> Path:
        """Path of the database file."""
        return self._db_path

    def _create_tables(self) -> None:
        """Create database tables if they don't exist."""
        self._conn.executescript("""
            CREATE TABLE IF NOT EXISTS tasks (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                description TEXT,
                completed INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                is_deleted INTEGER NOT NULL DEFAULT 0,
                sync_status TEXT NOT NULL DEFAULT 'pending'
                    CHECK (sync_status IN ('pending', 'synced', 'error')),
                server_id TEXT,
                last_synced_at TEXT
            );

            -- Outbox of local mutations awaiting transmission
            CREATE TABLE IF NOT EXISTS sync_queue (
                id TEXT PRIMARY KEY,
                task_id TEXT NOT NULL REFERENCES tasks(id),
                operation TEXT NOT NULL
                    CHECK (operation IN ('create', 'update', 'delete')),
                data TEXT NOT NULL,
                created_at TEXT NOT NULL,
                retry_count INTEGER NOT NULL DEFAULT 0,
                error_message TEXT
            );

            CREATE INDEX IF NOT EXISTS idx_sync_queue_created_at
                ON sync_queue (created_at);
            CREATE INDEX IF NOT EXISTS idx_sync_queue_task_id
                ON sync_queue (task_id);

            -- Key-value sync state
            CREATE TABLE IF NOT EXISTS sync_state (
                key TEXT PRIMARY KEY,
                value TEXT
            );
        """)

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run a block of statements as one atomic unit.

        Nested calls join the enclosing transaction. Any exception rolls
        back every statement issued inside the outermost block and is
        re-raised.
        """
        with self._lock:
            if self._conn.in_transaction:
                yield self._conn
                return

            self._conn.execute("BEGIN IMMEDIATE")
            try:
                yield self._conn
            except BaseException:
                self._conn.rollback()
                logger.debug("Rolled back transaction on %s", self._db_path)
                raise
            else:
                self._conn.commit()

    def execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        """Execute a single statement."""
        with self._lock:
            return self._conn.execute(sql, params)

    def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Row | None:
        """Execute a query and return its first row."""
        with self._lock:
            row: sqlite3.Row | None = self._conn.execute(sql, params).fetchone()
        return row

    def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[sqlite3.Row]:
        """Execute a query and return all rows."""
        with self._lock:
            return self._conn.execute(sql, params).fetchall()

    # === Sync state ===

    def get_state(self, key: str) -> str | None:
        """Get a sync state value."""
        row = self.fetch_one("SELECT value FROM sync_state WHERE key = ?", (key,))
        return row["value"] if row else None

    def set_state(self, key: str, value: str) -> None:
        """Set a sync state value."""
        self.execute(
            "INSERT OR REPLACE INTO sync_state (key, value) VALUES (?, ?)",
            (key, value),
        )
