"""Shared fixtures for tasksync tests."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest

from tasksync.client.database import LocalDatabase
from tasksync.client.store import LocalTaskStore


@pytest.fixture
def local_db(tmp_path: Path) -> Generator[LocalDatabase, None, None]:
    """Create a local replica database."""
    database = LocalDatabase(tmp_path / "tasks.db")
    yield database
    database.close()


@pytest.fixture
def store(local_db: LocalDatabase) -> LocalTaskStore:
    """Create a task store with its queue."""
    return LocalTaskStore(local_db)
