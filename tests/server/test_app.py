"""Tests for the reference server application setup."""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from tasksync.server.app import SERVER_HANDLER_NAME, create_app, setup_logging
from tasksync.server.database import Database


@pytest.fixture
def server_logging() -> Generator[None, None, None]:
    """Remove handlers installed by setup_logging after the test."""
    yield
    for name in ("tasksync.server", "uvicorn.access"):
        target = logging.getLogger(name)
        for handler in [h for h in target.handlers if h.get_name() == SERVER_HANDLER_NAME]:
            target.removeHandler(handler)
            handler.close()
        target.propagate = True


@pytest.mark.usefixtures("server_logging")
class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_batch_outcomes_reach_log_file(self, tmp_path: Path) -> None:
        """Should write batch summaries to the log file."""
        log_path = tmp_path / "logs" / "server.log"
        setup_logging(log_path)
        db = Database(tmp_path / "server.db")
        try:
            with TestClient(create_app(db)) as client:
                client.post("/batch", json={"items": []})
        finally:
            db.close()

        assert "Processed batch of 0 items" in log_path.read_text()

    def test_repeated_setup_does_not_duplicate_handlers(self, tmp_path: Path) -> None:
        """Should replace its own handlers on a second call."""
        setup_logging(tmp_path / "first.log")
        setup_logging(tmp_path / "second.log")

        server_handlers = [
            h
            for h in logging.getLogger("tasksync.server").handlers
            if h.get_name() == SERVER_HANDLER_NAME
        ]
        access_handlers = [
            h
            for h in logging.getLogger("uvicorn.access").handlers
            if h.get_name() == SERVER_HANDLER_NAME
        ]
        assert len(server_handlers) == 2
        assert len(access_handlers) == 1

    def test_stdout_only(self) -> None:
        """Should skip the file handler when no path is given."""
        setup_logging(None)

        handlers = [
            h
            for h in logging.getLogger("tasksync.server").handlers
            if h.get_name() == SERVER_HANDLER_NAME
        ]
        assert len(handlers) == 1
        assert not isinstance(handlers[0], logging.FileHandler)
