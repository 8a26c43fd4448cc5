"""FastAPI application for the tasksync reference server.

This module creates and configures the FastAPI application with:
- GET /health for connectivity probes
- POST /batch for queued client operations

Usage:
    uvicorn tasksync.server.app:app_factory --factory --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from tasksync import __version__
from tasksync.server.api.router import router as api_router
from tasksync.server.database import Database

# Configuration from environment variables with defaults
DB_PATH = Path(os.environ.get("TASKSYNC_SERVER_DB_PATH", "tasksync-server.db"))
LOG_PATH = Path(os.environ.get("TASKSYNC_SERVER_LOG_PATH", "tasksync-server.log"))
SERVER_HANDLER_NAME = "tasksync-server"

logger = logging.getLogger(__name__)


def setup_logging(log_path: Path | None = LOG_PATH, level: int = logging.INFO) -> None:
    """Send server and request logs to stdout and, optionally, a log file.

    Only the tasksync.server namespace is configured, so client modules
    imported by the server keep their own handlers. Calling this again
    replaces the handlers installed by the previous call.

    Args:
        log_path: Log file, or None for stdout only.
        level: Level for the tasksync.server logger.
    """
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    stdout_handler = logging.StreamHandler(sys.stdout)
    file_handler: logging.Handler | None = None
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")

    server_logger = logging.getLogger("tasksync.server")
    access_logger = logging.getLogger("uvicorn.access")
    for target in (server_logger, access_logger):
        for old in [h for h in target.handlers if h.get_name() == SERVER_HANDLER_NAME]:
            target.removeHandler(old)
            old.close()

    for handler in (stdout_handler, file_handler):
        if handler is None:
            continue
        handler.setFormatter(formatter)
        handler.set_name(SERVER_HANDLER_NAME)
        server_logger.addHandler(handler)
    server_logger.setLevel(level)
    # The CLI installs its own stderr handler on the parent logger
    server_logger.propagate = False

    # uvicorn already prints requests to the console; only copy them to the file
    if file_handler is not None:
        access_logger.addHandler(file_handler)


def create_app(db: Database) -> FastAPI:
    """Create FastAPI application with a given database.

    Args:
        db: Database instance.

    Returns:
        Configured FastAPI application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler for startup/shutdown."""
        logger.info("tasksync reference server starting (database: %s)", db.path)
        yield
        logger.info("tasksync reference server shutting down")

    application = FastAPI(
        title="tasksync reference server",
        description="Remote authority for offline-first task sync",
        version=__version__,
        lifespan=lifespan,
    )

    application.state.db = db
    application.include_router(api_router)

    return application


def app_factory() -> FastAPI:
    """Factory function for uvicorn --factory mode."""
    setup_logging(LOG_PATH)
    return create_app(db=Database(DB_PATH))
