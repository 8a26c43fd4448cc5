"""Configuration utilities for tasksync CLI.

This module provides shared configuration functions used across CLI commands.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from tasksync.core.config import DEFAULT_BATCH_SIZE, SyncConfig

DEFAULT_SERVER_URL = "http://localhost:8000"

# Settings persisted in config.json
CONFIG_KEYS = ("server_url", "batch_size")


def get_config_dir() -> Path:
    """Get the configuration directory for tasksync.

    Returns:
        Path to $TASKSYNC_HOME, or ~/.tasksync when unset.
    """
    home = os.environ.get("TASKSYNC_HOME")
    if home:
        return Path(home).expanduser()
    return Path.home() / ".tasksync"


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


def get_database_path() -> Path:
    """Get the path to the local task database."""
    return get_config_dir() / "tasks.db"


def load_config() -> dict[str, Any]:
    """Load the sync settings stored in the config file.

    Unknown keys are ignored.

    Raises:
        ValueError: If the file is not a JSON object.
    """
    config_file = get_config_file()
    if not config_file.exists():
        return {}
    try:
        data = json.loads(config_file.read_text())
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid config file {config_file}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Invalid config file {config_file}: expected an object")
    return {key: data[key] for key in CONFIG_KEYS if key in data}


def save_config(config: dict[str, Any]) -> None:
    """Persist the sync settings, replacing the file in one step."""
    config_file = get_config_file()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    settings = {key: config[key] for key in CONFIG_KEYS if config.get(key) is not None}
    tmp_file = config_file.with_suffix(".json.tmp")
    tmp_file.write_text(json.dumps(settings, indent=2))
    tmp_file.replace(config_file)


def build_sync_config() -> SyncConfig:
    """Build the sync configuration.

    Environment variables TASKSYNC_SERVER_URL and TASKSYNC_BATCH_SIZE take
    precedence over the config file.

    Raises:
        ValueError: If the batch size is not a positive integer.
    """
    config = load_config()
    server_url = os.environ.get("TASKSYNC_SERVER_URL") or config.get(
        "server_url", DEFAULT_SERVER_URL
    )
    batch_size = os.environ.get("TASKSYNC_BATCH_SIZE") or config.get(
        "batch_size", DEFAULT_BATCH_SIZE
    )
    try:
        size = int(batch_size)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid batch size: {batch_size!r}") from e
    return SyncConfig(server_url=str(server_url), batch_size=size)
