"""Shared configuration classes for tasksync.

This module defines configuration classes used by both client and server components.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_BATCH_SIZE = 50
DEFAULT_PROBE_TIMEOUT = 5.0

# Fixed retry ceiling per queue entry; not configurable.
MAX_RETRIES = 3


@dataclass
class SyncConfig:
    """Configuration for reconciling with a remote tasksync authority.

    Attributes:
        server_url: Base URL of the remote (e.g., "https://tasks.example.com").
        batch_size: Maximum number of queue entries sent per /batch request.
        timeout: Request timeout in seconds for batch transmissions.
        probe_timeout: Timeout in seconds for the /health connectivity probe.
        verify_ssl: Whether to verify SSL certificates (default True).
    """

    server_url: str
    batch_size: int = DEFAULT_BATCH_SIZE
    timeout: float = 30.0
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT
    verify_ssl: bool = True

    def __post_init__(self) -> None:
        """Normalize server URL and validate batch size."""
        self.server_url = self.server_url.rstrip("/")
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")
