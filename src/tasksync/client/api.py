"""HTTP client for the remote tasksync authority.

This module provides:
- HTTPClient: health check and batch submission over httpx
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import httpx

from tasksync.client.sync.types import BatchItemResult
from tasksync.core.errors import BatchTransportError
from tasksync.core.types import format_timestamp, utc_now

if TYPE_CHECKING:
    from tasksync.client.sync.types import QueueEntry
    from tasksync.core.config import SyncConfig

logger = logging.getLogger(__name__)


class HTTPClient:
    """HTTP client for the remote /health and /batch endpoints."""

    def __init__(
        self,
        config: SyncConfig,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            config: Remote address and timeouts.
            client: Pre-built httpx client (e.g. a test client bound to an
                in-process app). Created from config when omitted.
        """
        self._config = config
        self._owns_client = client is None
        self._client = client or httpx.Client(
            base_url=config.server_url,
            timeout=config.timeout,
            verify=config.verify_ssl,
        )

    @property
    def config(self) -> SyncConfig:
        """Configuration this client was built from."""
        return self._config

    def close(self) -> None:
        """Close the HTTP client."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HTTPClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    # === Health check ===

    def health_check(self, timeout: float | None = None) -> bool:
        """Check if the server is healthy.

        Args:
            timeout: Request timeout in seconds (defaults to the probe timeout).

        Returns:
            True if the server answered with a success status.
        """
        try:
            response = self._client.get(
                "/health",
                timeout=timeout if timeout is not None else self._config.probe_timeout,
            )
        except httpx.HTTPError as e:
            logger.debug("Health check failed: %s", e)
            return False
        return response.is_success

    # === Batch sync ===

    def send_batch(self, entries: Sequence[QueueEntry]) -> list[BatchItemResult]:
        """Submit a batch of queue entries.

        Args:
            entries: Entries to transmit, in queue order.

        Returns:
            One result per item reported by the remote.

        Raises:
            BatchTransportError: If the batch could not be delivered, the
                remote answered with a non-success status, or the response
                body is malformed.
        """
        payload: dict[str, Any] = {
            "items": [entry.to_payload() for entry in entries],
            "client_timestamp": format_timestamp(utc_now()),
        }

        try:
            response = self._client.post("/batch", json=payload)
        except httpx.HTTPError as e:
            raise BatchTransportError(f"Batch request failed: {e}") from e

        if not response.is_success:
            raise BatchTransportError(
                f"Batch rejected with HTTP {response.status_code}",
                response.status_code,
            )

        try:
            items = response.json()["processed_items"]
            return [BatchItemResult.from_dict(item) for item in items]
        except (ValueError, KeyError, TypeError) as e:
            raise BatchTransportError(f"Malformed batch response: {e}") from e
