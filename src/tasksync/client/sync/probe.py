"""Connectivity probe gating sync attempts."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tasksync.core.config import DEFAULT_PROBE_TIMEOUT

if TYPE_CHECKING:
    from tasksync.client.api import HTTPClient

logger = logging.getLogger(__name__)


class ConnectivityProbe:
    """Cheap reachability check against the remote health endpoint.

    A single bounded request, no retries; callers decide when to try again.
    """

    def __init__(self, client: HTTPClient, timeout: float = DEFAULT_PROBE_TIMEOUT) -> None:
        self._client = client
        self._timeout = timeout

    def is_reachable(self) -> bool:
        """Return True if GET /health succeeds within the timeout."""
        reachable = self._client.health_check(timeout=self._timeout)
        if not reachable:
            logger.info("Remote unreachable")
        return reachable
