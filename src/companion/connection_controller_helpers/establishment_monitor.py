"""Deadline for a connection attempt to report success."""

import logging
from typing import Callable, Optional

from ..connection_state import ConnectionStatus
from .state_store import ConnectionStateStore


class EstablishmentTimeoutMonitor:
    """Arms the establishment timer and reports when it expires."""

    def __init__(self, service_name: str, state_store: ConnectionStateStore):
        self.service_name = service_name
        self.state_store = state_store
        self.on_timeout: Optional[Callable[[], None]] = None
        self.logger = logging.getLogger(f"{__name__}.{service_name}")

    @property
    def active(self) -> bool:
        return self.state_store.establishment_timer.active

    def arm_if_idle(self) -> bool:
        """Arm a timer for an accepted "connecting" notification unless one is running."""
        if self.active or self.state_store.state.status == ConnectionStatus.CONNECTED:
            return False
        self.arm()
        return True

    def arm(self) -> None:
        timeout = self.state_store.state.connection_timeout_seconds
        self.state_store.establishment_timer.arm(timeout, self._expired)
        self.logger.info(
            "Connection establishment timeout set (%.1fs, attempt %d)",
            timeout,
            self.state_store.state.retry_count + 1,
        )

    def clear(self) -> None:
        if self.state_store.establishment_timer.cancel():
            self.logger.info("Connection timeout cleared")

    def _expired(self) -> None:
        self.logger.warning(
            "Connection establishment timeout reached (%.1fs) - no success status received, retries so far: %d",
            self.state_store.state.connection_timeout_seconds,
            self.state_store.state.retry_count,
        )
        if self.on_timeout is not None:
            self.on_timeout()
