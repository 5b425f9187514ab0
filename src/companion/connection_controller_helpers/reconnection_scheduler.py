"""Reconnection scheduling with a shared retry budget."""

import logging
from typing import Callable, Optional

from .state_store import ConnectionStateStore


class ReconnectionScheduler:
    """
    Decides whether another attempt is allowed and arms the delayed callback.

    The delay is the configured retry delay plus whatever is still missing
    from the minimum spacing since the previous attempt started. It does not
    grow exponentially.
    """

    def __init__(self, service_name: str, state_store: ConnectionStateStore):
        self.service_name = service_name
        self.state_store = state_store
        self.on_fire: Optional[Callable[[], None]] = None
        self.logger = logging.getLogger(f"{__name__}.{service_name}")

    @property
    def pending(self) -> bool:
        return self.state_store.reconnection_timer.active

    def calculate_delay(self) -> float:
        state = self.state_store.state
        deficit = 0.0
        if state.last_attempt_at is not None:
            elapsed = self.state_store.now() - state.last_attempt_at
            deficit = max(0.0, state.min_attempt_interval_seconds - elapsed)
        return state.retry_delay_seconds + deficit

    def schedule(self) -> bool:
        """Arm the next attempt; return False when single-flight or the budget blocks it."""
        state = self.state_store.state
        if state.is_reconnecting:
            self.logger.debug("Reconnection already in progress (attempt %d), not scheduling another", state.retry_count)
            return False

        if self.state_store.budget_exhausted:
            self.logger.error(
                "Maximum reconnection attempts reached (%d/%d); giving up until the process is restarted",
                state.retry_count,
                state.max_retries,
            )
            return False

        attempt = self.state_store.begin_attempt()
        delay = self.calculate_delay()
        self.state_store.reconnection_timer.arm(delay, self._fire)
        self.logger.warning(
            "Attempting reconnection %d/%d in %.1fs",
            attempt,
            state.max_retries,
            delay,
        )
        return True

    def cancel(self) -> None:
        if self.state_store.reconnection_timer.cancel():
            self.logger.info("Pending reconnection cancelled")

    def _fire(self) -> None:
        if self.on_fire is not None:
            self.on_fire()
