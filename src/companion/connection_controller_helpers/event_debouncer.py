"""Suppress duplicate "connecting" notifications."""

import logging

from .state_store import ConnectionStateStore


class ConnectingEventDebouncer:
    """Accepts at most one "connecting" notification per debounce window."""

    def __init__(self, service_name: str, state_store: ConnectionStateStore):
        self.service_name = service_name
        self.state_store = state_store
        self.logger = logging.getLogger(f"{__name__}.{service_name}")

    def accept(self) -> bool:
        """Record the notification and return True unless it falls inside the window."""
        state = self.state_store.state
        now = self.state_store.now()
        last = state.last_connecting_event_at
        if last is not None and now - last < state.min_connecting_event_interval_seconds:
            self.logger.debug(
                "Ignoring duplicate connecting notification (%.3fs after previous)",
                now - last,
            )
            return False
        state.last_connecting_event_at = now
        return True
