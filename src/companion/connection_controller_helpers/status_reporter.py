"""Status reporting for the connection controller."""

from typing import Any, Dict

from ..connection_state import ConnectionStatus
from .state_store import ConnectionStateStore
from .transport_rebinder import TransportRebinder


class StatusReporter:
    """Builds read-only snapshots of the controller state."""

    def __init__(self, state_store: ConnectionStateStore, transport_rebinder: TransportRebinder):
        self.state_store = state_store
        self.transport_rebinder = transport_rebinder

    def get_state(self) -> Dict[str, Any]:
        """Get current connection status for diagnostics."""
        state = self.state_store.state
        return {
            "status": state.status.value,
            "is_connected": state.status == ConnectionStatus.CONNECTED,
            "is_reconnecting": state.is_reconnecting,
            "retry_count": state.retry_count,
            "max_retries": state.max_retries,
            "has_active_establishment_timer": self.state_store.establishment_timer.active,
            "has_active_reconnection_timer": self.state_store.reconnection_timer.active,
            "last_attempt_at": state.last_attempt_at,
            "last_connecting_event_at": state.last_connecting_event_at,
            "transport_generation": self.transport_rebinder.generation,
        }
