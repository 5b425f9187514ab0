"""Tests for status snapshots."""

from companion.connection_controller_helpers.state_store import ConnectionStateStore
from companion.connection_controller_helpers.status_reporter import StatusReporter
from companion.connection_controller_helpers.transport_rebinder import TransportRebinder
from companion.connection_state import ConnectionStatus


def _reporter(reconnect_config, scheduler, client_config, transport_factory, attach_handlers):
    store = ConnectionStateStore("test_service", reconnect_config, scheduler)
    rebinder = TransportRebinder("test_service", store, client_config, transport_factory, attach_handlers)
    return StatusReporter(store, rebinder), store


class TestStatusReporter:
    """Tests for StatusReporter.get_state."""

    def test_initial_snapshot(self, reconnect_config, scheduler, client_config, transport_factory, attach_handlers):
        reporter, _ = _reporter(reconnect_config, scheduler, client_config, transport_factory, attach_handlers)

        assert reporter.get_state() == {
            "status": "idle",
            "is_connected": False,
            "is_reconnecting": False,
            "retry_count": 0,
            "max_retries": 3,
            "has_active_establishment_timer": False,
            "has_active_reconnection_timer": False,
            "last_attempt_at": None,
            "last_connecting_event_at": None,
            "transport_generation": 0,
        }

    def test_reflects_timers_and_status(self, reconnect_config, scheduler, client_config, transport_factory, attach_handlers):
        reporter, store = _reporter(reconnect_config, scheduler, client_config, transport_factory, attach_handlers)
        store.transition(ConnectionStatus.CONNECTED)
        store.establishment_timer.arm(1.0, lambda: None)

        snapshot = reporter.get_state()

        assert snapshot["status"] == "connected"
        assert snapshot["is_connected"] is True
        assert snapshot["has_active_establishment_timer"] is True
        assert snapshot["has_active_reconnection_timer"] is False
