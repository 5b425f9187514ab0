"""Helper modules for the connection lifecycle controller."""

from .component_builder import ComponentBuilder
from .establishment_monitor import EstablishmentTimeoutMonitor
from .event_debouncer import ConnectingEventDebouncer
from .reconnection_scheduler import ReconnectionScheduler
from .state_store import ConnectionState, ConnectionStateStore
from .status_mapper import STATUS_OUTCOMES, extract_status, map_status
from .status_reporter import StatusReporter
from .transport_rebinder import (
    STATUS_EVENT,
    Transport,
    TransportRebinder,
    subscribe_connection_events,
)

__all__ = [
    "ComponentBuilder",
    "ConnectingEventDebouncer",
    "ConnectionState",
    "ConnectionStateStore",
    "EstablishmentTimeoutMonitor",
    "extract_status",
    "map_status",
    "ReconnectionScheduler",
    "STATUS_EVENT",
    "STATUS_OUTCOMES",
    "StatusReporter",
    "subscribe_connection_events",
    "Transport",
    "TransportRebinder",
]
