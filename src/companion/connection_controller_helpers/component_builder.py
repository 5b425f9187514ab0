"""Component builder for connection controller initialization."""

from __future__ import annotations

from typing import Any, Optional

from ..client_config import ClientConfig
from ..reconnect_config import ReconnectConfig
from ..timers import Scheduler


def _build_core_components(service_name: str, config: ReconnectConfig, scheduler: Scheduler) -> dict[str, Any]:
    from .event_debouncer import ConnectingEventDebouncer
    from .state_store import ConnectionStateStore

    state_store = ConnectionStateStore(service_name, config, scheduler)
    debouncer = ConnectingEventDebouncer(service_name, state_store)
    return {"state_store": state_store, "debouncer": debouncer}


def _build_handlers(
    service_name: str,
    state_store: Any,
    client_config: ClientConfig,
    transport_factory: Any,
    attach_handlers: Any,
    subscribe_status: Optional[Any],
) -> dict[str, Any]:
    from .establishment_monitor import EstablishmentTimeoutMonitor
    from .reconnection_scheduler import ReconnectionScheduler
    from .status_reporter import StatusReporter
    from .transport_rebinder import TransportRebinder

    establishment_monitor = EstablishmentTimeoutMonitor(service_name, state_store)
    reconnection_scheduler = ReconnectionScheduler(service_name, state_store)
    transport_rebinder = TransportRebinder(
        service_name,
        state_store,
        client_config,
        transport_factory,
        attach_handlers,
        subscribe_status,
    )
    status_reporter = StatusReporter(state_store, transport_rebinder)
    return {
        "establishment_monitor": establishment_monitor,
        "reconnection_scheduler": reconnection_scheduler,
        "transport_rebinder": transport_rebinder,
        "status_reporter": status_reporter,
    }


class ComponentBuilder:
    """Builds all connection controller components."""

    def __init__(
        self,
        service_name: str,
        config: ReconnectConfig,
        client_config: ClientConfig,
        scheduler: Scheduler,
        transport_factory: Any,
        attach_handlers: Any,
        subscribe_status: Optional[Any] = None,
    ):
        self.service_name = service_name
        self.config = config
        self.client_config = client_config
        self.scheduler = scheduler
        self.transport_factory = transport_factory
        self.attach_handlers = attach_handlers
        self.subscribe_status = subscribe_status

    def build_all(self) -> dict[str, Any]:
        core = _build_core_components(self.service_name, self.config, self.scheduler)
        handlers = _build_handlers(
            self.service_name,
            core["state_store"],
            self.client_config,
            self.transport_factory,
            self.attach_handlers,
            self.subscribe_status,
        )
        return {**core, **handlers}
