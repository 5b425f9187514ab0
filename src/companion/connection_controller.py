"""
Connection lifecycle controller for the messaging gateway client.

The controller receives the transport's coarse status notifications, decides
when the link is healthy or failed, and replaces the transport when it fails,
within a fixed retry budget. All work happens synchronously inside
notification and timer callbacks on one event loop; the only suspension point
is building and binding a replacement transport.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from .client_config import ClientConfig, load_client_config
from .connection_controller_helpers import ComponentBuilder, map_status
from .connection_controller_helpers.transport_rebinder import (
    AttachHandlers,
    StatusSubscriber,
    TransportFactory,
)
from .connection_state import ConnectionOutcome, ConnectionStatus
from .exceptions import TransportBindingError, TransportConstructionError
from .reconnect_config import ReconnectConfig, get_reconnect_config
from .timers import AsyncioScheduler, Scheduler

StateListener = Callable[[Dict[str, Any]], None]


class ConnectionLifecycleController:
    """Owns connection state for one transport lineage."""

    def __init__(
        self,
        transport_factory: TransportFactory,
        attach_handlers: AttachHandlers,
        *,
        reconnect_config: Optional[ReconnectConfig] = None,
        client_config: Optional[ClientConfig] = None,
        scheduler: Optional[Scheduler] = None,
        subscribe_status: Optional[StatusSubscriber] = None,
        service_name: str = "companion",
    ):
        self.service_name = service_name
        self.config = reconnect_config or get_reconnect_config()
        self.client_config = client_config or load_client_config()
        self.scheduler = scheduler or AsyncioScheduler()

        builder = ComponentBuilder(
            service_name,
            self.config,
            self.client_config,
            self.scheduler,
            transport_factory,
            attach_handlers,
            subscribe_status,
        )
        components = builder.build_all()

        self.state_store = components["state_store"]
        self.debouncer = components["debouncer"]
        self.establishment_monitor = components["establishment_monitor"]
        self.reconnection_scheduler = components["reconnection_scheduler"]
        self.transport_rebinder = components["transport_rebinder"]
        self.status_reporter = components["status_reporter"]

        self.establishment_monitor.on_timeout = self._handle_establishment_timeout
        self.reconnection_scheduler.on_fire = self._start_reconnection
        self.transport_rebinder.on_status = self.on_status_notification

        self._rebind_task: Optional[asyncio.Task] = None
        self._state_listeners: List[StateListener] = []
        self._last_published: Optional[Dict[str, Any]] = None
        self._active = False

        self.logger = logging.getLogger(f"{__name__}.{service_name}")

    @property
    def transport(self) -> Optional[Any]:
        return self.transport_rebinder.transport

    @property
    def awaiting_rebind(self) -> bool:
        """True while an attempt is pending on its timer or still building its transport."""
        if self.reconnection_scheduler.pending:
            return True
        return self._rebind_task is not None and not self._rebind_task.done()

    async def initialize(self, transport: Any) -> None:
        """Bind to the startup transport and reset all retry accounting."""
        self._cancel_rebind()
        self.state_store.reset()
        await self.transport_rebinder.bind_initial(transport)
        self._active = True
        self.logger.info("Connection monitoring initialized for new client")
        self._publish()

    def on_status_notification(self, raw_status: Any) -> None:
        """Entry point for every status change reported by the transport."""
        if not self._active:
            self.logger.warning("Status %r received before initialization or after shutdown; ignoring", raw_status)
            return

        outcome = map_status(raw_status)
        self.logger.info(
            "Connection status change: %s (retries %d/%d)",
            raw_status,
            self.state_store.state.retry_count,
            self.state_store.state.max_retries,
        )
        try:
            if outcome == ConnectionOutcome.CONNECTING:
                self._handle_connecting()
            elif outcome == ConnectionOutcome.SUCCEEDED:
                self._handle_succeeded()
            else:
                self._handle_failure(outcome, raw_status)
        except Exception:
            self.logger.exception("Failed to process connection status %r", raw_status)
        finally:
            self._publish()

    def get_state(self) -> Dict[str, Any]:
        """Read-only diagnostic snapshot."""
        return self.status_reporter.get_state()

    def add_state_listener(self, listener: StateListener) -> None:
        """Call ``listener`` with a fresh snapshot whenever the state changes."""
        self._state_listeners.append(listener)

    def schedule_reconnection(self) -> bool:
        """
        Arm the next reconnection attempt if single-flight and the budget allow it.

        A connected, idle or connecting link is marked disconnected before the
        attempt is armed.
        """
        state = self.state_store.state
        if not state.is_reconnecting and not self.state_store.budget_exhausted:
            self.establishment_monitor.clear()
            if state.status in (ConnectionStatus.CONNECTED, ConnectionStatus.IDLE, ConnectionStatus.CONNECTING):
                self.state_store.transition(ConnectionStatus.DISCONNECTED)
        scheduled = self.reconnection_scheduler.schedule()
        self._publish()
        return scheduled

    async def perform_reconnection(self) -> None:
        """Build a replacement transport, bind handlers, and start its establishment timer."""
        attempt = self.state_store.state.retry_count
        try:
            transport = await self.transport_rebinder.rebind(attempt)
        except asyncio.CancelledError:
            self.logger.info("Reconnection attempt %d cancelled", attempt)
            raise
        except (TransportConstructionError, TransportBindingError):
            self.logger.exception("Reconnection attempt %d failed", attempt)
            self._conclude_failed_attempt(ConnectionStatus.DISCONNECTED)
            self._publish()
            return

        if transport is not None and self.state_store.state.is_reconnecting:
            self.establishment_monitor.arm()
            state = self.state_store.state
            self.logger.info(
                "Reconnection attempt initiated (attempt %d, %d remaining)",
                state.retry_count,
                state.max_retries - state.retry_count,
            )
        self._publish()

    async def shutdown(self) -> None:
        """Cancel timers and any running attempt; the controller ignores further notifications."""
        self._active = False
        self.establishment_monitor.clear()
        self.reconnection_scheduler.cancel()
        task = self._cancel_rebind()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
        self.state_store.conclude_attempt()
        self.logger.info("Connection monitoring stopped")
        self._publish()

    def _handle_connecting(self) -> None:
        if self.awaiting_rebind:
            self.logger.debug("Connecting notification ignored while a reconnection is pending")
            return
        if not self.debouncer.accept():
            return
        self.state_store.transition(ConnectionStatus.CONNECTING)
        self.logger.info("Connecting to messaging gateway...")
        self.establishment_monitor.arm_if_idle()

    def _handle_succeeded(self) -> None:
        self.establishment_monitor.clear()
        self.reconnection_scheduler.cancel()
        self._cancel_rebind()
        was_connected = self.state_store.state.status == ConnectionStatus.CONNECTED
        self.state_store.record_success()
        if not was_connected:
            self.logger.info("Successfully connected to messaging gateway")

    def _handle_failure(self, outcome: ConnectionOutcome, raw_status: Any) -> None:
        if self.awaiting_rebind:
            self.logger.debug(
                "Failure notification %r ignored; reconnection attempt %d already underway",
                raw_status,
                self.state_store.state.retry_count,
            )
            return

        if outcome == ConnectionOutcome.UNRECOGNIZED:
            self.logger.warning("Unhandled connection status %r; treating it as a failed connection", raw_status)
            status = ConnectionStatus.UNKNOWN
        else:
            self.logger.warning("Messaging gateway connection closed")
            status = ConnectionStatus.DISCONNECTED
        self._conclude_failed_attempt(status)

    def _handle_establishment_timeout(self) -> None:
        try:
            self._conclude_failed_attempt(ConnectionStatus.DISCONNECTED)
        except Exception:
            self.logger.exception("Failed to handle establishment timeout")
        finally:
            self._publish()

    def _conclude_failed_attempt(self, status: ConnectionStatus) -> None:
        """Close out the current attempt and let the scheduler decide on the next one."""
        self.establishment_monitor.clear()
        self.state_store.conclude_attempt()
        self.state_store.transition(status)
        self.reconnection_scheduler.schedule()

    def _start_reconnection(self) -> None:
        try:
            self._rebind_task = self.scheduler.spawn(self.perform_reconnection())
        except RuntimeError:
            self.logger.exception("Unable to start reconnection attempt")
            self.state_store.conclude_attempt()
            self._publish()

    def _cancel_rebind(self) -> Optional[asyncio.Task]:
        task = self._rebind_task
        self._rebind_task = None
        if task is None or task.done():
            return None
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if task is current:
            return None
        task.cancel()
        return task

    def _publish(self) -> None:
        snapshot = self.get_state()
        if snapshot == self._last_published:
            return
        self._last_published = snapshot
        for listener in list(self._state_listeners):
            try:
                listener(dict(snapshot))
            except Exception:
                self.logger.exception("State listener %r failed", listener)
