"""Build replacement transports and bind handlers to them."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional, Protocol, Union

from ..async_helpers import maybe_await
from ..client_config import ClientConfig
from ..exceptions import TransportBindingError, TransportConstructionError
from .state_store import ConnectionStateStore
from .status_mapper import extract_status

STATUS_EVENT = "connection"

StatusListener = Callable[[Any], Awaitable[None]]
TransportFactory = Callable[[ClientConfig], Union[Any, Awaitable[Any]]]
AttachHandlers = Callable[[Any], Union[None, Awaitable[None]]]
StatusSubscriber = Callable[[Any, StatusListener], Union[None, Awaitable[None]]]


class Transport(Protocol):
    """Event-emitting client; handlers are coroutine functions."""

    def on(self, event: str, handler: Callable[..., Any]) -> Any: ...


def subscribe_connection_events(transport: Transport, listener: StatusListener) -> None:
    """Register ``listener`` for the transport's connection status events."""
    transport.on(STATUS_EVENT, listener)


class TransportRebinder:
    """
    Owns the live transport and swaps it for a fresh one on each attempt.

    Every bound transport gets a generation number; listeners created for an
    older generation stop forwarding once a newer transport takes over.
    """

    def __init__(
        self,
        service_name: str,
        state_store: ConnectionStateStore,
        client_config: ClientConfig,
        transport_factory: TransportFactory,
        attach_handlers: AttachHandlers,
        subscribe_status: Optional[StatusSubscriber] = None,
    ):
        self.service_name = service_name
        self.state_store = state_store
        self.client_config = client_config
        self.transport_factory = transport_factory
        self.attach_handlers = attach_handlers
        self.subscribe_status = subscribe_status or subscribe_connection_events
        self.on_status: Optional[Callable[[Any], None]] = None
        self.transport: Optional[Any] = None
        self.generation = 0
        self.logger = logging.getLogger(f"{__name__}.{service_name}")

    async def bind_initial(self, transport: Any) -> None:
        """Adopt the startup transport and listen to its status events."""
        self.generation += 1
        self.transport = transport
        await maybe_await(self.subscribe_status(transport, self.listener_for(self.generation)))

    async def rebind(self, attempt: int) -> Optional[Any]:
        """
        Replace the transport for ``attempt``.

        Returns the new transport, or ``None`` when the attempt was called off
        (a success arrived) before binding. Raises ``TransportConstructionError``
        or ``TransportBindingError`` on failure.

        The previous transport stays current until the new one is bound, so an
        abandoned or failed attempt leaves it listening.
        """
        self.state_store.mark_attempt_started()

        try:
            transport = await maybe_await(self.transport_factory(self.client_config))
        except Exception as exc:
            raise TransportConstructionError(attempt, exc) from exc

        if not self.state_store.state.is_reconnecting:
            self.logger.info("Reconnection attempt %d abandoned before binding; connection already restored", attempt)
            return None

        generation = self.generation + 1
        try:
            await maybe_await(self.attach_handlers(transport))
            await maybe_await(self.subscribe_status(transport, self.listener_for(generation)))
        except Exception as exc:
            raise TransportBindingError(attempt, exc) from exc

        # The superseded client is not shut down, only dropped.
        self.generation = generation
        self.transport = transport
        return transport

    def listener_for(self, generation: int) -> StatusListener:
        async def _listener(context: Any) -> None:
            if generation != self.generation:
                self.logger.debug(
                    "Ignoring status %r from superseded transport (generation %d, current %d)",
                    extract_status(context),
                    generation,
                    self.generation,
                )
                return
            if self.on_status is not None:
                self.on_status(extract_status(context))

        return _listener
