"""Application startup: build the first transport, attach handlers and supervise it."""

from __future__ import annotations

import asyncio
import importlib
import logging
from typing import Any, Callable, Optional

from .async_helpers import maybe_await
from .client_config import ClientConfig, load_client_config
from .config import ConfigurationError
from .connection_controller import ConnectionLifecycleController
from .connection_controller_helpers.transport_rebinder import AttachHandlers, TransportFactory
from .reconnect_config import ReconnectConfig, get_reconnect_config
from .service_runner import install_exception_handler, install_shutdown_handlers
from .status_file import StatusFileWriter
from .timers import Scheduler

logger = logging.getLogger(__name__)


def resolve_callable(path: str) -> Callable[..., Any]:
    """Import ``module:attribute`` (or ``module.attribute``) and return the callable."""
    module_name, sep, attribute = path.partition(":")
    if not sep:
        module_name, _, attribute = path.rpartition(".")
    if not module_name or not attribute:
        raise ConfigurationError.invalid_format("callable path", path, "module:attribute")

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError.load_failed(f"module {module_name!r}", path) from exc

    target = module
    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise ConfigurationError.load_failed(f"attribute {attribute!r}", module_name) from exc

    if not callable(target):
        raise ConfigurationError.invalid_value("callable path", path, "Target is not callable")
    return target


def _log_startup(client_config: ClientConfig, reconnect_config: ReconnectConfig) -> None:
    logger.info(
        "Initializing companion bot (auth=%s, database=%s, auto_online=%s, auto_presence=%s, auto_read=%s, auto_reject_call=%s)",
        client_config.auth_type,
        client_config.database.type,
        client_config.auto_online,
        client_config.auto_presence,
        client_config.auto_read,
        client_config.auto_reject_call,
    )
    logger.info(
        "Reconnection policy: max_retries=%d, retry_delay=%.1fs, connection_timeout=%.1fs",
        reconnect_config.max_retries,
        reconnect_config.retry_delay_seconds,
        reconnect_config.connection_timeout_seconds,
    )


async def run_companion(
    transport_factory: TransportFactory,
    attach_handlers: AttachHandlers,
    *,
    service_name: str = "companion",
    client_config: Optional[ClientConfig] = None,
    reconnect_config: Optional[ReconnectConfig] = None,
    status_file: bool = True,
    scheduler: Optional[Scheduler] = None,
    stop_event: Optional[asyncio.Event] = None,
) -> ConnectionLifecycleController:
    """Start the bot and block until a shutdown is requested; returns the stopped controller."""
    client_config = client_config or load_client_config()
    reconnect_config = reconnect_config or get_reconnect_config()
    stop_event = stop_event or asyncio.Event()

    install_exception_handler(logger)
    install_shutdown_handlers(stop_event, logger)
    _log_startup(client_config, reconnect_config)

    controller = ConnectionLifecycleController(
        transport_factory,
        attach_handlers,
        reconnect_config=reconnect_config,
        client_config=client_config,
        scheduler=scheduler,
        service_name=service_name,
    )
    if status_file:
        controller.add_state_listener(StatusFileWriter(service_name))

    transport = await maybe_await(transport_factory(client_config))
    await maybe_await(attach_handlers(transport))
    await controller.initialize(transport)
    logger.info("Companion bot started and ready for messages")

    try:
        await stop_event.wait()
    finally:
        await controller.shutdown()
        logger.info("Companion bot stopped")
    return controller
