"""Process plumbing for the bot: one instance per host, signals, and asyncio entry."""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
from pathlib import Path
from typing import Any, Callable, Coroutine, Dict, Optional

from .logging_config import setup_logging
from .status_file import default_runtime_dir

try:
    import fcntl
except ImportError:  # pragma: no cover - Windows
    fcntl = None

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = ("SIGINT", "SIGTERM")


class SingleInstanceError(RuntimeError):
    """Another process already holds the bot's session lock."""


class ServiceInstanceLock:
    """Advisory lock on ``<runtime>/<service>.lock`` holding the owner's PID."""

    def __init__(self, service_name: str, runtime_dir: Optional[Path] = None) -> None:
        self.service_name = service_name
        self.lock_path = (runtime_dir or default_runtime_dir()) / f"{service_name}.lock"
        self._fd: Optional[int] = None

    @property
    def held(self) -> bool:
        return self._fd is not None

    def acquire(self) -> None:
        if fcntl is None:  # pragma: no cover - Windows
            raise SingleInstanceError("Single instance enforcement requires fcntl on this platform.")

        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.lock_path, os.O_RDWR | os.O_CREAT, 0o664)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError as exc:
            owner = self._read_owner(fd)
            os.close(fd)
            detail = f" (PID {owner})" if owner else ""
            raise SingleInstanceError(f"Service '{self.service_name}' appears to be running already{detail}") from exc

        os.ftruncate(fd, 0)
        os.write(fd, f"{os.getpid()}\n".encode("ascii"))
        self._fd = fd
        logger.debug("Acquired instance lock %s", self.lock_path)

    def release(self) -> None:
        if self._fd is None:
            return
        fd, self._fd = self._fd, None
        try:
            fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)
        self.lock_path.unlink(missing_ok=True)

    def __enter__(self) -> "ServiceInstanceLock":
        self.acquire()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.release()

    @staticmethod
    def _read_owner(fd: int) -> Optional[str]:
        try:
            return os.pread(fd, 32, 0).decode("ascii", "replace").strip() or None
        except OSError:
            return None


def single_instance_guard(service_name: str, runtime_dir: Optional[Path] = None) -> ServiceInstanceLock:
    """``with single_instance_guard("bot"):`` holds the lock for the block."""
    return ServiceInstanceLock(service_name, runtime_dir)


def install_shutdown_handlers(stop_event: asyncio.Event, service_logger: Optional[logging.Logger] = None) -> None:
    """Set ``stop_event`` on SIGINT/SIGTERM so the bot can shut down cleanly."""
    log = service_logger or logger
    loop = asyncio.get_running_loop()

    for name in SHUTDOWN_SIGNALS:
        sig = getattr(signal, name, None)
        if sig is None:
            continue

        def _request_shutdown(signame: str = name) -> None:
            log.info("Received %s, shutting down gracefully...", signame)
            stop_event.set()

        try:
            loop.add_signal_handler(sig, _request_shutdown)
        except (NotImplementedError, RuntimeError):  # Windows or non-main thread
            log.debug("Signal handler for %s not installed", name)


def install_exception_handler(service_logger: Optional[logging.Logger] = None) -> None:
    """Log errors from tasks nobody awaited; the process keeps running."""
    log = service_logger or logger
    loop = asyncio.get_running_loop()

    def _handle(_loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
        exc = context.get("exception")
        message = context.get("message", "Unhandled exception in event loop")
        if exc is not None:
            log.error("Unhandled exception: %s", message, exc_info=exc)
        else:
            log.error("Unhandled event loop error: %s", message)

    loop.set_exception_handler(_handle)


ServiceFactory = Callable[[], Coroutine[Any, Any, None]]


def run_async_service(
    factory: ServiceFactory,
    *,
    service_name: str,
    logger_name: Optional[str] = None,
    configure_logging: bool = True,
    shutdown_message: Optional[str] = None,
    runtime_dir: Optional[Path] = None,
) -> None:
    """Hold the instance lock, configure logging and run ``factory()`` to completion.

    Exits with status 1 when another instance is already running. Ctrl+C is
    logged rather than dumped as a traceback; any other exception propagates.
    """
    try:
        with single_instance_guard(service_name, runtime_dir):
            if configure_logging:
                setup_logging(service_name)
            service_logger = logging.getLogger(logger_name or f"companion.{service_name}")
            try:
                asyncio.run(factory())
            except KeyboardInterrupt:
                service_logger.info(shutdown_message or f"{service_name} service interrupted by user")
    except SingleInstanceError as exc:
        sys.stderr.write(f"{exc}\n")
        raise SystemExit(1) from exc
