"""
Process-wide logging setup for the bot.

``setup_logging`` replaces whatever handlers the root logger has with:
- a stdout handler (full records, or bare messages at WARNING in user-friendly mode)
- a ``<log dir>/<service>.log`` file handler at INFO when a service name is given

The log directory is ``COMPANION_LOG_DIR`` or ``./logs``. Each start truncates
the service log unless ``LOG_APPEND`` is true.
"""

import logging
import logging.handlers
import os
import sys
import threading
from pathlib import Path
from typing import List, Optional

from companion.config import env_bool

_setup_lock = threading.Lock()
_LOG_DIR_ENV = "COMPANION_LOG_DIR"
RECORD_FORMAT = "%(asctime)s.%(msecs)03d - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Transport stacks log every frame at INFO.
QUIET_LOGGERS = ("asyncio", "aiohttp", "websockets", "urllib3")


def resolve_log_dir(log_dir: Optional[Path] = None) -> Path:
    if log_dir is not None:
        return log_dir
    configured = os.getenv(_LOG_DIR_ENV)
    return Path(configured).expanduser() if configured else Path.cwd() / "logs"


def _console_handler(user_friendly: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if user_friendly:
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler.setLevel(logging.WARNING)
    else:
        handler.setFormatter(logging.Formatter(RECORD_FORMAT, DATE_FORMAT))
        handler.setLevel(logging.DEBUG)
    return handler


def _service_log_handler(service_name: str, log_dir: Optional[Path]) -> logging.Handler:
    directory = resolve_log_dir(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    mode = "a" if env_bool("LOG_APPEND", or_value=False) else "w"
    # WatchedFileHandler reopens the file after logrotate moves it.
    handler = logging.handlers.WatchedFileHandler(directory / f"{service_name}.log", mode=mode)
    handler.setFormatter(logging.Formatter(RECORD_FORMAT, DATE_FORMAT))
    handler.setLevel(logging.INFO)
    return handler


def setup_logging(
    service_name: Optional[str] = None,
    user_friendly: bool = False,
    log_dir: Optional[Path] = None,
) -> None:
    """Configure logging for the application"""
    handlers: List[logging.Handler] = [_console_handler(user_friendly)]
    if service_name:
        handlers.append(_service_log_handler(service_name, log_dir))

    with _setup_lock:
        root = logging.getLogger()
        for old in list(root.handlers):
            root.removeHandler(old)
            old.close()
        for handler in handlers:
            root.addHandler(handler)
        root.setLevel(logging.INFO)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
