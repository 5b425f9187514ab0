"""Connection supervision for a messaging gateway bot."""

from .connection_controller import ConnectionLifecycleController
from .connection_state import ConnectionOutcome, ConnectionStatus
from .reconnect_config import ReconnectConfig, get_reconnect_config

__all__ = [
    "ConnectionLifecycleController",
    "ConnectionOutcome",
    "ConnectionStatus",
    "ReconnectConfig",
    "get_reconnect_config",
]
