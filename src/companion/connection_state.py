"""
Canonical connection state definitions.

The controller only ever reasons about these enums; raw transport tokens are
translated at the boundary by ``status_mapper``.
"""

from enum import Enum


class ConnectionStatus(Enum):
    """Logical status of the link to the messaging gateway."""

    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    UNKNOWN = "unknown"


class ConnectionOutcome(Enum):
    """What a raw status notification means for the state machine."""

    CONNECTING = "connecting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    UNRECOGNIZED = "unrecognized"
