"""
Configuration for the connection lifecycle controller.

Values are read once at process start from the environment (or a ``.env``
file) and are never reloaded. The public knobs keep the millisecond units the
bot has always used in its environment; internally every duration is held in
seconds.
"""

from dataclasses import dataclass, field
from functools import partial

from companion.config import ConfigurationError, env_int, env_milliseconds

DEFAULT_MAX_RETRIES = 10
DEFAULT_RETRY_DELAY_MS = 30000
DEFAULT_CONNECTION_TIMEOUT_MS = 30000

# Internal guards against rapid-fire duplicate processing; not configurable.
MIN_ATTEMPT_INTERVAL_SECONDS = 5.0
MIN_CONNECTING_EVENT_INTERVAL_SECONDS = 1.0


def _require_max_retries() -> int:
    value = env_int("RECONNECT_MAX_RETRIES", or_value=DEFAULT_MAX_RETRIES)
    if value is None or value < 0:
        raise ConfigurationError.invalid_value("RECONNECT_MAX_RETRIES", value, "Must be a non-negative integer")
    return value


@dataclass
class ReconnectConfig:
    """
    Retry budget and timing for reconnection.

    Attributes:
        max_retries: Attempts allowed since the last successful connection
        retry_delay_seconds: Base delay before each reconnection attempt
        connection_timeout_seconds: Deadline for an attempt to report success
        min_attempt_interval_seconds: Minimum spacing between attempt starts
        min_connecting_event_interval_seconds: Window in which repeated
            "connecting" notifications are treated as one
    """

    max_retries: int = field(default_factory=_require_max_retries)
    retry_delay_seconds: float = field(
        default_factory=partial(env_milliseconds, "RECONNECT_RETRY_DELAY", DEFAULT_RETRY_DELAY_MS)
    )
    connection_timeout_seconds: float = field(
        default_factory=partial(env_milliseconds, "RECONNECT_CONNECTION_TIMEOUT", DEFAULT_CONNECTION_TIMEOUT_MS)
    )
    min_attempt_interval_seconds: float = MIN_ATTEMPT_INTERVAL_SECONDS
    min_connecting_event_interval_seconds: float = MIN_CONNECTING_EVENT_INTERVAL_SECONDS

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ConfigurationError.invalid_value("max_retries", self.max_retries, "Must be non-negative")
        for name in (
            "retry_delay_seconds",
            "connection_timeout_seconds",
            "min_attempt_interval_seconds",
            "min_connecting_event_interval_seconds",
        ):
            if getattr(self, name) < 0:
                raise ConfigurationError.invalid_value(name, getattr(self, name), "Must be non-negative")


def get_reconnect_config() -> ReconnectConfig:
    """Build the reconnection configuration from the environment."""
    return ReconnectConfig()
