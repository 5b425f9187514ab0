"""Connection state store: the single source of truth for the controller."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..connection_state import ConnectionStatus
from ..reconnect_config import ReconnectConfig
from ..timers import Scheduler, TimerSlot


@dataclass
class ConnectionState:
    """Mutable connection bookkeeping owned by one controller."""

    max_retries: int
    retry_delay_seconds: float
    connection_timeout_seconds: float
    min_attempt_interval_seconds: float
    min_connecting_event_interval_seconds: float
    status: ConnectionStatus = ConnectionStatus.IDLE
    retry_count: int = 0
    last_attempt_at: Optional[float] = None
    last_connecting_event_at: Optional[float] = None
    is_reconnecting: bool = False

    @classmethod
    def from_config(cls, config: ReconnectConfig) -> "ConnectionState":
        return cls(
            max_retries=config.max_retries,
            retry_delay_seconds=config.retry_delay_seconds,
            connection_timeout_seconds=config.connection_timeout_seconds,
            min_attempt_interval_seconds=config.min_attempt_interval_seconds,
            min_connecting_event_interval_seconds=config.min_connecting_event_interval_seconds,
        )


class ConnectionStateStore:
    """Holds the connection state and the two timer slots that guard it."""

    def __init__(self, service_name: str, config: ReconnectConfig, scheduler: Scheduler):
        self.service_name = service_name
        self.config = config
        self.scheduler = scheduler
        self.logger = logging.getLogger(f"{__name__}.{service_name}")
        self.state = ConnectionState.from_config(config)
        self.establishment_timer = TimerSlot("Establishment", scheduler, self.logger)
        self.reconnection_timer = TimerSlot("Reconnection", scheduler, self.logger)

    def now(self) -> float:
        return self.scheduler.time()

    def reset(self) -> None:
        """Cancel both timers and return every field to its default."""
        self.establishment_timer.cancel()
        self.reconnection_timer.cancel()
        self.state = ConnectionState.from_config(self.config)

    def transition(self, new_status: ConnectionStatus) -> None:
        if self.state.status != new_status:
            previous = self.state.status
            self.state.status = new_status
            self.logger.info(f"State transition: {previous.value} -> {new_status.value}")

    @property
    def budget_exhausted(self) -> bool:
        return self.state.retry_count >= self.state.max_retries

    def begin_attempt(self) -> int:
        """Count a new reconnection attempt and enter single-flight mode."""
        self.state.retry_count += 1
        self.state.is_reconnecting = True
        return self.state.retry_count

    def conclude_attempt(self) -> None:
        self.state.is_reconnecting = False

    def record_success(self) -> None:
        self.transition(ConnectionStatus.CONNECTED)
        self.state.retry_count = 0
        self.state.is_reconnecting = False

    def mark_attempt_started(self) -> float:
        self.state.last_attempt_at = self.now()
        return self.state.last_attempt_at
