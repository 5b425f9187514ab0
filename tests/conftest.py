"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import os
from unittest.mock import MagicMock

import pytest

from companion.client_config import ClientConfig
from companion.connection_controller import ConnectionLifecycleController
from companion.reconnect_config import ReconnectConfig
from tests.helpers.fake_transport import FakeTransport, FakeTransportFactory
from tests.helpers.manual_scheduler import ManualScheduler

# Set required environment variables for tests
os.environ.setdefault("RECONNECT_MAX_RETRIES", "3")
os.environ.setdefault("RECONNECT_RETRY_DELAY", "1000")
os.environ.setdefault("RECONNECT_CONNECTION_TIMEOUT", "2000")


@pytest.fixture(autouse=True)
def no_dotenv_defaults(monkeypatch):
    """Keep developer .env files out of the configuration under test."""
    monkeypatch.setattr("companion.config.runtime._DEFAULT_VALUES", {})


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler(start=100.0)


@pytest.fixture
def reconnect_config() -> ReconnectConfig:
    return ReconnectConfig(
        max_retries=3,
        retry_delay_seconds=1.0,
        connection_timeout_seconds=2.0,
        min_attempt_interval_seconds=5.0,
        min_connecting_event_interval_seconds=1.0,
    )


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig()


@pytest.fixture
def transport_factory() -> FakeTransportFactory:
    return FakeTransportFactory()


@pytest.fixture
def attach_handlers() -> MagicMock:
    return MagicMock(return_value=None)


@pytest.fixture
def controller(scheduler, reconnect_config, client_config, transport_factory, attach_handlers) -> ConnectionLifecycleController:
    """Controller wired to the manual scheduler; call ``initialize`` before use."""
    return ConnectionLifecycleController(
        transport_factory,
        attach_handlers,
        reconnect_config=reconnect_config,
        client_config=client_config,
        scheduler=scheduler,
        service_name="test_service",
    )


@pytest.fixture
def initial_transport() -> FakeTransport:
    return FakeTransport(name="transport-0")
