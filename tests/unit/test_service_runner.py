import asyncio
import logging
from contextlib import contextmanager
from unittest.mock import MagicMock

import pytest

from companion import service_runner


@pytest.mark.skipif(service_runner.fcntl is None, reason="fcntl not available on this platform")
def test_service_instance_lock_acquire_release(tmp_path, monkeypatch):
    monkeypatch.setenv("SERVICE_RUNTIME_DIR", str(tmp_path))
    lock = service_runner.ServiceInstanceLock("sample_service")
    lock.acquire()
    assert lock.held is True
    assert lock.lock_path == tmp_path / "sample_service.lock"
    assert lock.lock_path.read_text().strip().isdigit()
    lock.release()
    assert not lock.lock_path.exists()


@pytest.mark.skipif(service_runner.fcntl is None, reason="fcntl not available on this platform")
def test_single_instance_guard_context_manager(tmp_path):
    with service_runner.single_instance_guard("guarded", tmp_path):
        with pytest.raises(service_runner.SingleInstanceError, match="running already"):
            with service_runner.single_instance_guard("guarded", tmp_path):
                pass

    assert not (tmp_path / "guarded.lock").exists()


@contextmanager
def _fake_guard(*_args):
    yield


def test_run_async_service_handles_keyboard_interrupt(monkeypatch, caplog):
    executed = {}

    async def factory():
        executed["ran"] = True
        raise KeyboardInterrupt()

    monkeypatch.setattr(service_runner, "single_instance_guard", _fake_guard)
    monkeypatch.setattr(service_runner, "setup_logging", lambda name: None)

    with caplog.at_level("INFO"):
        service_runner.run_async_service(factory, service_name="test_service")

    assert executed.get("ran") is True
    assert any("interrupted by user" in record.message for record in caplog.records)


def test_run_async_service_custom_shutdown_message(monkeypatch, caplog):
    async def factory():
        raise KeyboardInterrupt()

    monkeypatch.setattr(service_runner, "single_instance_guard", _fake_guard)
    monkeypatch.setattr(service_runner, "setup_logging", lambda name: None)

    with caplog.at_level("INFO"):
        service_runner.run_async_service(factory, service_name="bot", shutdown_message="bye for now")

    assert "bye for now" in caplog.text


def test_run_async_service_propagates_other_exceptions(monkeypatch):
    async def factory():
        raise RuntimeError("boom")

    monkeypatch.setattr(service_runner, "single_instance_guard", _fake_guard)
    monkeypatch.setattr(service_runner, "setup_logging", lambda name: None)

    with pytest.raises(RuntimeError):
        service_runner.run_async_service(factory, service_name="boom_service")


def test_run_async_service_exits_when_already_running(monkeypatch, capsys):
    @contextmanager
    def busy_guard(*_args):
        raise service_runner.SingleInstanceError("Service 'bot' appears to be running already.")
        yield

    monkeypatch.setattr(service_runner, "single_instance_guard", busy_guard)

    with pytest.raises(SystemExit) as exc_info:
        service_runner.run_async_service(MagicMock(), service_name="bot")

    assert exc_info.value.code == 1
    assert "running already" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_install_exception_handler_logs_unhandled_errors(caplog):
    loop = asyncio.get_running_loop()
    previous = loop.get_exception_handler()
    try:
        service_runner.install_exception_handler(logging.getLogger("test.runner"))
        with caplog.at_level(logging.ERROR):
            loop.call_exception_handler({"message": "Task exception was never retrieved", "exception": ValueError("x")})
    finally:
        loop.set_exception_handler(previous)

    assert "Unhandled exception: Task exception was never retrieved" in caplog.text


@pytest.mark.asyncio
async def test_install_shutdown_handlers_sets_stop_event(monkeypatch):
    loop = asyncio.get_running_loop()
    registered = {}
    monkeypatch.setattr(loop, "add_signal_handler", lambda sig, callback: registered.setdefault(sig.name, callback))
    stop_event = asyncio.Event()

    service_runner.install_shutdown_handlers(stop_event)

    assert set(registered) == {"SIGINT", "SIGTERM"}
    registered["SIGTERM"]()
    assert stop_event.is_set()
