"""Tests for the command line entry point."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from companion.__main__ import build_parser, main

TRANSPORT = "tests.helpers.fake_transport:build_transport"
HANDLERS = "tests.helpers.fake_transport:attach_nothing"


def test_parser_defaults():
    args = build_parser().parse_args(["--transport", "a:b", "--handlers", "c:d"])

    assert args.service_name == "companion"
    assert args.no_status_file is False
    assert args.verbose is False


def test_parser_requires_transport_and_handlers():
    with pytest.raises(SystemExit) as exc_info:
        build_parser().parse_args([])

    assert exc_info.value.code == 2


def test_main_rejects_unknown_callables(capsys):
    assert main(["--transport", "companion_missing_module:build", "--handlers", HANDLERS]) == 2

    assert "Could not load module" in capsys.readouterr().err


def test_main_runs_service():
    with patch("companion.__main__.run_async_service") as run_service, patch(
        "companion.__main__.run_companion", new_callable=AsyncMock
    ) as run_companion:
        assert main(["--transport", TRANSPORT, "--handlers", HANDLERS, "--service-name", "bot", "--no-status-file"]) == 0

        run_service.assert_called_once()
        assert run_service.call_args.kwargs["service_name"] == "bot"
        asyncio.run(run_service.call_args.args[0]())

    run_companion.assert_awaited_once()
    _, kwargs = run_companion.await_args
    assert kwargs["service_name"] == "bot"
    assert kwargs["status_file"] is False
