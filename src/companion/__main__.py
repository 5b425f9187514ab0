"""Command line entry point: ``python -m companion``."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from .config import ConfigurationError
from .service import resolve_callable, run_companion
from .service_runner import run_async_service

DEFAULT_SERVICE_NAME = "companion"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="companion",
        description="Keep a messaging gateway client connected and reconnect it when it drops.",
    )
    parser.add_argument(
        "--transport",
        required=True,
        help="Transport factory as module:callable; called with the client configuration",
    )
    parser.add_argument(
        "--handlers",
        required=True,
        help="Handler attachment function as module:callable; called with each new transport",
    )
    parser.add_argument("--service-name", default=DEFAULT_SERVICE_NAME, help="Name used for logs, lock and status files")
    parser.add_argument("--no-status-file", action="store_true", help="Do not write runtime/<service>.status.json")
    parser.add_argument("--verbose", action="store_true", help="Log debug messages")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        transport_factory = resolve_callable(args.transport)
        attach_handlers = resolve_callable(args.handlers)
    except ConfigurationError as exc:
        sys.stderr.write(f"{exc}\n")
        return 2

    async def _service() -> None:
        if args.verbose:
            logging.getLogger().setLevel(logging.DEBUG)
        await run_companion(
            transport_factory,
            attach_handlers,
            service_name=args.service_name,
            status_file=not args.no_status_file,
        )

    run_async_service(
        _service,
        service_name=args.service_name,
        shutdown_message="Received interrupt, shutting down gracefully...",
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
