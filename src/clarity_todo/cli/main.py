# src/clarity_todo/cli/main.py

"""
CLI entrypoint.

    clarity serve    run the HTTP API (uvicorn) over the local SQLite store
    clarity console  interactive client that talks to a running server

Initializes logging from settings before anything else.
"""

from __future__ import annotations

import argparse
import asyncio
import logging

import uvicorn

from ..cli.bootstrap import create_console_state, create_server_app
from ..config import get_settings
from ..connectors.console_connector import print_notification, run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="clarity", description="Personal task list.")
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default=None, help="Bind address (default: settings).")
    serve.add_argument("--port", type=int, default=None, help="Port (default: settings).")

    sub.add_parser("console", help="Interactive console client.")
    return parser


def _serve(settings, host: str | None, port: int | None) -> None:
    app = create_server_app(settings=settings)
    logger.info("Serving %s on %s:%s", settings.app_name, host or settings.host, port or settings.port)
    uvicorn.run(
        app,
        host=host or settings.host,
        port=port or settings.port,
        log_config=None,
    )


async def _console(settings) -> None:
    state, client = create_console_state(settings=settings, notifier=print_notification)
    try:
        await run_console_loop(state)
    finally:
        await client.aclose()


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    log_file = setup_logging(
        log_dir=settings.data_dir,
        console_level=console_level,
        show_access=args.command != "console",
    )

    logger.info("Starting %s (log file: %s)", settings.app_name, log_file)

    if args.command == "console":
        try:
            asyncio.run(_console(settings))
        except KeyboardInterrupt:
            logger.info("Console interrupted.")
    else:
        _serve(settings, getattr(args, "host", None), getattr(args, "port", None))

    logger.info("Bye.")


if __name__ == "__main__":
    main()
