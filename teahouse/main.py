"""Teahouse MCP Server - process entrypoint."""

import argparse
import asyncio
import signal
import sys
from typing import Sequence

from pydantic import ValidationError

from teahouse import __version__
from teahouse.config.loader import Settings
from teahouse.handlers.tea import TeaHandler
from teahouse.mcp.dispatcher import Dispatcher
from teahouse.mcp.models import ServerInfo
from teahouse.transport.base import Transport
from teahouse.transport.http import HTTPTransport
from teahouse.transport.stdio import StdioTransport
from teahouse.utils.logging import get_logger, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="teahouse",
        description="MCP server exposing a tea collection over stdio or HTTP.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--transport", choices=["stdio", "http"], help="transport to serve on")
    parser.add_argument("--host", help="HTTP listen address")
    parser.add_argument("--port", type=int, help="HTTP listen port")
    parser.add_argument("--name", dest="server_name", help="server name reported on initialize")
    parser.add_argument("--server-version", help="server version reported on initialize")
    parser.add_argument("--request-timeout", type=float, help="per-request timeout in seconds")
    parser.add_argument("--shutdown-timeout", type=float, help="graceful shutdown timeout in seconds")
    parser.add_argument("--read-timeout", type=float, help="HTTP body read timeout in seconds")
    parser.add_argument("--write-timeout", type=float, help="SSE send timeout in seconds")
    parser.add_argument("--idle-timeout", type=float, help="HTTP keep-alive timeout in seconds")
    parser.add_argument(
        "--log-level", choices=["debug", "info", "warn", "error"], help="log verbosity"
    )
    parser.add_argument(
        "--log-json",
        dest="log_format",
        action="store_const",
        const="json",
        help="emit JSON log records",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """
    Build settings from MCP_* environment variables and command-line flags.

    Flags that are given take precedence over the environment. Invalid
    values raise pydantic.ValidationError.
    """
    args = build_parser().parse_args(argv)
    overrides = {key: value for key, value in vars(args).items() if value is not None}
    return Settings(**overrides)


def create_dispatcher(settings: Settings) -> Dispatcher:
    """Wire the tea handler as every capability of a new dispatcher."""
    handler = TeaHandler()
    return Dispatcher(
        tools=handler,
        resources=handler,
        prompts=handler,
        server_info=ServerInfo(name=settings.server_name, version=settings.server_version),
    )


def create_transport(settings: Settings) -> Transport:
    """Instantiate the configured transport."""
    if settings.http_enabled:
        return HTTPTransport.from_settings(settings)
    return StdioTransport(request_timeout=settings.request_timeout)


async def run(settings: Settings) -> None:
    """Serve until SIGINT/SIGTERM or until the transport finishes on its own."""
    log = get_logger("startup")
    dispatcher = create_dispatcher(settings)
    transport = create_transport(settings)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Signal handlers are unavailable on this platform
            pass

    log.info(
        "Starting MCP server",
        server_name=settings.server_name,
        version=settings.server_version,
        transport=settings.transport,
    )
    try:
        await transport.start(dispatcher, stop_event)
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.remove_signal_handler(sig)
            except NotImplementedError:
                pass
    log.info("Server stopped")


def main(argv: Sequence[str] | None = None) -> int:
    try:
        settings = parse_args(argv)
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(settings.log_level, settings.log_format)
    log = get_logger("startup")

    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        log.info("Interrupted")
    except Exception as e:
        log.error("Server error", error=str(e), exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
