"""Line-delimited JSON-RPC over standard input and output."""

import asyncio
import concurrent.futures
import logging
import sys
import threading
from typing import Any, TextIO

from teahouse.mcp.dispatcher import Dispatcher
from teahouse.mcp.errors import INTERNAL_ERROR
from teahouse.mcp.jsonrpc import parse_request, serialize_response
from teahouse.mcp.models import JsonRpcResponse
from teahouse.mcp.senders import ResponseSender
from teahouse.transport.base import Transport

logger = logging.getLogger(__name__)

DEFAULT_STDIO_TIMEOUT = 30.0


class StdoutSender(ResponseSender):
    """Writes each response as one JSON line."""

    def __init__(self, output: TextIO):
        self.output = output

    async def send_response(self, response: JsonRpcResponse) -> None:
        self.output.write(serialize_response(response) + "\n")
        self.output.flush()


class StdioTransport(Transport):
    """
    Reads one JSON-RPC message per line and dispatches it in order.

    A daemon thread reads the input and hands lines over through a queue of
    size one, so the dispatch loop can stop on `stop_event` while a read is
    still blocked.
    """

    def __init__(
        self,
        request_timeout: float = DEFAULT_STDIO_TIMEOUT,
        input_stream: TextIO | None = None,
        output_stream: TextIO | None = None,
    ):
        self.request_timeout = request_timeout
        self.input = input_stream if input_stream is not None else sys.stdin
        self.output = output_stream if output_stream is not None else sys.stdout
        self.sender = StdoutSender(self.output)

    async def start(self, dispatcher: Dispatcher, stop_event: asyncio.Event) -> None:
        logger.info("Starting stdio transport")
        loop = asyncio.get_running_loop()
        lines: asyncio.Queue[str | None] = asyncio.Queue(maxsize=1)

        reader = threading.Thread(
            target=self._read_lines, args=(loop, lines), name="stdio-reader", daemon=True
        )
        reader.start()

        stopped = asyncio.create_task(stop_event.wait())
        try:
            while True:
                next_line = asyncio.create_task(lines.get())
                done, _ = await asyncio.wait(
                    {next_line, stopped}, return_when=asyncio.FIRST_COMPLETED
                )
                if stopped in done:
                    next_line.cancel()
                    logger.info("Stdio transport shutting down")
                    return

                line = next_line.result()
                if line is None:
                    logger.info("Input closed, exiting")
                    return

                line = line.strip()
                if not line:
                    continue
                await self.handle_line(dispatcher, line)
        finally:
            stopped.cancel()
            await self.stop()

    async def stop(self) -> None:
        try:
            self.output.flush()
        except ValueError:
            # Output already closed
            pass

    def _read_lines(self, loop: asyncio.AbstractEventLoop, lines: asyncio.Queue) -> None:
        try:
            for line in iter(self.input.readline, ""):
                asyncio.run_coroutine_threadsafe(lines.put(line), loop).result()
            asyncio.run_coroutine_threadsafe(lines.put(None), loop).result()
        except (RuntimeError, concurrent.futures.CancelledError):
            # Event loop is gone; nobody is waiting for more input
            return
        except (OSError, ValueError) as e:
            logger.error(f"Error reading input: {e}")
            try:
                asyncio.run_coroutine_threadsafe(lines.put(None), loop)
            except RuntimeError:
                return

    async def handle_line(self, dispatcher: Dispatcher, line: str) -> None:
        """Decode and dispatch one line. Failures are written or logged, never raised."""
        request, error = parse_request(line)
        if error is not None:
            logger.warning(f"Rejected message: {serialize_response(error)}")
            await self._send_safely(error)
            return
        if request is None:
            return

        try:
            await asyncio.wait_for(
                dispatcher.dispatch(request, self.sender), timeout=self.request_timeout
            )
        except asyncio.TimeoutError:
            logger.error(f"Request timed out: {request.method} (id={request.id})")
            if not request.is_notification:
                await self._send_error_safely(request.id, "Request timed out")
        except Exception as e:
            logger.exception(f"Error handling message: {request.method} (id={request.id})")
            if not request.is_notification:
                await self._send_error_safely(request.id, "Internal error", str(e))

    async def _send_error_safely(self, id: Any, message: str, data: Any = None) -> None:
        try:
            await self.sender.send_error(id, INTERNAL_ERROR, message, data)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to write error response: {e}")

    async def _send_safely(self, response: JsonRpcResponse) -> None:
        try:
            await self.sender.send_response(response)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to write response: {e}")
