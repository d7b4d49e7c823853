"""Streamable HTTP transport: JSON responses or SSE sessions on /mcp."""

import asyncio
import contextlib
import math
import time
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Iterator, Mapping

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from sse_starlette import EventSourceResponse, ServerSentEvent
from starlette.background import BackgroundTask
from starlette.requests import ClientDisconnect

from teahouse.config.loader import Settings
from teahouse.mcp.dispatcher import Dispatcher
from teahouse.mcp.errors import (
    INTERNAL_ERROR,
    INVALID_REQUEST,
    PARSE_ERROR,
    UNKNOWN_REQUEST_ID,
    EventEncodeError,
    MCPError,
)
from teahouse.mcp.jsonrpc import make_error_response, parse_request
from teahouse.mcp.models import PROTOCOL_VERSION, JsonRpcRequest, JsonRpcResponse
from teahouse.mcp.senders import DirectSender
from teahouse.transport.base import Transport
from teahouse.transport.middleware import PreflightCORSMiddleware, SecurityHeadersMiddleware
from teahouse.transport.sessions import (
    SSE_SEPARATOR,
    SessionRegistry,
    SSESession,
    StreamingSender,
)
from teahouse.utils.logging import get_logger, set_request_id

CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_SSE = "text/event-stream"

HEADER_MCP_SESSION_ID = "Mcp-Session-Id"
HEADER_MCP_PROTOCOL_VERSION = "MCP-Protocol-Version"
HEADER_LAST_EVENT_ID = "Last-Event-ID"

SESSION_ID_PREFIX = "session_"

CORS_ALLOW_HEADERS = [
    "Content-Type",
    "Accept",
    HEADER_LAST_EVENT_ID,
    HEADER_MCP_SESSION_ID,
    HEADER_MCP_PROTOCOL_VERSION,
]
CORS_EXPOSE_HEADERS = [HEADER_MCP_SESSION_ID, HEADER_MCP_PROTOCOL_VERSION]

log = get_logger("http")


class _EmbeddedServer(uvicorn.Server):
    """Uvicorn server that leaves signal handling to the caller."""

    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield


def new_session_id() -> str:
    """Generate a session id from the fixed prefix and a nanosecond clock."""
    return f"{SESSION_ID_PREFIX}{time.time_ns()}"


def next_event_id(last_event_id: str | None) -> int:
    """Event id to resume from: Last-Event-ID + 1, or 0 when absent or invalid."""
    if not last_event_id:
        return 0
    try:
        return int(last_event_id) + 1
    except ValueError:
        return 0


class HTTPTransport(Transport):
    """
    Serves the MCP endpoint over HTTP.

    POST /mcp dispatches one request and answers either with a JSON body or,
    when the client accepts text/event-stream, with an SSE session carrying
    the response. GET /mcp opens or resumes a session without dispatching
    anything. Sessions live until the client disconnects or the transport
    stops.
    """

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = 8080,
        request_timeout: float = 30.0,
        read_timeout: float = 30.0,
        write_timeout: float = 30.0,
        idle_timeout: float = 120.0,
        shutdown_timeout: float = 5.0,
        ping_interval: float = 15.0,
    ):
        self.host = host
        self.port = port
        self.request_timeout = request_timeout
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout
        self.idle_timeout = idle_timeout
        self.shutdown_timeout = shutdown_timeout
        self.ping_interval = ping_interval
        self.registry = SessionRegistry()
        self._server: uvicorn.Server | None = None
        self._serve_task: asyncio.Task | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "HTTPTransport":
        return cls(
            host=settings.host,
            port=settings.port,
            request_timeout=settings.request_timeout,
            read_timeout=settings.read_timeout,
            write_timeout=settings.write_timeout,
            idle_timeout=settings.idle_timeout,
            shutdown_timeout=settings.shutdown_timeout,
            ping_interval=settings.sse_ping_interval,
        )

    # =========================================================================
    # Application
    # =========================================================================

    def create_app(self, dispatcher: Dispatcher) -> FastAPI:
        """Build the ASGI application serving `dispatcher`."""
        app = FastAPI(
            title=dispatcher.server_info.name,
            version=dispatcher.server_info.version,
            docs_url=None,
            redoc_url=None,
            openapi_url=None,
        )
        app.state.transport = self

        app.add_middleware(SecurityHeadersMiddleware)
        # CORS is added after the other middleware so it handles preflight first
        app.add_middleware(
            PreflightCORSMiddleware,
            allow_origins=["*"],
            allow_credentials=False,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=CORS_ALLOW_HEADERS,
            expose_headers=CORS_EXPOSE_HEADERS,
            max_age=86400,
        )

        @app.middleware("http")
        async def add_request_id_middleware(request: Request, call_next):
            """Add request ID to all requests."""
            request_id = request.headers.get("X-Request-ID") or set_request_id()
            set_request_id(request_id)
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response

        @app.get("/health")
        async def health() -> dict:
            """Health check endpoint."""
            return {"status": "healthy"}

        @app.get("/")
        async def root() -> dict:
            """Root endpoint with server info."""
            return {
                "name": dispatcher.server_info.name,
                "version": dispatcher.server_info.version,
                "protocol": PROTOCOL_VERSION,
                "transport": "HTTP + SSE",
                "port": self.port,
                "active_sessions": self.registry.session_count,
                "endpoints": {
                    "mcp": "/mcp",
                    "health": "/health",
                },
            }

        @app.post("/mcp")
        async def mcp_post(request: Request) -> Response:
            return await self.handle_post(dispatcher, request)

        @app.get("/mcp")
        async def mcp_get(request: Request) -> Response:
            return await self.handle_get(request)

        @app.options("/{path:path}")
        async def options(path: str) -> Response:
            return Response(status_code=200)

        return app

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self, dispatcher: Dispatcher, stop_event: asyncio.Event) -> None:
        config = uvicorn.Config(
            self.create_app(dispatcher),
            host=self.host,
            port=self.port,
            timeout_keep_alive=math.ceil(self.idle_timeout),
            timeout_graceful_shutdown=math.ceil(self.shutdown_timeout),
            log_config=None,
            lifespan="off",
        )
        self._server = _EmbeddedServer(config)

        log.info(
            "Starting HTTP transport",
            port=self.port,
            endpoint=f"http://localhost:{self.port}/mcp",
        )
        self._serve_task = asyncio.create_task(self._server.serve())
        stopped = asyncio.create_task(stop_event.wait())
        try:
            done, _ = await asyncio.wait(
                {self._serve_task, stopped}, return_when=asyncio.FIRST_COMPLETED
            )
            if self._serve_task in done:
                self._serve_task.result()
                log.info("HTTP server exited")
            else:
                log.info("HTTP transport shutting down")
        finally:
            stopped.cancel()
            await self.stop()

    async def stop(self) -> None:
        """Close every session, then shut the listener down within the shutdown timeout."""
        closed = await self.registry.close_all()
        if closed:
            log.info("Closed SSE sessions", count=closed)

        server, serve_task = self._server, self._serve_task
        self._serve_task = None
        if server is None or serve_task is None or serve_task.done():
            return

        server.should_exit = True
        try:
            await asyncio.wait_for(asyncio.shield(serve_task), timeout=self.shutdown_timeout)
        except asyncio.TimeoutError:
            log.warning("Graceful shutdown timed out", timeout=self.shutdown_timeout)
            server.force_exit = True
            await serve_task

    # =========================================================================
    # Sessions
    # =========================================================================

    async def open_session(self, headers: Mapping[str, str]) -> SSESession:
        """
        Open a new session or re-attach to a client-supplied session id.

        Numbering continues from Last-Event-ID + 1 when that header holds an
        integer. The first event is always `connected`.
        """
        session_id = headers.get(HEADER_MCP_SESSION_ID) or new_session_id()
        session = SSESession(session_id, next_event_id(headers.get(HEADER_LAST_EVENT_ID)))
        await self.registry.register(session)

        await session.send_event(
            "connected",
            {
                "sessionId": session_id,
                "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            },
        )
        return session

    async def release_session(self, session: SSESession) -> None:
        """Unregister and close a session whose connection has ended. Idempotent."""
        await self.registry.remove(session)
        await session.close()

    async def _event_stream(self, session: SSESession) -> AsyncGenerator[ServerSentEvent, None]:
        try:
            async for frame in session.stream():
                yield frame
        finally:
            log.info("SSE stream ended", session_id=session.session_id)
            await asyncio.shield(self.release_session(session))

    def stream_response(self, session: SSESession) -> EventSourceResponse:
        """
        Stream a session's events for the lifetime of the connection.

        The session is released when the response finishes, whether or not
        the event generator was ever started.
        """
        return EventSourceResponse(
            self._event_stream(session),
            headers={HEADER_MCP_SESSION_ID: session.session_id},
            ping=self.ping_interval,
            sep=SSE_SEPARATOR,
            send_timeout=self.write_timeout,
            background=BackgroundTask(self.release_session, session),
        )

    # =========================================================================
    # Request handling
    # =========================================================================

    def error_response(
        self, id: Any, code: int, message: str, data: Any = None, status_code: int = 400
    ) -> JSONResponse:
        """Transport-level JSON-RPC error written directly as the HTTP body."""
        return self._json(make_error_response(id, code, message, data), status_code)

    def _json(self, response: JsonRpcResponse, status_code: int = 200) -> JSONResponse:
        return JSONResponse(content=response.model_dump(), status_code=status_code)

    async def handle_post(self, dispatcher: Dispatcher, request: Request) -> Response:
        try:
            body = await asyncio.wait_for(request.body(), timeout=self.read_timeout)
        except (asyncio.TimeoutError, ClientDisconnect) as e:
            log.warning("Could not read request body", error=repr(e))
            return self.error_response(
                UNKNOWN_REQUEST_ID, PARSE_ERROR, "Could not read request body", repr(e)
            )

        rpc_request, error = parse_request(body)
        if error is not None:
            return self._json(error, status_code=400)
        if rpc_request is None or rpc_request.is_notification:
            if rpc_request is not None:
                log.info("Received notification", method=rpc_request.method)
            return Response(status_code=202)

        accept = request.headers.get("accept", "")
        wants_sse = CONTENT_TYPE_SSE in accept
        wants_json = CONTENT_TYPE_JSON in accept
        if not wants_json and not wants_sse:
            return self.error_response(
                rpc_request.id,
                INVALID_REQUEST,
                "Accept header must include application/json and/or text/event-stream",
            )

        if wants_sse:
            session = await self.open_session(request.headers)
            await self.stream_request(dispatcher, session, rpc_request)
            return self.stream_response(session)

        return await self.json_request(dispatcher, rpc_request)

    async def handle_get(self, request: Request) -> Response:
        session = await self.open_session(request.headers)
        log.info("SSE session opened", session_id=session.session_id)
        return self.stream_response(session)

    async def json_request(self, dispatcher: Dispatcher, rpc_request: JsonRpcRequest) -> Response:
        """Dispatch with a direct sender and write its single response."""
        sender = DirectSender()
        try:
            await asyncio.wait_for(
                dispatcher.dispatch(rpc_request, sender), timeout=self.request_timeout
            )
        except asyncio.TimeoutError:
            log.error("Request timed out", method=rpc_request.method, id=rpc_request.id)
            if not sender.sent:
                return self.error_response(rpc_request.id, INTERNAL_ERROR, "Request timed out")
        except Exception as e:
            log.error("Error handling request", method=rpc_request.method, exc_info=True)
            if not sender.sent:
                return self.error_response(rpc_request.id, INTERNAL_ERROR, "Internal error", str(e))

        if sender.response is None:
            return self.error_response(rpc_request.id, INTERNAL_ERROR, "No response generated")
        return self._json(sender.response)

    async def stream_request(
        self, dispatcher: Dispatcher, session: SSESession, rpc_request: JsonRpcRequest
    ) -> None:
        """Dispatch with a streaming sender bound to `session`."""
        sender = StreamingSender(session)
        try:
            await asyncio.wait_for(
                dispatcher.dispatch(rpc_request, sender, session_id=session.session_id),
                timeout=self.request_timeout,
            )
        except asyncio.TimeoutError:
            log.error("Request timed out", method=rpc_request.method, session_id=session.session_id)
            await self._send_stream_error(session, rpc_request.id, "Request timed out")
        except EventEncodeError as e:
            log.error("Could not encode response", session_id=session.session_id, error=str(e))
            await self._send_stream_error(session, rpc_request.id, "Failed to encode response", str(e))
        except MCPError as e:
            log.warning("Could not deliver response", session_id=session.session_id, error=str(e))
        except Exception as e:
            log.error("Error handling SSE request", method=rpc_request.method, exc_info=True)
            await self._send_stream_error(session, rpc_request.id, "Internal error", str(e))

    async def _send_stream_error(
        self, session: SSESession, id: Any, message: str, data: Any = None
    ) -> None:
        try:
            await session.send_error(id, INTERNAL_ERROR, message, data)
        except MCPError as e:
            log.warning("Could not deliver error", session_id=session.session_id, error=str(e))
