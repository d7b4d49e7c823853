"""SSE (Server-Sent Events) sessions and the registry that tracks them."""

import asyncio
import json
import logging
from typing import Any, AsyncGenerator

from sse_starlette import ServerSentEvent

from teahouse.mcp.errors import EventEncodeError, SessionClosedError
from teahouse.mcp.jsonrpc import make_error_response
from teahouse.mcp.models import JsonRpcResponse
from teahouse.mcp.senders import ResponseSender

logger = logging.getLogger(__name__)

# Line separator for SSE frames
SSE_SEPARATOR = "\n"


def frame_event(event_id: int, event_type: str | None, payload: str) -> ServerSentEvent:
    """Build one SSE frame: id line, optional event line, data lines, blank line."""
    return ServerSentEvent(
        data=payload,
        event=event_type or None,
        id=str(event_id),
        sep=SSE_SEPARATOR,
    )


class SSESession:
    """
    An open event stream bound to one HTTP connection.

    Frames are queued in emission order and drained by `stream()`. The
    cursor, the closed flag and the queue are guarded by the session lock.
    """

    def __init__(self, session_id: str, next_event_id: int = 0):
        self.session_id = session_id
        self.event_id = next_event_id
        self._queue: asyncio.Queue[ServerSentEvent | None] = asyncio.Queue()
        self._lock = asyncio.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send_event(self, event_type: str | None, data: Any) -> int:
        """
        Emit one event and return the id it was sent with.

        Raises SessionClosedError once the session is closed and
        EventEncodeError when `data` is not JSON-serializable. Neither
        advances the cursor.

        The cursor counts events handed to the stream queue, not bytes
        written to the socket. If the connection fails while a queued frame
        is being written, that id is still consumed; the client recovers it
        by reconnecting with its Last-Event-ID.
        """
        async with self._lock:
            if self._closed:
                raise SessionClosedError(self.session_id)

            try:
                payload = json.dumps(data)
            except (TypeError, ValueError) as e:
                raise EventEncodeError(f"could not encode event data: {e}") from e

            event_id = self.event_id
            self._queue.put_nowait(frame_event(event_id, event_type, payload))
            self.event_id += 1
            return event_id

    async def send_error(
        self, id: Any, code: int, message: str, data: Any = None
    ) -> int:
        """Emit a JSON-RPC error response as an unnamed event."""
        response = make_error_response(id, code, message, data)
        return await self.send_event(None, response.model_dump())

    async def close(self) -> None:
        """Mark the session closed and wake up its stream."""
        async with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put_nowait(None)

    async def stream(self) -> AsyncGenerator[ServerSentEvent, None]:
        """Yield frames until the session is closed."""
        while True:
            frame = await self._queue.get()
            if frame is None:
                return
            yield frame


class StreamingSender(ResponseSender):
    """Delivers responses as events on an open session without ending it."""

    def __init__(self, session: SSESession):
        self.session = session

    async def send_response(self, response: JsonRpcResponse) -> None:
        await self.session.send_event(None, response.model_dump())


class SessionRegistry:
    """
    Maps session ids to open sessions.

    All access goes through the registry lock. The registry lock is never
    held while a session lock is taken.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, SSESession] = {}
        self._lock = asyncio.Lock()

    async def register(self, session: SSESession) -> SSESession | None:
        """Add a session, returning the session previously bound to its id."""
        async with self._lock:
            previous = self._sessions.get(session.session_id)
            self._sessions[session.session_id] = session
        if previous is not None and previous is not session:
            logger.info(f"Rebound session: {session.session_id}")
            return previous
        logger.info(f"Registered session: {session.session_id}")
        return None

    async def get(self, session_id: str) -> SSESession | None:
        """Get a session by ID."""
        async with self._lock:
            return self._sessions.get(session_id)

    async def remove(self, session: SSESession) -> bool:
        """
        Remove a session if it is still the one bound to its id.

        A session that was rebound by a reconnect leaves the newer binding
        in place.
        """
        async with self._lock:
            if self._sessions.get(session.session_id) is not session:
                return False
            del self._sessions[session.session_id]
        logger.info(f"Removed session: {session.session_id}")
        return True

    async def close_all(self) -> int:
        """Close every registered session and empty the registry."""
        async with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            await session.close()
        if sessions:
            logger.info(f"Closed {len(sessions)} sessions")
        return len(sessions)

    async def session_ids(self) -> list[str]:
        async with self._lock:
            return list(self._sessions)

    @property
    def session_count(self) -> int:
        """Return the number of active sessions."""
        return len(self._sessions)
