"""Tests for SSE sessions and the session registry."""

import asyncio
import json

import pytest

from teahouse.mcp.errors import (
    INTERNAL_ERROR,
    EventEncodeError,
    SessionClosedError,
)
from teahouse.mcp.models import JsonRpcResponse
from teahouse.transport.sessions import (
    SessionRegistry,
    SSESession,
    StreamingSender,
    frame_event,
)


async def drain(session: SSESession) -> list:
    """Collect queued frames of a session that has been closed."""
    return [frame async for frame in session.stream()]


class TestFrameEvent:
    """SSE frame encoding."""

    def test_named_event(self):
        frame = frame_event(3, "connected", '{"a": 1}')
        assert frame.encode() == b'id: 3\nevent: connected\ndata: {"a": 1}\n\n'

    def test_unnamed_event(self):
        frame = frame_event(0, None, "{}")
        assert frame.encode() == b"id: 0\ndata: {}\n\n"


class TestSSESession:
    """Event numbering and lifecycle of one session."""

    @pytest.mark.asyncio
    async def test_event_ids_are_consecutive(self):
        session = SSESession("s1")
        ids = [await session.send_event("tick", {"n": n}) for n in range(3)]
        assert ids == [0, 1, 2]
        assert session.event_id == 3

        await session.close()
        frames = await drain(session)
        assert [f.id for f in frames] == ["0", "1", "2"]
        assert [json.loads(f.data)["n"] for f in frames] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_numbering_resumes_from_given_cursor(self):
        session = SSESession("s1", next_event_id=42)
        assert await session.send_event("connected", {}) == 42
        assert await session.send_event(None, {}) == 43

    @pytest.mark.asyncio
    async def test_send_after_close_fails_without_advancing(self):
        session = SSESession("s1")
        await session.close()
        assert session.closed

        with pytest.raises(SessionClosedError):
            await session.send_event("tick", {})
        assert session.event_id == 0

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        session = SSESession("s1")
        await session.close()
        await session.close()
        assert await drain(session) == []

    @pytest.mark.asyncio
    async def test_unencodable_payload_does_not_advance(self):
        session = SSESession("s1")
        with pytest.raises(EventEncodeError):
            await session.send_event("tick", {"bad": object()})
        assert session.event_id == 0
        assert await session.send_event("tick", {}) == 0

    @pytest.mark.asyncio
    async def test_send_error(self):
        session = SSESession("s1")
        await session.send_error(7, INTERNAL_ERROR, "Request timed out")
        await session.close()

        frames = await drain(session)
        assert frames[0].event is None
        assert json.loads(frames[0].data) == {
            "jsonrpc": "2.0",
            "id": 7,
            "error": {"code": INTERNAL_ERROR, "message": "Request timed out"},
        }

    @pytest.mark.asyncio
    async def test_concurrent_senders_get_unique_ids(self):
        session = SSESession("s1")
        ids = await asyncio.gather(*(session.send_event(None, {"n": n}) for n in range(20)))
        assert sorted(ids) == list(range(20))


class TestStreamingSender:
    """Responses delivered as events on a session."""

    @pytest.mark.asyncio
    async def test_response_is_unnamed_event(self):
        session = SSESession("s1")
        sender = StreamingSender(session)
        await sender.send_response(JsonRpcResponse(id=1, result={"ok": True}))
        await sender.send_response(JsonRpcResponse(id=2, result={}))
        assert not session.closed

        await session.close()
        frames = await drain(session)
        assert [json.loads(f.data)["id"] for f in frames] == [1, 2]
        assert all(f.event is None for f in frames)

    @pytest.mark.asyncio
    async def test_closed_session_raises(self):
        session = SSESession("s1")
        await session.close()
        with pytest.raises(SessionClosedError):
            await StreamingSender(session).send_response(JsonRpcResponse(id=1, result={}))


class TestSessionRegistry:
    """Registration, lookup and shutdown."""

    @pytest.mark.asyncio
    async def test_register_and_get(self):
        registry = SessionRegistry()
        session = SSESession("s1")
        assert await registry.register(session) is None
        assert await registry.get("s1") is session
        assert await registry.get("missing") is None
        assert registry.session_count == 1

    @pytest.mark.asyncio
    async def test_rebind_keeps_newest(self):
        registry = SessionRegistry()
        old, new = SSESession("s1"), SSESession("s1", next_event_id=5)
        await registry.register(old)
        assert await registry.register(new) is old
        assert await registry.get("s1") is new
        assert not old.closed

        # The stale session ending must not drop the new binding
        assert await registry.remove(old) is False
        assert await registry.get("s1") is new
        assert await registry.remove(new) is True
        assert registry.session_count == 0

    @pytest.mark.asyncio
    async def test_close_all(self):
        registry = SessionRegistry()
        sessions = [SSESession(f"s{i}") for i in range(3)]
        for session in sessions:
            await registry.register(session)

        assert await registry.close_all() == 3
        assert all(s.closed for s in sessions)
        assert await registry.session_ids() == []
        assert await registry.close_all() == 0
