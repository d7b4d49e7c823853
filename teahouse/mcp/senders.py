"""Response senders: how a dispatched result leaves the process."""

import asyncio
from abc import ABC, abstractmethod
from typing import Any

from teahouse.mcp.errors import ResponseAlreadySentError
from teahouse.mcp.jsonrpc import make_error_response
from teahouse.mcp.models import JsonRpcResponse


class ResponseSender(ABC):
    """Delivers JSON-RPC responses for one transport."""

    @abstractmethod
    async def send_response(self, response: JsonRpcResponse) -> None:
        """Deliver a complete response."""

    async def send_error(
        self, id: Any, code: int, message: str, data: Any = None
    ) -> None:
        """Deliver an error response for request `id`."""
        await self.send_response(make_error_response(id, code, message, data))


class DirectSender(ResponseSender):
    """
    Holds exactly one response for a single request/response exchange.

    The owning transport writes `response` once dispatch returns. A second
    send raises ResponseAlreadySentError instead of overwriting the first.
    """

    def __init__(self) -> None:
        self.response: JsonRpcResponse | None = None
        self._lock = asyncio.Lock()

    @property
    def sent(self) -> bool:
        return self.response is not None

    async def send_response(self, response: JsonRpcResponse) -> None:
        async with self._lock:
            if self.response is not None:
                raise ResponseAlreadySentError("response already sent")
            self.response = response
