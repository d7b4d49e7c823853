"""Transport contract shared by stdio and HTTP."""

import asyncio
from abc import ABC, abstractmethod

from teahouse.mcp.dispatcher import Dispatcher


class Transport(ABC):
    """Moves JSON-RPC messages between clients and a dispatcher."""

    @abstractmethod
    async def start(self, dispatcher: Dispatcher, stop_event: asyncio.Event) -> None:
        """Serve requests until `stop_event` is set or the input ends."""

    @abstractmethod
    async def stop(self) -> None:
        """Release transport resources. Safe to call more than once."""
