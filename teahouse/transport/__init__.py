"""Transports that carry JSON-RPC messages to and from the dispatcher."""

from teahouse.transport.base import Transport
from teahouse.transport.http import HTTPTransport
from teahouse.transport.stdio import StdioTransport

__all__ = ["Transport", "HTTPTransport", "StdioTransport"]
