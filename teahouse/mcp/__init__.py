"""MCP (Model Context Protocol) implementation with JSON-RPC 2.0."""

from teahouse.mcp.models import (
    JsonRpcRequest,
    JsonRpcResponse,
    JsonRpcError,
    Tool,
    TextContent,
    ToolCallResult,
)
from teahouse.mcp.dispatcher import Dispatcher
from teahouse.mcp.senders import ResponseSender, DirectSender
from teahouse.mcp.errors import (
    PARSE_ERROR,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    INVALID_PARAMS,
    INTERNAL_ERROR,
)

__all__ = [
    "JsonRpcRequest",
    "JsonRpcResponse",
    "JsonRpcError",
    "Tool",
    "TextContent",
    "ToolCallResult",
    "Dispatcher",
    "ResponseSender",
    "DirectSender",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
]
