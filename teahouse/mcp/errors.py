"""JSON-RPC 2.0 error codes, error response helpers and exceptions."""

from typing import Any

# Standard JSON-RPC 2.0 error codes
PARSE_ERROR = -32700  # Invalid JSON was received
INVALID_REQUEST = -32600  # The JSON sent is not a valid Request object
METHOD_NOT_FOUND = -32601  # The method does not exist / is not available
INVALID_PARAMS = -32602  # Invalid method parameter(s)
INTERNAL_ERROR = -32603  # Internal JSON-RPC error

# Id used when a failed message has no recoverable id
UNKNOWN_REQUEST_ID = -1


def error_message(code: int) -> str:
    """Get the standard message for a JSON-RPC error code."""
    messages = {
        PARSE_ERROR: "Parse error",
        INVALID_REQUEST: "Invalid Request",
        METHOD_NOT_FOUND: "Method not found",
        INVALID_PARAMS: "Invalid params",
        INTERNAL_ERROR: "Internal error",
    }
    return messages.get(code, "Unknown error")


def make_error_data(code: int, message: str | None = None, data: Any = None) -> dict[str, Any]:
    """Create an error object for JSON-RPC response."""
    error: dict[str, Any] = {
        "code": code,
        "message": message or error_message(code),
    }
    if data is not None:
        error["data"] = data
    return error


class MCPError(Exception):
    """Base class for protocol and delivery errors."""


class InvalidParamsError(MCPError):
    """Method parameters are missing or have the wrong shape."""


class HandlerError(MCPError):
    """Business-level failure reported by a capability implementation."""


class ResponseAlreadySentError(MCPError):
    """A direct sender was asked to send a second response."""


class SessionClosedError(MCPError):
    """An event was sent on a session whose stream is gone."""

    def __init__(self, session_id: str):
        super().__init__(f"session {session_id} is closed")
        self.session_id = session_id


class EventEncodeError(MCPError):
    """An event payload could not be serialized."""
