"""JSON-RPC 2.0 message decoding and serialization."""

import json
import logging
from typing import Any

from pydantic import ValidationError

from teahouse.mcp.models import JSONRPC_VERSION, JsonRpcError, JsonRpcRequest, JsonRpcResponse
from teahouse.mcp.errors import (
    INVALID_REQUEST,
    PARSE_ERROR,
    UNKNOWN_REQUEST_ID,
    make_error_data,
)

logger = logging.getLogger(__name__)


def make_error_response(
    id: Any, code: int, message: str | None = None, data: Any = None
) -> JsonRpcResponse:
    """Build an error response for the given request id."""
    return JsonRpcResponse(id=id, error=JsonRpcError(**make_error_data(code, message, data)))


def recover_request_id(data: Any) -> Any:
    """
    Best-effort recovery of the `id` of a message that failed to decode.

    Falls back to UNKNOWN_REQUEST_ID when the payload is not an object or
    carries no usable id.
    """
    if isinstance(data, dict):
        request_id = data.get("id")
        if isinstance(request_id, (int, float, str)) and not isinstance(request_id, bool):
            return request_id
    return UNKNOWN_REQUEST_ID


def parse_request(raw_data: str | bytes) -> tuple[JsonRpcRequest | None, JsonRpcResponse | None]:
    """
    Parse a JSON-RPC request from raw data.

    Returns (request, error) tuple. At most one is set; both are None when
    the message is a notification with a bad envelope, which is dropped
    without a response.
    """
    try:
        if isinstance(raw_data, bytes):
            raw_data = raw_data.decode("utf-8")
        data = json.loads(raw_data)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        return None, make_error_response(UNKNOWN_REQUEST_ID, PARSE_ERROR, "Parse error", str(e))

    if not isinstance(data, dict):
        return None, make_error_response(
            UNKNOWN_REQUEST_ID, PARSE_ERROR, "Parse error", "request must be a JSON object"
        )

    try:
        request = JsonRpcRequest.model_validate(data)
    except ValidationError as e:
        return None, make_error_response(
            recover_request_id(data), PARSE_ERROR, "Parse error", str(e)
        )

    if request.jsonrpc != JSONRPC_VERSION:
        if request.is_notification:
            logger.warning(f"Dropping notification with invalid JSON-RPC version: {request.jsonrpc!r}")
            return None, None
        return None, make_error_response(request.id, INVALID_REQUEST, "Invalid JSON-RPC version")

    return request, None


def serialize_response(response: JsonRpcResponse) -> str:
    """Serialize a JSON-RPC response to JSON string."""
    return json.dumps(response.model_dump())
