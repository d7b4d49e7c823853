"""Per-method extraction of typed parameters from decoded `params` values."""

from typing import Any

from teahouse.mcp.errors import InvalidParamsError
from teahouse.mcp.models import (
    Params,
    PromptGetParams,
    ResourceReadParams,
    ToolCallParams,
)


def _require_object(params: Params) -> dict[str, Any]:
    if params is None:
        raise InvalidParamsError("params cannot be null")
    if not isinstance(params, dict):
        raise InvalidParamsError("params must be an object")
    return params


def _require_string(params: dict[str, Any], key: str) -> str:
    value = params.get(key)
    if not isinstance(value, str):
        raise InvalidParamsError(f"{key} parameter is required and must be a string")
    return value


def _optional_arguments(params: dict[str, Any]) -> dict[str, Any]:
    # Non-object arguments are ignored rather than rejected
    arguments = params.get("arguments")
    if isinstance(arguments, dict):
        return arguments
    return {}


def extract_tool_call_params(params: Params) -> ToolCallParams:
    """Extract `name` and `arguments` for tools/call."""
    obj = _require_object(params)
    return ToolCallParams(
        name=_require_string(obj, "name"),
        arguments=_optional_arguments(obj),
    )


def extract_resource_read_params(params: Params) -> ResourceReadParams:
    """Extract `uri` for resources/read."""
    obj = _require_object(params)
    return ResourceReadParams(uri=_require_string(obj, "uri"))


def extract_prompt_get_params(params: Params) -> PromptGetParams:
    """Extract `name` and `arguments` for prompts/get."""
    obj = _require_object(params)
    return PromptGetParams(
        name=_require_string(obj, "name"),
        arguments=_optional_arguments(obj),
    )
