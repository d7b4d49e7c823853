"""Pydantic models for MCP JSON-RPC 2.0 protocol."""

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

# JSON-RPC version every request must carry
JSONRPC_VERSION = "2.0"

# MCP protocol version we advertise during initialize
PROTOCOL_VERSION = "2025-03-26"

# Decoded `params` value: object, array, scalar or null
Params = dict[str, Any] | list[Any] | str | int | float | bool | None


# =============================================================================
# JSON-RPC 2.0 Base Models
# =============================================================================


class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request object.

    The version tag is not defaulted: a message without it decodes fine
    and is rejected afterwards as an invalid request.
    """

    jsonrpc: str = ""
    id: int | float | str | None = None  # None for notifications
    method: str
    params: Params = None

    @property
    def is_notification(self) -> bool:
        return self.id is None


class JsonRpcError(BaseModel):
    """JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """JSON-RPC 2.0 response object."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: int | float | str | None = None
    result: Any = None
    error: JsonRpcError | None = None

    @model_validator(mode="after")
    def _result_xor_error(self) -> "JsonRpcResponse":
        if self.error is not None and self.result is not None:
            raise ValueError("result and error are mutually exclusive")
        return self

    def model_dump(self, **kwargs: Any) -> dict[str, Any]:
        """Custom serialization: exactly one of result/error is emitted."""
        data: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            data["error"] = self.error.model_dump(exclude_none=True)
        else:
            data["result"] = self.result
        return data


# =============================================================================
# MCP Content Types
# =============================================================================


class TextContent(BaseModel):
    """Text content returned by tools."""

    type: Literal["text"] = "text"
    text: str


class ImageContent(BaseModel):
    """Image content returned by tools (base64 encoded)."""

    type: Literal["image"] = "image"
    data: str  # base64 encoded
    mimeType: str


class ResourceReference(BaseModel):
    """Reference to an MCP resource inside tool output."""

    uri: str
    type: str | None = None


class EmbeddedResourceContent(BaseModel):
    """Tool content that points at a resource."""

    type: Literal["resource"] = "resource"
    resource: ResourceReference


Content = TextContent | ImageContent | EmbeddedResourceContent


# =============================================================================
# MCP Tool Models
# =============================================================================


class InputSchema(BaseModel):
    """JSON Schema describing tool input."""

    type: str = "object"
    properties: dict[str, Any] | None = None
    required: list[str] | None = None


class Tool(BaseModel):
    """MCP tool definition."""

    name: str = Field(..., description="Tool name")
    description: str = Field(..., description="Human-readable description")
    inputSchema: InputSchema = Field(
        default_factory=InputSchema, description="JSON Schema for tool input"
    )


class ToolCallParams(BaseModel):
    """Parameters for tools/call request."""

    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class ToolCallResult(BaseModel):
    """Result of a tool call."""

    content: list[TextContent | ImageContent | EmbeddedResourceContent]
    isError: bool = False


class ToolsListResult(BaseModel):
    """Result of tools/list request."""

    tools: list[Tool]


# =============================================================================
# MCP Resource Models
# =============================================================================


class Resource(BaseModel):
    """A readable piece of context identified by URI."""

    uri: str
    name: str
    description: str | None = None
    mimeType: str | None = None


class ResourceContents(BaseModel):
    """Content of one resource."""

    uri: str
    text: str
    mimeType: str | None = None


class ResourceReadParams(BaseModel):
    """Parameters for resources/read request."""

    uri: str


class ResourceReadResult(BaseModel):
    """Result of resources/read request."""

    contents: list[ResourceContents]


class ResourceTemplate(BaseModel):
    """A parameterized resource described by a URI template."""

    uriTemplate: str
    name: str
    description: str | None = None
    mimeType: str | None = None


class ResourcesListResult(BaseModel):
    """Result of resources/list request."""

    resources: list[Resource]


class ResourceTemplatesListResult(BaseModel):
    """Result of resources/templates/list request."""

    resourceTemplates: list[ResourceTemplate]


# =============================================================================
# MCP Prompt Models
# =============================================================================


class PromptArgument(BaseModel):
    """A parameter a prompt accepts."""

    name: str
    description: str
    required: bool = False


class Prompt(BaseModel):
    """A prompt template."""

    name: str
    description: str
    arguments: list[PromptArgument] = Field(default_factory=list)


class PromptGetParams(BaseModel):
    """Parameters for prompts/get request."""

    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class MessageContent(BaseModel):
    """Content of a prompt message."""

    type: Literal["text"] = "text"
    text: str


class PromptMessage(BaseModel):
    """One role-tagged message of a generated prompt."""

    role: Literal["user", "assistant", "system"]
    content: MessageContent


class PromptGetResult(BaseModel):
    """Result of prompts/get request."""

    messages: list[PromptMessage]


class PromptsListResult(BaseModel):
    """Result of prompts/list request."""

    prompts: list[Prompt]


# =============================================================================
# MCP Protocol Models
# =============================================================================


class ClientInfo(BaseModel):
    """Client information sent during initialization."""

    name: str
    version: str


class ServerInfo(BaseModel):
    """Server information returned during initialization."""

    name: str
    version: str


class Capabilities(BaseModel):
    """Server capabilities."""

    tools: dict[str, Any] = Field(default_factory=lambda: {"listChanged": True})
    resources: dict[str, Any] = Field(
        default_factory=lambda: {"listChanged": True, "templates": True}
    )
    prompts: dict[str, Any] = Field(default_factory=lambda: {"listChanged": True})
    elicitation: dict[str, Any] = Field(default_factory=dict)


class InitializeParams(BaseModel):
    """Parameters for initialize request."""

    protocolVersion: str
    capabilities: dict[str, Any] = Field(default_factory=dict)
    clientInfo: ClientInfo


class InitializeResult(BaseModel):
    """Result of initialize request."""

    protocolVersion: str
    capabilities: Capabilities
    serverInfo: ServerInfo
