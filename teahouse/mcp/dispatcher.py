"""Routes decoded JSON-RPC requests to capability handlers."""

import logging
from typing import Any, Awaitable, Callable

from teahouse.mcp.capabilities import PromptHandler, ResourceHandler, ToolHandler
from teahouse.mcp.errors import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    InvalidParamsError,
)
from teahouse.mcp.models import (
    PROTOCOL_VERSION,
    Capabilities,
    InitializeParams,
    InitializeResult,
    JsonRpcRequest,
    JsonRpcResponse,
    PromptsListResult,
    ResourcesListResult,
    ResourceTemplatesListResult,
    ServerInfo,
    ToolsListResult,
)
from teahouse.mcp.params import (
    extract_prompt_get_params,
    extract_resource_read_params,
    extract_tool_call_params,
)
from teahouse.mcp.senders import ResponseSender

logger = logging.getLogger(__name__)

MethodHandler = Callable[[JsonRpcRequest, ResponseSender], Awaitable[None]]


class Dispatcher:
    """
    Routes requests by method name and sends exactly one outcome per request.

    Every handled request ends in one call on the given sender: a result or
    an error. Notifications (requests without id) are logged and dropped.
    Exceptions raised by the sender itself propagate to the transport.
    """

    def __init__(
        self,
        tools: ToolHandler,
        resources: ResourceHandler,
        prompts: PromptHandler,
        server_info: ServerInfo,
    ):
        if tools is None:
            raise ValueError("tool handler cannot be None")
        if resources is None:
            raise ValueError("resource handler cannot be None")
        if prompts is None:
            raise ValueError("prompt handler cannot be None")

        self.tools = tools
        self.resources = resources
        self.prompts = prompts
        self.server_info = server_info
        self._routes: dict[str, MethodHandler] = {
            "initialize": self.handle_initialize,
            "tools/list": self.handle_tools_list,
            "tools/call": self.handle_tools_call,
            "resources/list": self.handle_resources_list,
            "resources/read": self.handle_resources_read,
            "resources/templates/list": self.handle_resource_templates_list,
            "prompts/list": self.handle_prompts_list,
            "prompts/get": self.handle_prompts_get,
            "ping": self.handle_ping,
        }

    @property
    def methods(self) -> list[str]:
        return list(self._routes)

    async def initialize(self) -> InitializeResult:
        """Build the initialize handshake payload."""
        return InitializeResult(
            protocolVersion=PROTOCOL_VERSION,
            capabilities=Capabilities(),
            serverInfo=self.server_info,
        )

    async def dispatch(
        self,
        request: JsonRpcRequest,
        sender: ResponseSender,
        session_id: str | None = None,
    ) -> None:
        """Dispatch a request and deliver its outcome through `sender`."""
        if sender is None:
            raise RuntimeError("missing response sender")

        if request.is_notification:
            logger.info(f"Received notification: {request.method}")
            return

        logger.debug(
            f"Handling request method={request.method} id={request.id} session={session_id}"
        )
        handler = self._routes.get(request.method)
        if handler is None:
            logger.warning(f"Unknown method requested: {request.method} (id={request.id})")
            await sender.send_error(
                request.id, METHOD_NOT_FOUND, f"Method {request.method} not found"
            )
            return

        await handler(request, sender)

    async def _send_result(self, sender: ResponseSender, id: Any, result: Any) -> None:
        await sender.send_response(JsonRpcResponse(id=id, result=result))

    # -------------------------------------------------------------------------
    # Built-in methods
    # -------------------------------------------------------------------------

    async def handle_initialize(self, request: JsonRpcRequest, sender: ResponseSender) -> None:
        if isinstance(request.params, dict):
            try:
                client = InitializeParams(**request.params)
                logger.info(
                    f"Initialize from client {client.clientInfo.name} "
                    f"{client.clientInfo.version} (protocol {client.protocolVersion})"
                )
            except Exception as e:
                # Client params are informational only
                logger.warning(f"Invalid initialize params: {e}")

        try:
            result = await self.initialize()
        except Exception as e:
            logger.exception(f"Failed to initialize server (id={request.id})")
            await sender.send_error(request.id, INTERNAL_ERROR, "Failed to initialize", str(e))
            return

        logger.info(f"Server initialized successfully (id={request.id})")
        await self._send_result(sender, request.id, result.model_dump(exclude_none=True))

    async def handle_ping(self, request: JsonRpcRequest, sender: ResponseSender) -> None:
        await self._send_result(sender, request.id, {})

    # -------------------------------------------------------------------------
    # Tools
    # -------------------------------------------------------------------------

    async def handle_tools_list(self, request: JsonRpcRequest, sender: ResponseSender) -> None:
        try:
            tools = await self.tools.list_tools()
            result = ToolsListResult(tools=tools)
        except Exception as e:
            logger.error(f"Failed to list tools (id={request.id}): {e}")
            await sender.send_error(request.id, INTERNAL_ERROR, "Failed to list tools", str(e))
            return

        logger.debug(f"Listed {len(result.tools)} tools (id={request.id})")
        await self._send_result(sender, request.id, result.model_dump(exclude_none=True))

    async def handle_tools_call(self, request: JsonRpcRequest, sender: ResponseSender) -> None:
        try:
            params = extract_tool_call_params(request.params)
        except InvalidParamsError as e:
            logger.warning(f"Invalid tools/call params (id={request.id}): {e}")
            await sender.send_error(
                request.id, INVALID_PARAMS, "Invalid tool call parameters", str(e)
            )
            return

        logger.info(f"Calling tool: {params.name}")
        try:
            result = await self.tools.call_tool(params)
        except Exception as e:
            logger.error(f"Tool call failed: {params.name}: {e}")
            await sender.send_error(request.id, INVALID_PARAMS, f"Tool call failed: {e}")
            return

        await self._send_result(sender, request.id, result.model_dump(exclude_none=True))

    # -------------------------------------------------------------------------
    # Resources
    # -------------------------------------------------------------------------

    async def handle_resources_list(self, request: JsonRpcRequest, sender: ResponseSender) -> None:
        try:
            resources = await self.resources.list_resources()
            result = ResourcesListResult(resources=resources)
        except Exception as e:
            logger.error(f"Failed to list resources (id={request.id}): {e}")
            await sender.send_error(request.id, INTERNAL_ERROR, "Failed to list resources", str(e))
            return

        await self._send_result(sender, request.id, result.model_dump(exclude_none=True))

    async def handle_resources_read(self, request: JsonRpcRequest, sender: ResponseSender) -> None:
        try:
            params = extract_resource_read_params(request.params)
        except InvalidParamsError as e:
            logger.warning(f"Invalid resources/read params (id={request.id}): {e}")
            await sender.send_error(
                request.id, INVALID_PARAMS, "Invalid resource read parameters", str(e)
            )
            return

        try:
            result = await self.resources.read_resource(params)
        except Exception as e:
            logger.error(f"Resource read failed: {params.uri}: {e}")
            await sender.send_error(request.id, INVALID_PARAMS, f"Resource read failed: {e}")
            return

        await self._send_result(sender, request.id, result.model_dump(exclude_none=True))

    async def handle_resource_templates_list(
        self, request: JsonRpcRequest, sender: ResponseSender
    ) -> None:
        try:
            templates = await self.resources.list_resource_templates()
            result = ResourceTemplatesListResult(resourceTemplates=templates)
        except Exception as e:
            logger.error(f"Failed to list resource templates (id={request.id}): {e}")
            await sender.send_error(
                request.id, INTERNAL_ERROR, "Failed to list resource templates", str(e)
            )
            return

        logger.debug(f"Listed {len(result.resourceTemplates)} resource templates (id={request.id})")
        await self._send_result(sender, request.id, result.model_dump(exclude_none=True))

    # -------------------------------------------------------------------------
    # Prompts
    # -------------------------------------------------------------------------

    async def handle_prompts_list(self, request: JsonRpcRequest, sender: ResponseSender) -> None:
        try:
            prompts = await self.prompts.list_prompts()
            result = PromptsListResult(prompts=prompts)
        except Exception as e:
            logger.error(f"Failed to list prompts (id={request.id}): {e}")
            await sender.send_error(request.id, INTERNAL_ERROR, "Failed to list prompts", str(e))
            return

        await self._send_result(sender, request.id, result.model_dump(exclude_none=True))

    async def handle_prompts_get(self, request: JsonRpcRequest, sender: ResponseSender) -> None:
        try:
            params = extract_prompt_get_params(request.params)
        except InvalidParamsError as e:
            logger.warning(f"Invalid prompts/get params (id={request.id}): {e}")
            await sender.send_error(request.id, INVALID_PARAMS, "Invalid prompt parameters", str(e))
            return

        try:
            result = await self.prompts.get_prompt(params)
        except Exception as e:
            logger.error(f"Prompt call failed: {params.name}: {e}")
            await sender.send_error(request.id, INVALID_PARAMS, f"Prompt call failed: {e}")
            return

        await self._send_result(sender, request.id, result.model_dump(exclude_none=True))
