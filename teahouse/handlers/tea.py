"""Example capability implementation backed by the static tea menu."""

import json
from typing import Any

from teahouse.handlers.menu import (
    CAFFEINE_RECOMMENDATIONS,
    DEFAULT_PAIRING,
    FLAVOR_RECOMMENDATIONS,
    FOOD_PAIRINGS,
    MOOD_RECOMMENDATIONS,
    TEA_MENU,
    TEA_TYPES,
    get_tea,
    teas_by_type,
)
from teahouse.mcp.capabilities import PromptHandler, ResourceHandler, ToolHandler
from teahouse.mcp.errors import HandlerError
from teahouse.mcp.models import (
    InputSchema,
    MessageContent,
    Prompt,
    PromptArgument,
    PromptGetParams,
    PromptGetResult,
    PromptMessage,
    Resource,
    ResourceContents,
    ResourceReadParams,
    ResourceReadResult,
    ResourceTemplate,
    TextContent,
    Tool,
    ToolCallParams,
    ToolCallResult,
)

TOOL_GET_TEA_NAMES = "getTeaNames"
TOOL_GET_TEA_INFO = "getTeaInfo"
TOOL_GET_TEAS_BY_TYPE = "getTeasByType"

MENU_URI = "menu://tea"


def _text_result(text: str) -> ToolCallResult:
    return ToolCallResult(content=[TextContent(text=text)])


def _string_argument(arguments: dict[str, Any], key: str) -> str:
    if key not in arguments:
        raise HandlerError(f"{key} parameter is required")
    value = arguments[key]
    if not isinstance(value, str):
        raise HandlerError(f"{key} parameter must be a string")
    return value


def _prompt_result(text: str) -> PromptGetResult:
    return PromptGetResult(
        messages=[PromptMessage(role="user", content=MessageContent(text=text))]
    )


class TeaHandler(ToolHandler, ResourceHandler, PromptHandler):
    """Serves tools, resources and prompts about a small tea collection."""

    # -------------------------------------------------------------------------
    # Tools
    # -------------------------------------------------------------------------

    async def list_tools(self) -> list[Tool]:
        return [
            Tool(
                name=TOOL_GET_TEA_NAMES,
                description="Get a list of all available tea names in our collection",
                inputSchema=InputSchema(properties={}),
            ),
            Tool(
                name=TOOL_GET_TEA_INFO,
                description="Get detailed information about a specific tea including brewing instructions",
                inputSchema=InputSchema(
                    properties={
                        "name": {
                            "type": "string",
                            "description": "The name of the tea (e.g., 'dragonwell', 'earl-grey')",
                        },
                    },
                    required=["name"],
                ),
            ),
            Tool(
                name=TOOL_GET_TEAS_BY_TYPE,
                description="Get all teas of a specific type (" + ", ".join(TEA_TYPES) + ")",
                inputSchema=InputSchema(
                    properties={
                        "type": {
                            "type": "string",
                            "description": "The tea type (e.g., 'Green Tea', 'Black Tea', 'Oolong Tea', 'White Tea')",
                        },
                    },
                    required=["type"],
                ),
            ),
        ]

    async def call_tool(self, params: ToolCallParams) -> ToolCallResult:
        if params.name == TOOL_GET_TEA_NAMES:
            return _text_result(json.dumps(sorted(TEA_MENU)))

        if params.name == TOOL_GET_TEA_INFO:
            name = _string_argument(params.arguments, "name")
            tea = get_tea(name)
            if tea is None:
                return _text_result(f"Tea '{name}' not found in our collection")
            return _text_result(tea.model_dump_json())

        if params.name == TOOL_GET_TEAS_BY_TYPE:
            tea_type = _string_argument(params.arguments, "type")
            matching = teas_by_type(tea_type)
            if not matching:
                return _text_result(f"No teas found of type '{tea_type}'")
            return _text_result(json.dumps([tea.model_dump() for tea in matching]))

        raise HandlerError(f"unknown tool: {params.name}")

    # -------------------------------------------------------------------------
    # Resources
    # -------------------------------------------------------------------------

    async def list_resources(self) -> list[Resource]:
        return [Resource(uri=MENU_URI, name="Tea Menu", mimeType="application/json")]

    async def read_resource(self, params: ResourceReadParams) -> ResourceReadResult:
        if params.uri != MENU_URI:
            raise HandlerError(f"unknown resource URI: {params.uri}")

        menu = {key: tea.model_dump() for key, tea in TEA_MENU.items()}
        return ResourceReadResult(
            contents=[
                ResourceContents(
                    uri=params.uri,
                    text=json.dumps(menu, indent=2),
                    mimeType="application/json",
                )
            ]
        )

    async def list_resource_templates(self) -> list[ResourceTemplate]:
        return []

    # -------------------------------------------------------------------------
    # Prompts
    # -------------------------------------------------------------------------

    async def list_prompts(self) -> list[Prompt]:
        return [
            Prompt(
                name="tea_recommendation",
                description="Get personalized tea recommendations based on preferences",
                arguments=[
                    PromptArgument(
                        name="mood",
                        description="Current mood or desired effect (e.g., 'energizing', 'relaxing', 'focus')",
                    ),
                    PromptArgument(
                        name="caffeine_preference",
                        description="Caffeine level preference (e.g., 'high', 'medium', 'low', 'none')",
                    ),
                    PromptArgument(
                        name="flavor_profile",
                        description="Preferred flavor profile (e.g., 'floral', 'robust', 'delicate', 'complex')",
                    ),
                ],
            ),
            Prompt(
                name="brewing_guide",
                description="Get detailed brewing instructions for a specific tea",
                arguments=[
                    PromptArgument(
                        name="tea_name",
                        description="Name of the tea to get brewing instructions for",
                        required=True,
                    ),
                ],
            ),
            Prompt(
                name="tea_pairing",
                description="Get food pairing suggestions for a specific tea",
                arguments=[
                    PromptArgument(
                        name="tea_name",
                        description="Name of the tea to get pairing suggestions for",
                        required=True,
                    ),
                ],
            ),
        ]

    async def get_prompt(self, params: PromptGetParams) -> PromptGetResult:
        # Only string arguments are meaningful to these prompts
        arguments = {k: v for k, v in params.arguments.items() if isinstance(v, str)}

        if params.name == "tea_recommendation":
            return self._tea_recommendation(arguments)
        if params.name == "brewing_guide":
            return self._brewing_guide(arguments)
        if params.name == "tea_pairing":
            return self._tea_pairing(arguments)
        raise HandlerError(f"unknown prompt: {params.name}")

    def _tea_recommendation(self, arguments: dict[str, str]) -> PromptGetResult:
        text = "Based on our tea collection, here are some recommendations:\n\n"

        mood = arguments.get("mood")
        if mood:
            text += f"For a {mood} mood:\n{MOOD_RECOMMENDATIONS.get(mood, '')}\n"

        caffeine = arguments.get("caffeine_preference")
        if caffeine:
            text += (
                f"For {caffeine} caffeine preference:\n"
                f"{CAFFEINE_RECOMMENDATIONS.get(caffeine, '')}\n"
            )

        flavor = arguments.get("flavor_profile")
        if flavor:
            text += f"For {flavor} flavor profile:\n{FLAVOR_RECOMMENDATIONS.get(flavor, '')}"

        return _prompt_result(text)

    def _require_tea(self, arguments: dict[str, str], purpose: str):
        tea_name = arguments.get("tea_name")
        if not tea_name:
            raise HandlerError(f"tea_name is required for {purpose}")
        tea = get_tea(tea_name)
        if tea is None:
            raise HandlerError(f"tea '{tea_name}' not found in our collection")
        return tea

    def _brewing_guide(self, arguments: dict[str, str]) -> PromptGetResult:
        tea = self._require_tea(arguments, "brewing guide")
        text = (
            f"# Brewing Guide for {tea.name}\n\n"
            "## Tea Information\n"
            f"- **Type**: {tea.type}\n"
            f"- **Origin**: {tea.origin}\n"
            f"- **Caffeine Level**: {tea.caffeine}\n\n"
            "## Brewing Instructions\n"
            f"- **Water Temperature**: {tea.temperature}°F\n"
            f"- **Steeping Time**: {tea.steepTime}\n"
            f"- **Flavor Profile**: {tea.flavor}\n\n"
            "## Tips\n"
            f"{tea.description}\n\n"
            f"Enjoy your perfectly brewed {tea.name}!"
        )
        return _prompt_result(text)

    def _tea_pairing(self, arguments: dict[str, str]) -> PromptGetResult:
        tea = self._require_tea(arguments, "pairing suggestions")
        pairings = FOOD_PAIRINGS.get(tea.type, DEFAULT_PAIRING)
        text = (
            f"# Food Pairings for {tea.name}\n\n"
            "## Tea Profile\n"
            f"- **Type**: {tea.type}\n"
            f"- **Flavor**: {tea.flavor}\n"
            f"- **Origin**: {tea.origin}\n\n"
            "## Recommended Pairings\n"
            f"{pairings}\n\n"
            "## Why These Pairings Work\n"
            f"The {tea.flavor} characteristics of {tea.name} complement these foods "
            "perfectly, creating a harmonious tasting experience.\n\n"
            f"Price: ${tea.price:.2f}"
        )
        return _prompt_result(text)
