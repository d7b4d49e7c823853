"""Capability contracts the embedding application implements.

The dispatcher only talks to these three narrow interfaces. A single class
may implement all of them. Business failures are reported by raising
:class:`teahouse.mcp.errors.HandlerError`.
"""

from abc import ABC, abstractmethod

from teahouse.mcp.models import (
    Prompt,
    PromptGetParams,
    PromptGetResult,
    Resource,
    ResourceReadParams,
    ResourceReadResult,
    ResourceTemplate,
    Tool,
    ToolCallParams,
    ToolCallResult,
)


class ToolHandler(ABC):
    """Executable functions offered to the client."""

    @abstractmethod
    async def list_tools(self) -> list[Tool]:
        """Return every tool with its name, description and input schema."""

    @abstractmethod
    async def call_tool(self, params: ToolCallParams) -> ToolCallResult:
        """Run the named tool with the given arguments."""


class ResourceHandler(ABC):
    """Readable context identified by URI."""

    @abstractmethod
    async def list_resources(self) -> list[Resource]:
        """Return every readable resource."""

    @abstractmethod
    async def read_resource(self, params: ResourceReadParams) -> ResourceReadResult:
        """Return the contents of the resource at `params.uri`."""

    @abstractmethod
    async def list_resource_templates(self) -> list[ResourceTemplate]:
        """Return every parameterized resource template."""


class PromptHandler(ABC):
    """Prompt templates that produce role-tagged messages."""

    @abstractmethod
    async def list_prompts(self) -> list[Prompt]:
        """Return every prompt with its argument schema."""

    @abstractmethod
    async def get_prompt(self, params: PromptGetParams) -> PromptGetResult:
        """Render the named prompt with the given arguments."""
