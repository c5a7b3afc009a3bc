"""Tool registry: a name-keyed table of tools plus one shared context.

The registry is a pure dispatch table. It performs no authorization of its
own; each tool consults the permission gate in the context.

Example:
    registry = ToolRegistry(context)
    registry.register(EchoTool())

    definitions = registry.list_tools()
    result = await registry.execute("echo", {"text": "hello"})
"""

from __future__ import annotations

import logging
from typing import Any

from webpuppet_mcp.core.errors import ToolNotFoundError
from webpuppet_mcp.core.types import ToolCallResult, ToolDefinition
from webpuppet_mcp.tool.base import Tool
from webpuppet_mcp.tool.context import ToolContext

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Registry of available tools.

    Tools are kept in registration order, so list_tools() is stable for the
    life of the registry. Re-registering a name replaces the earlier tool in
    place (last write wins) and logs a warning.
    """

    def __init__(self, context: ToolContext) -> None:
        self._context = context
        self._tools: dict[str, Tool] = {}

    @property
    def context(self) -> ToolContext:
        return self._context

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def register(self, tool: Tool) -> None:
        """Register a tool under the name in its definition."""
        name = tool.definition().name
        if name in self._tools:
            logger.warning("Tool '%s' is already registered; replacing it", name)
        self._tools[name] = tool

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def list_tools(self) -> list[ToolDefinition]:
        return [tool.definition() for tool in self._tools.values()]

    async def execute(self, name: str, arguments: dict[str, Any] | None = None) -> ToolCallResult:
        """Look up a tool and run it with the shared context.

        Raises:
            ToolNotFoundError: If no tool is registered under name.
        """
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name)

        logger.debug("Executing tool %s", name)
        return await tool.execute(arguments or {}, self._context)
