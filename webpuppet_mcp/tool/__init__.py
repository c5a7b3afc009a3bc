"""Tool system for webpuppet-mcp.

Tools are the operations the server exposes through tools/list and
tools/call. Each tool owns its schema and its authorization checks; the
registry only maps names to tools.
"""

from webpuppet_mcp.tool.base import BaseTool, Tool
from webpuppet_mcp.tool.context import ToolContext
from webpuppet_mcp.tool.registry import ToolRegistry

__all__ = [
    "BaseTool",
    "Tool",
    "ToolContext",
    "ToolRegistry",
]
