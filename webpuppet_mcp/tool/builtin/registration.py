"""Registration helpers for built-in tools."""

from __future__ import annotations

from webpuppet_mcp.tool.builtin.browsers import DetectBrowsersTool
from webpuppet_mcp.tool.builtin.intervention import (
    InterventionCompleteTool,
    InterventionStatusTool,
    PauseTool,
    ResumeTool,
)
from webpuppet_mcp.tool.builtin.navigation import BrowserStatusTool, NavigateTool
from webpuppet_mcp.tool.builtin.permission import CheckPermissionTool
from webpuppet_mcp.tool.builtin.prompt import PromptTool
from webpuppet_mcp.tool.builtin.providers import ListProvidersTool, ProviderCapabilitiesTool
from webpuppet_mcp.tool.builtin.screenshot import ScreenshotTool
from webpuppet_mcp.tool.context import ToolContext
from webpuppet_mcp.tool.registry import ToolRegistry


def register_builtin_tools(registry: ToolRegistry) -> None:
    """Register all built-in tools with the registry.

    Args:
        registry: The ToolRegistry to register tools with

    Example:
        registry = ToolRegistry(ToolContext(guard_for_policy("secure")))
        register_builtin_tools(registry)
    """
    # Prompting and providers
    registry.register(PromptTool())
    registry.register(ListProvidersTool())
    registry.register(ProviderCapabilitiesTool())
    registry.register(DetectBrowsersTool())

    # Page access
    registry.register(ScreenshotTool())
    registry.register(CheckPermissionTool())

    # Human-in-the-loop
    registry.register(InterventionStatusTool())
    registry.register(InterventionCompleteTool())
    registry.register(PauseTool())
    registry.register(ResumeTool())

    # Navigation and status
    registry.register(NavigateTool())
    registry.register(BrowserStatusTool())


def create_default_registry(context: ToolContext) -> ToolRegistry:
    """Create a registry holding every built-in tool."""
    registry = ToolRegistry(context)
    register_builtin_tools(registry)
    return registry
