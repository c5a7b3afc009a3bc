"""Built-in tools for webpuppet-mcp."""

from webpuppet_mcp.tool.builtin.registration import (
    create_default_registry,
    register_builtin_tools,
)

__all__ = ["create_default_registry", "register_builtin_tools"]
