"""MCP server for webpuppet-mcp.

Speaks the Model Context Protocol (JSON-RPC 2.0, newline-delimited, over
stdin/stdout) and exposes the browser automation tools.
"""

from webpuppet_mcp.mcp.bootstrap import build_server, configure_logging
from webpuppet_mcp.mcp.protocol import PROTOCOL_VERSION, SERVER_NAME, SERVER_VERSION
from webpuppet_mcp.mcp.server import MCPServer, ServerState

__all__ = [
    "MCPServer",
    "PROTOCOL_VERSION",
    "SERVER_NAME",
    "SERVER_VERSION",
    "ServerState",
    "build_server",
    "configure_logging",
]
