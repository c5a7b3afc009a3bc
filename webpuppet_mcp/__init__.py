"""webpuppet-mcp: an MCP server for browser automation of AI provider web UIs."""

__version__ = "0.1.0"
