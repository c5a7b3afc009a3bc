"""Command-line interface for webpuppet-mcp."""

from webpuppet_mcp.cli.serve import main

__all__ = ["main"]
