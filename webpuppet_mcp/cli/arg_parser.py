"""Argument parsing for the webpuppet-mcp CLI."""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from webpuppet_mcp import __version__
from webpuppet_mcp.core.presets import POLICY_NAMES


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webpuppet-mcp",
        description="MCP server exposing browser automation of AI provider web UIs",
    )
    parser.add_argument(
        "--stdio",
        action="store_true",
        default=True,
        help="Serve over stdin/stdout (the only transport; default)",
    )
    parser.add_argument(
        "--policy",
        choices=POLICY_NAMES,
        default=None,
        help="Permission policy (default: secure)",
    )
    parser.add_argument(
        "--visible",
        action="store_true",
        default=None,
        help="Show the browser window instead of running headless",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        default=None,
        help="Enable debug logging",
    )
    parser.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Write logs to this file instead of stderr",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a JSON config file (default: $WEBPUPPET_MCP_CONFIG)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)
