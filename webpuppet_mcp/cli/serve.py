"""Entry point for the webpuppet-mcp stdio server.

Exit codes:
    0  clean shutdown, exit notification, or end of input
    1  startup configuration failure or transport failure
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from webpuppet_mcp.cli.arg_parser import parse_args
from webpuppet_mcp.cli.output import print_error
from webpuppet_mcp.config.loader import load_config
from webpuppet_mcp.core.errors import ConfigError, TransportError
from webpuppet_mcp.mcp.bootstrap import build_server, configure_logging
from webpuppet_mcp.mcp.server import MCPServer

logger = logging.getLogger(__name__)


async def serve(server: MCPServer) -> int:
    """Run the server on stdio and release the browser afterwards."""
    try:
        await server.run_stdio()
    except TransportError as e:
        logger.error("Transport failure: %s", e.message)
        print_error(e.message)
        return 1
    finally:
        await server.close()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        config = load_config(
            Path(args.config) if args.config else None,
            overrides={
                "policy": args.policy,
                "visible": args.visible,
                "verbose": args.verbose,
                "log_file": args.log_file,
            },
        )
        configure_logging(config.verbose, config.log_file)
        server = build_server(config)
    except ConfigError as e:
        print_error(e.message)
        return 1
    except OSError as e:
        print_error(f"Cannot open log file: {e}")
        return 1

    logger.info("webpuppet-mcp starting (policy=%s)", config.policy)
    try:
        return asyncio.run(serve(server))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 0
