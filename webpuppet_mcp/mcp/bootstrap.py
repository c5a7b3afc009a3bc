"""Object graph bootstrap for the webpuppet-mcp server.

Usage:
    config = load_config(overrides={"policy": "readonly"})
    configure_logging(config.verbose, config.log_file)
    server = build_server(config)
"""

from __future__ import annotations

import functools
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from webpuppet_mcp.automation.detection import BrowserDetector
from webpuppet_mcp.automation.devtools import create_devtools_automation
from webpuppet_mcp.automation.interfaces import AutomationFactory
from webpuppet_mcp.config.schema import ServerConfig
from webpuppet_mcp.core.presets import guard_for_policy
from webpuppet_mcp.mcp.server import MCPServer
from webpuppet_mcp.tool.builtin.registration import create_default_registry
from webpuppet_mcp.tool.context import ToolContext

logger = logging.getLogger(__name__)

ROOT_LOGGER_NAME = "webpuppet_mcp"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(verbose: bool = False, log_file: str | Path | None = None) -> None:
    """Configure the webpuppet_mcp namespace logger.

    stdout carries protocol messages, so logs go to stderr, or to a rotating
    file (max 5MB per file, 3 backup files) when log_file is given.

    Args:
        verbose: Log at DEBUG instead of INFO.
        log_file: Optional log file path. Parent directories are created.
    """
    level = logging.DEBUG if verbose else logging.INFO

    handler: logging.Handler
    if log_file is not None:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            path,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
            encoding="utf-8",
        )
    else:
        handler = logging.StreamHandler(sys.stderr)

    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)

    # Remove any existing handlers to avoid duplicates on reconfigure
    for existing in list(root.handlers):
        root.removeHandler(existing)
        existing.close()
    root.addHandler(handler)

    # Don't propagate to root logger
    root.propagate = False


def default_automation_factory(config: ServerConfig, detector: BrowserDetector) -> AutomationFactory:
    """Bind the DevTools engine to the configured port, binary and profile."""
    settings = config.devtools
    return functools.partial(
        create_devtools_automation,
        port=settings.port,
        binary=settings.binary,
        startup_timeout=settings.startup_timeout,
        profile_dir=settings.profile_dir,
        detector=detector,
    )


def build_server(
    config: ServerConfig,
    automation_factory: AutomationFactory | None = None,
    detector: BrowserDetector | None = None,
) -> MCPServer:
    """Wire permission guard, context, registry and server from config.

    Raises:
        ConfigError: If the policy name is unknown.
    """
    guard = guard_for_policy(config.policy)
    detector = detector or BrowserDetector()
    context = ToolContext(
        guard,
        screening_config=config.screening.to_screening_config(),
        headless=not config.visible,
        detector=detector,
        automation_factory=automation_factory or default_automation_factory(config, detector),
    )
    registry = create_default_registry(context)
    logger.info(
        "Server configured: policy=%s, mode=%s, tools=%d",
        config.policy,
        "visible" if config.visible else "headless",
        len(registry),
    )
    return MCPServer(registry)
