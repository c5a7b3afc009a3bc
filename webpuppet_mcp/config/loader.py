"""Configuration loading with fail-fast behavior.

Sources, lowest precedence first:
1. Pydantic defaults
2. A JSON file (explicit path, or WEBPUPPET_MCP_CONFIG when no path is given)
3. Command-line overrides
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from webpuppet_mcp.config.schema import ServerConfig
from webpuppet_mcp.core.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "WEBPUPPET_MCP_CONFIG"


def load_json_file(path: Path) -> dict[str, Any]:
    """Load and parse a JSON object from a file.

    Returns:
        Parsed JSON as a dict. Returns empty dict if file is empty.

    Raises:
        ConfigError: If the file doesn't exist, can't be read, contains invalid
            JSON, or contains non-object JSON.
    """
    resolved = path.expanduser().resolve()
    if not resolved.is_file():
        raise ConfigError(f"Config file not found: {path}")

    try:
        content = resolved.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e

    content = content.strip()
    if not content:
        return {}

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected object in {path}, got {type(data).__name__}")
    return data


def load_config(
    path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    env: Mapping[str, str] | None = None,
) -> ServerConfig:
    """Load configuration.

    Args:
        path: Config file. When None, WEBPUPPET_MCP_CONFIG is consulted; with
            neither, defaults are used.
        overrides: Top-level values (e.g. from CLI flags) applied last. None
            values are skipped so unset flags do not mask the file.
        env: Environment mapping (defaults to os.environ).

    Returns:
        Validated ServerConfig.

    Raises:
        ConfigError: If the file is missing or invalid, or validation fails.
    """
    environ = env if env is not None else os.environ
    if path is None and environ.get(CONFIG_ENV_VAR):
        path = Path(environ[CONFIG_ENV_VAR])
        logger.debug("Using config from %s: %s", CONFIG_ENV_VAR, path)

    data: dict[str, Any] = {}
    if path is not None:
        data = load_json_file(path)
        logger.info("Config loaded from: %s", path)

    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value

    try:
        return ServerConfig.model_validate(data)
    except ValidationError as e:
        source = f" for {path}" if path is not None else ""
        raise ConfigError(f"Config validation failed{source}: {e}") from e
