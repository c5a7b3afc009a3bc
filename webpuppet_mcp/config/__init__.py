"""Configuration for webpuppet-mcp."""

from webpuppet_mcp.config.loader import CONFIG_ENV_VAR, load_config
from webpuppet_mcp.config.schema import DevToolsSettings, ScreeningSettings, ServerConfig

__all__ = [
    "CONFIG_ENV_VAR",
    "DevToolsSettings",
    "ScreeningSettings",
    "ServerConfig",
    "load_config",
]
