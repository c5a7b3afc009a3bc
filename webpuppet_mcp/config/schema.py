"""Pydantic models for webpuppet-mcp configuration validation."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from webpuppet_mcp.automation.screening import (
    DEFAULT_RISK_THRESHOLD,
    ScreeningConfig,
    compile_block_patterns,
)

PolicyName = Literal["secure", "permissive", "readonly"]


class ScreeningSettings(BaseModel):
    """Response screening settings.

    Example in config.json:
        "screening": {
            "risk_threshold": 0.5,
            "block_patterns": ["(?i)wire transfer"]
        }
    """

    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    """Screen provider responses for injected instructions."""

    risk_threshold: float = Field(default=DEFAULT_RISK_THRESHOLD, ge=0.0, le=1.0)
    """Responses scoring at or above this are flagged with a warning."""

    block_patterns: list[str] = Field(default_factory=list)
    """Extra regular expressions that raise a response's risk score."""

    @field_validator("block_patterns")
    @classmethod
    def validate_block_patterns(cls, v: list[str]) -> list[str]:
        compile_block_patterns(v)
        return v

    def to_screening_config(self) -> ScreeningConfig:
        return ScreeningConfig(
            enabled=self.enabled,
            risk_threshold=self.risk_threshold,
            block_patterns=tuple(self.block_patterns),
        )


class DevToolsSettings(BaseModel):
    """Settings for the default DevTools automation engine."""

    model_config = ConfigDict(extra="forbid")

    port: int = Field(default=9222, ge=1, le=65535)
    """Remote debugging port."""

    binary: str | None = None
    """Browser executable. Detected automatically when unset."""

    startup_timeout: float = Field(default=15.0, gt=0)
    """Seconds to wait for the DevTools endpoint after launch."""

    profile_dir: str | None = None
    """Persistent profile directory. A temporary one is used when unset."""


class ServerConfig(BaseModel):
    """Root configuration for the webpuppet-mcp server.

    Example config.json:
        {
            "policy": "readonly",
            "visible": true,
            "devtools": {"port": 9333}
        }
    """

    model_config = ConfigDict(extra="forbid")

    policy: PolicyName = "secure"
    """Permission policy preset."""

    visible: bool = False
    """Show the browser window instead of running headless."""

    verbose: bool = False
    """Log at DEBUG level."""

    log_file: str | None = None
    """Write logs to this file instead of stderr."""

    screening: ScreeningSettings = Field(default_factory=ScreeningSettings)
    devtools: DevToolsSettings = Field(default_factory=DevToolsSettings)

    @field_validator("policy", mode="before")
    @classmethod
    def normalize_policy(cls, v: object) -> object:
        if isinstance(v, str):
            key = v.strip().lower()
            return "readonly" if key in ("read_only", "read-only") else key
        return v
