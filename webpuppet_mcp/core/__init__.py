"""Core types, errors and state primitives for webpuppet-mcp."""

from webpuppet_mcp.core.errors import (
    AutomationError,
    ConfigError,
    InvalidParamsError,
    PermissionDeniedError,
    ToolNotFoundError,
    WebpuppetError,
    error_code,
)
from webpuppet_mcp.core.intervention import (
    InterventionHandler,
    InterventionOutcome,
    InterventionSnapshot,
    InterventionState,
)
from webpuppet_mcp.core.policy import (
    Operation,
    PermissionDecision,
    PermissionGate,
    PermissionGuard,
    PermissionPolicy,
)
from webpuppet_mcp.core.presets import get_builtin_policies, guard_for_policy, resolve_policy
from webpuppet_mcp.core.rwlock import AsyncRWLock
from webpuppet_mcp.core.types import ContentItem, ToolCallResult, ToolDefinition

__all__ = [
    "AsyncRWLock",
    "AutomationError",
    "ConfigError",
    "ContentItem",
    "InterventionHandler",
    "InterventionOutcome",
    "InterventionSnapshot",
    "InterventionState",
    "InvalidParamsError",
    "Operation",
    "PermissionDecision",
    "PermissionDeniedError",
    "PermissionGate",
    "PermissionGuard",
    "PermissionPolicy",
    "ToolCallResult",
    "ToolDefinition",
    "ToolNotFoundError",
    "WebpuppetError",
    "error_code",
    "get_builtin_policies",
    "guard_for_policy",
    "resolve_policy",
]
