"""Built-in permission policies for webpuppet-mcp.

This module defines:
- DEFAULT_ALLOWED_DOMAINS: hosts the restrictive policies may navigate to
- Built-in policies (secure, permissive, readonly)
- resolve_policy() / guard_for_policy() for selecting one by name
"""

from __future__ import annotations

from webpuppet_mcp.core.errors import ConfigError
from webpuppet_mcp.core.policy import (
    ACCOUNT_OPERATIONS,
    READ_ONLY_OPERATIONS,
    Operation,
    PermissionGuard,
    PermissionPolicy,
)

# Provider sites, their sign-in hosts, and local/test hosts
DEFAULT_ALLOWED_DOMAINS = frozenset({
    "claude.ai",
    "anthropic.com",
    "x.com",
    "grok.com",
    "gemini.google.com",
    "notebooklm.google.com",
    "accounts.google.com",
    "chat.openai.com",
    "chatgpt.com",
    "auth.openai.com",
    "perplexity.ai",
    "kaggle.com",
    "example.com",
    "localhost",
    "127.0.0.1",
})

# Operations up to this risk level are allowed by the secure policy
SECURE_MAX_RISK = 5

POLICY_NAMES = ("secure", "permissive", "readonly")


def _create_builtin_policies() -> dict[str, PermissionPolicy]:
    return {
        "secure": PermissionPolicy(
            name="secure",
            allowed_operations=frozenset(
                op for op in Operation
                if op.risk_level <= SECURE_MAX_RISK and op not in ACCOUNT_OPERATIONS
            ),
            allowed_domains=DEFAULT_ALLOWED_DOMAINS,
            description="Everyday automation on known provider domains; no account changes",
        ),
        "permissive": PermissionPolicy(
            name="permissive",
            allowed_operations=frozenset(set(Operation) - ACCOUNT_OPERATIONS),
            allowed_domains=None,
            description="Any domain, any operation except account changes",
        ),
        "readonly": PermissionPolicy(
            name="readonly",
            allowed_operations=READ_ONLY_OPERATIONS,
            allowed_domains=DEFAULT_ALLOWED_DOMAINS,
            description="Navigate and read only; no input or prompts",
        ),
    }


def get_builtin_policies() -> dict[str, PermissionPolicy]:
    """Get built-in permission policies."""
    return _create_builtin_policies()


def resolve_policy(name: str) -> PermissionPolicy:
    """Look up a built-in policy by name (case-insensitive).

    Raises:
        ConfigError: If the name is not a built-in policy.
    """
    policies = get_builtin_policies()
    key = name.strip().lower()
    # Accept the spelling used by the permission API
    if key in ("read_only", "read-only"):
        key = "readonly"
    policy = policies.get(key)
    if policy is None:
        raise ConfigError(
            f"Unknown permission policy: {name!r} (expected one of: {', '.join(POLICY_NAMES)})"
        )
    return policy


def guard_for_policy(name: str) -> PermissionGuard:
    """Build a PermissionGuard for a built-in policy."""
    return PermissionGuard(resolve_policy(name))
