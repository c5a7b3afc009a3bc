"""Permission policy primitives for webpuppet-mcp.

This module defines the core permission primitives:
- Operation: Enum of browser operations with their risk levels
- PermissionDecision: Result of evaluating an operation
- PermissionPolicy: Allowed operations and URL restrictions
- PermissionGuard: The gate tools call before touching the browser
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol
from urllib.parse import urlsplit

from webpuppet_mcp.core.errors import PermissionDeniedError


class Operation(Enum):
    """Browser operations subject to permission checks."""

    NAVIGATE = "Navigate"
    READ_CONTENT = "ReadContent"
    READ_RESPONSE = "ReadResponse"
    SCREENSHOT = "Screenshot"
    SEND_PROMPT = "SendPrompt"
    CLICK = "Click"
    TYPE_TEXT = "TypeText"
    SUBMIT_FORM = "SubmitForm"
    DOWNLOAD_FILE = "DownloadFile"
    UPLOAD_FILE = "UploadFile"
    CHANGE_SETTINGS = "ChangeSettings"
    EXECUTE_SCRIPT = "ExecuteScript"
    CHANGE_PASSWORD = "ChangePassword"
    DELETE_ACCOUNT = "DeleteAccount"

    def __str__(self) -> str:
        return self.value

    @property
    def risk_level(self) -> int:
        """Risk on a 0-10 scale."""
        return _RISK_LEVELS[self]

    @classmethod
    def parse(cls, raw: str) -> Operation | None:
        """Map free text to an Operation.

        Matching ignores case and separators, so "SendPrompt", "send_prompt",
        "send-prompt" and "sendPrompt" are the same operation.

        Returns:
            The Operation, or None if the text names no known operation.
        """
        key = _SEPARATORS.sub("", raw).lower()
        return _OPERATIONS_BY_KEY.get(key)


_RISK_LEVELS: dict[Operation, int] = {
    Operation.NAVIGATE: 2,
    Operation.READ_CONTENT: 1,
    Operation.READ_RESPONSE: 1,
    Operation.SCREENSHOT: 2,
    Operation.SEND_PROMPT: 3,
    Operation.CLICK: 4,
    Operation.TYPE_TEXT: 4,
    Operation.SUBMIT_FORM: 5,
    Operation.DOWNLOAD_FILE: 5,
    Operation.UPLOAD_FILE: 6,
    Operation.CHANGE_SETTINGS: 7,
    Operation.EXECUTE_SCRIPT: 8,
    Operation.CHANGE_PASSWORD: 9,
    Operation.DELETE_ACCOUNT: 10,
}

_SEPARATORS = re.compile(r"[\s_\-]+")
_OPERATIONS_BY_KEY = {op.value.lower(): op for op in Operation}

# Account-level operations no built-in policy allows
ACCOUNT_OPERATIONS = frozenset({
    Operation.CHANGE_PASSWORD,
    Operation.DELETE_ACCOUNT,
})

READ_ONLY_OPERATIONS = frozenset({
    Operation.NAVIGATE,
    Operation.READ_CONTENT,
    Operation.READ_RESPONSE,
    Operation.SCREENSHOT,
})

# Schemes that are never navigable, regardless of policy
BLOCKED_SCHEMES = frozenset({"file", "javascript", "data", "chrome", "view-source"})
ALLOWED_SCHEMES = frozenset({"http", "https"})


@dataclass(frozen=True)
class PermissionDecision:
    """Outcome of a permission check.

    Attributes:
        allowed: Whether the operation may proceed.
        reason: Human-readable explanation.
        risk_level: Risk of the operation (0-10).
    """

    allowed: bool
    reason: str
    risk_level: int


@dataclass(frozen=True)
class PermissionPolicy:
    """Permission policy for browser automation.

    Attributes:
        name: Policy identifier (secure, permissive, readonly, or custom).
        allowed_operations: Operations the policy permits.
        allowed_domains: Hosts navigation may target.
            - None: Any host is allowed
            - frozenset(): No host is allowed
            - {"example.com"}: The host or any of its subdomains
        description: Human-readable description.
    """

    name: str
    allowed_operations: frozenset[Operation]
    # None = any host, empty = no host, {hosts...} = only these (and subdomains)
    allowed_domains: frozenset[str] | None = None
    description: str = ""
    blocked_schemes: frozenset[str] = field(default=BLOCKED_SCHEMES)

    def evaluate(self, operation: Operation, url: str | None = None) -> PermissionDecision:
        """Decide whether an operation (optionally against a URL) is allowed."""
        risk = operation.risk_level

        if operation not in self.allowed_operations:
            return PermissionDecision(
                allowed=False,
                reason=f"Operation '{operation}' is not permitted by the '{self.name}' policy",
                risk_level=risk,
            )

        if url is not None:
            url_problem = self._check_url(url)
            if url_problem:
                return PermissionDecision(allowed=False, reason=url_problem, risk_level=risk)
            return PermissionDecision(
                allowed=True,
                reason=f"Operation '{operation}' on {url} is permitted by the '{self.name}' policy",
                risk_level=risk,
            )

        return PermissionDecision(
            allowed=True,
            reason=f"Operation '{operation}' is permitted by the '{self.name}' policy",
            risk_level=risk,
        )

    def is_host_allowed(self, host: str) -> bool:
        host = (host or "").strip().lower().rstrip(".")
        if self.allowed_domains is None:
            return True
        for raw_allowed in self.allowed_domains:
            allowed = raw_allowed.strip().lower().lstrip(".").rstrip(".")
            if not allowed:
                continue
            if host == allowed or host.endswith("." + allowed):
                return True
        return False

    def _check_url(self, url: str) -> str | None:
        """Return a denial reason for the URL, or None if it is acceptable."""
        try:
            parts = urlsplit(url.strip())
        except ValueError:
            return f"Malformed URL: {url}"

        scheme = parts.scheme.lower()
        if scheme in self.blocked_schemes:
            return f"URL scheme '{scheme}' is blocked"
        if scheme not in ALLOWED_SCHEMES:
            return f"URL scheme '{scheme or '(none)'}' is not allowed; use http or https"
        if not parts.hostname:
            return f"URL has no host: {url}"
        if not self.is_host_allowed(parts.hostname):
            return f"Domain '{parts.hostname}' is not in the '{self.name}' policy allowlist"
        return None


class PermissionGate(Protocol):
    """What tools need from a permission evaluator."""

    def require(self, operation: Operation) -> None: ...

    def require_with_url(self, operation: Operation, url: str) -> None: ...

    def check(self, operation: Operation) -> PermissionDecision: ...

    def check_with_url(self, operation: Operation, url: str) -> PermissionDecision: ...


class PermissionGuard:
    """Enforces a PermissionPolicy.

    check*() return a decision; require*() raise PermissionDeniedError when
    the decision is a denial. The guard is immutable once built.
    """

    def __init__(self, policy: PermissionPolicy) -> None:
        self._policy = policy

    @property
    def policy(self) -> PermissionPolicy:
        return self._policy

    def check(self, operation: Operation) -> PermissionDecision:
        return self._policy.evaluate(operation)

    def check_with_url(self, operation: Operation, url: str) -> PermissionDecision:
        return self._policy.evaluate(operation, url)

    def require(self, operation: Operation) -> None:
        decision = self.check(operation)
        if not decision.allowed:
            raise PermissionDeniedError(decision.reason)

    def require_with_url(self, operation: Operation, url: str) -> None:
        decision = self.check_with_url(operation, url)
        if not decision.allowed:
            raise PermissionDeniedError(decision.reason)
