"""Collaborator contracts consumed by the tools.

The server never depends on a concrete browser engine. Tools talk to an
AutomationHandle (built lazily by an AutomationFactory) and to the
BrowserSession objects it hands out. The default engine lives in
webpuppet_mcp.automation.devtools; tests substitute fakes.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from webpuppet_mcp.automation.providers import Provider
    from webpuppet_mcp.automation.screening import ScreeningConfig


@dataclass(frozen=True)
class PromptRequest:
    """A prompt to send to a provider.

    Attributes:
        message: The prompt text.
        context: Optional context or system instructions.
    """

    message: str
    context: str | None = None

    def with_context(self, context: str) -> PromptRequest:
        return PromptRequest(message=self.message, context=context)


@dataclass(frozen=True)
class PromptResponse:
    """A provider's reply.

    Attributes:
        text: The response text.
        provider: Provider that produced it.
        conversation_url: URL of the conversation, if the provider exposes one.
    """

    text: str
    provider: str | None = None
    conversation_url: str | None = None


@dataclass(frozen=True)
class ScreeningResult:
    """Outcome of screening a response.

    Attributes:
        passed: Whether the response stayed under the risk threshold.
        risk_score: Aggregate risk in [0, 1].
        issues: Human-readable findings.
    """

    passed: bool
    risk_score: float = 0.0
    issues: tuple[str, ...] = ()


@dataclass(frozen=True)
class ProviderCapabilities:
    """Declared (not runtime-detected) capabilities of a provider."""

    conversation: bool = True
    vision: bool = False
    file_upload: bool = False
    code_execution: bool = False
    web_search: bool = False
    max_context: int | None = None
    models: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "conversation": self.conversation,
            "vision": self.vision,
            "file_upload": self.file_upload,
            "code_execution": self.code_execution,
            "web_search": self.web_search,
            "max_context": self.max_context,
            "models": list(self.models),
        }


@runtime_checkable
class BrowserSession(Protocol):
    """A browser tab bound to one provider."""

    async def navigate(self, url: str) -> None: ...

    async def current_url(self) -> str: ...

    async def get_title(self) -> str: ...


@runtime_checkable
class AutomationHandle(Protocol):
    """Everything tools need from the browser automation engine.

    All methods may raise AutomationError.
    """

    async def authenticate(self, provider: Provider) -> None:
        """Make sure the provider's session is signed in."""
        ...

    async def prompt_screened(
        self, provider: Provider, request: PromptRequest
    ) -> tuple[PromptResponse, ScreeningResult]:
        """Send a prompt and screen the response."""
        ...

    async def get_session(self, provider: Provider) -> BrowserSession:
        """Return (creating if needed) the provider's browser session."""
        ...

    async def screenshot(self, url: str) -> bytes:
        """Capture a PNG of the page at url."""
        ...

    def provider_capabilities(self, provider: Provider) -> ProviderCapabilities | None:
        """Return the declared capabilities, or None if the provider is unavailable."""
        ...

    async def close(self) -> None:
        """Release the browser and any network clients."""
        ...


# Builds a handle for the given headless flag and screening configuration
AutomationFactory = Callable[[bool, "ScreeningConfig"], Awaitable[AutomationHandle]]
