"""Supported AI providers and web tools.

Each provider has a stable id (used in tool arguments), a display name, a
home URL and a declared capability table.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from webpuppet_mcp.automation.interfaces import ProviderCapabilities
from webpuppet_mcp.core.errors import InvalidParamsError


class Provider(Enum):
    CLAUDE = "claude"
    GROK = "grok"
    GEMINI = "gemini"
    CHATGPT = "chatgpt"
    PERPLEXITY = "perplexity"
    NOTEBOOKLM = "notebooklm"
    KAGGLE = "kaggle"

    def __str__(self) -> str:
        return self.value

    @property
    def info(self) -> ProviderInfo:
        return PROVIDER_INFO[self]

    @property
    def display_name(self) -> str:
        return PROVIDER_INFO[self].name

    @property
    def home_url(self) -> str:
        return PROVIDER_INFO[self].url


PROVIDER_IDS: tuple[str, ...] = tuple(p.value for p in Provider)

# Alternate spellings accepted in tool arguments
PROVIDER_ALIASES: dict[str, Provider] = {
    "openai": Provider.CHATGPT,
    "notebook": Provider.NOTEBOOKLM,
}


def parse_provider(raw: str) -> Provider:
    """Map a provider name (case-insensitive, aliases allowed) to a Provider.

    Raises:
        InvalidParamsError: If the name is not a known provider.
    """
    key = raw.strip().lower()
    if key in PROVIDER_ALIASES:
        return PROVIDER_ALIASES[key]
    try:
        return Provider(key)
    except ValueError:
        raise InvalidParamsError(f"unknown provider: {raw}") from None


@dataclass(frozen=True)
class ProviderInfo:
    name: str
    url: str
    features: str


PROVIDER_INFO: dict[Provider, ProviderInfo] = {
    Provider.CLAUDE: ProviderInfo(
        "Claude (Anthropic)", "https://claude.ai", "Large context, artifacts, code"
    ),
    Provider.GROK: ProviderInfo(
        "Grok (X/xAI)", "https://x.com/i/grok", "Real-time info, integrated with X"
    ),
    Provider.GEMINI: ProviderInfo(
        "Gemini (Google)", "https://gemini.google.com", "Google integration, large context"
    ),
    Provider.CHATGPT: ProviderInfo(
        "ChatGPT (OpenAI)", "https://chat.openai.com", "GPT-4o, vision, code, web search"
    ),
    Provider.PERPLEXITY: ProviderInfo(
        "Perplexity AI", "https://www.perplexity.ai", "Search-focused, sources cited"
    ),
    Provider.NOTEBOOKLM: ProviderInfo(
        "NotebookLM (Google)",
        "https://notebooklm.google.com",
        "Research assistant, 500k context",
    ),
    Provider.KAGGLE: ProviderInfo(
        "Kaggle (Datasets)",
        "https://www.kaggle.com/datasets",
        "Dataset search/catalog; returns dataset page links",
    ),
}

DECLARED_CAPABILITIES: dict[Provider, ProviderCapabilities] = {
    Provider.CLAUDE: ProviderCapabilities(
        vision=True,
        file_upload=True,
        code_execution=True,
        max_context=200_000,
        models=("claude-sonnet", "claude-opus", "claude-haiku"),
    ),
    Provider.GROK: ProviderCapabilities(
        vision=True,
        web_search=True,
        max_context=128_000,
        models=("grok-2", "grok-3"),
    ),
    Provider.GEMINI: ProviderCapabilities(
        vision=True,
        file_upload=True,
        code_execution=True,
        web_search=True,
        max_context=1_000_000,
        models=("gemini-pro", "gemini-flash"),
    ),
    Provider.CHATGPT: ProviderCapabilities(
        vision=True,
        file_upload=True,
        code_execution=True,
        web_search=True,
        max_context=128_000,
        models=("gpt-4o", "gpt-4o-mini"),
    ),
    Provider.PERPLEXITY: ProviderCapabilities(
        file_upload=True,
        web_search=True,
        max_context=32_000,
    ),
    Provider.NOTEBOOKLM: ProviderCapabilities(
        file_upload=True,
        max_context=500_000,
    ),
    Provider.KAGGLE: ProviderCapabilities(
        conversation=False,
        web_search=True,
    ),
}
