"""Browser automation collaborators: contracts, providers and the default engine."""

from webpuppet_mcp.automation.detection import BrowserDetector, BrowserType, DetectedBrowser
from webpuppet_mcp.automation.devtools import DevToolsAutomation, create_devtools_automation
from webpuppet_mcp.automation.interfaces import (
    AutomationFactory,
    AutomationHandle,
    BrowserSession,
    PromptRequest,
    PromptResponse,
    ProviderCapabilities,
    ScreeningResult,
)
from webpuppet_mcp.automation.providers import (
    DECLARED_CAPABILITIES,
    PROVIDER_IDS,
    PROVIDER_INFO,
    Provider,
    parse_provider,
)
from webpuppet_mcp.automation.screening import ScreeningConfig, screen_response

__all__ = [
    "AutomationFactory",
    "AutomationHandle",
    "BrowserDetector",
    "BrowserSession",
    "BrowserType",
    "DECLARED_CAPABILITIES",
    "DetectedBrowser",
    "DevToolsAutomation",
    "PROVIDER_IDS",
    "PROVIDER_INFO",
    "PromptRequest",
    "PromptResponse",
    "Provider",
    "ProviderCapabilities",
    "ScreeningConfig",
    "ScreeningResult",
    "create_devtools_automation",
    "parse_provider",
    "screen_response",
]
