"""Browser detection tool."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from webpuppet_mcp.core.errors import AutomationError
from webpuppet_mcp.core.types import ToolCallResult
from webpuppet_mcp.tool.base import BaseTool

if TYPE_CHECKING:
    from webpuppet_mcp.automation.detection import DetectedBrowser
    from webpuppet_mcp.tool.context import ToolContext

logger = logging.getLogger(__name__)

NO_BROWSERS_MESSAGE = (
    "No supported browsers detected. Please install Brave, Chrome, or Chromium."
)


def _format_browser(browser: DetectedBrowser) -> str:
    profiles = browser.list_profiles()
    return (
        f"- **{browser.browser_type}** ({browser.version or 'unknown'})\n"
        f"  - Path: `{browser.executable_path}`\n"
        f"  - Data: `{browser.user_data_dir}`\n"
        f"  - Profiles: {', '.join(profiles) if profiles else 'none'}"
    )


class DetectBrowsersTool(BaseTool):
    def __init__(self) -> None:
        super().__init__(
            name="webpuppet_detect_browsers",
            description="Detect installed browsers that can be used for automation.",
        )

    async def run(self, arguments: dict[str, Any], context: ToolContext) -> ToolCallResult:
        # Probing runs `--version` subprocesses
        try:
            browsers = await asyncio.to_thread(context.detector.detect_all)
        except OSError as e:
            raise AutomationError(f"Browser detection failed: {e}") from e

        if not browsers:
            return ToolCallResult.text(NO_BROWSERS_MESSAGE, is_error=True)

        text = "\n\n".join(_format_browser(b) for b in browsers)
        return ToolCallResult.text(f"# Detected Browsers\n\n{text}")
