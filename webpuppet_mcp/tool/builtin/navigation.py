"""Navigation and browser status tools."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from webpuppet_mcp.automation.providers import Provider
from webpuppet_mcp.core.errors import AutomationError
from webpuppet_mcp.core.policy import Operation
from webpuppet_mcp.core.types import ToolCallResult
from webpuppet_mcp.tool.base import BaseTool

if TYPE_CHECKING:
    from webpuppet_mcp.tool.context import ToolContext

logger = logging.getLogger(__name__)

# Session used for free navigation
NAVIGATION_PROVIDER = Provider.GROK


class NavigateTool(BaseTool):
    """Open a URL in the browser and report where it landed.

    URL and title are best effort: when either cannot be read, the requested
    URL and "Unknown" are reported instead.
    """

    def __init__(self) -> None:
        super().__init__(
            name="webpuppet_navigate",
            description="Navigate browser to a URL. Opens a browser window if not already open.",
            input_schema={
                "type": "object",
                "properties": {
                    "url": {
                        "type": "string",
                        "description": "URL to navigate to",
                    },
                },
                "required": ["url"],
            },
        )

    async def run(self, arguments: dict[str, Any], context: ToolContext) -> ToolCallResult:
        url = arguments["url"]
        context.permissions.require_with_url(Operation.NAVIGATE, url)

        automation = await context.get_automation()
        session = await automation.get_session(NAVIGATION_PROVIDER)
        await session.navigate(url)

        try:
            current_url = await session.current_url()
        except AutomationError as e:
            logger.debug("Could not read current URL: %s", e)
            current_url = url
        try:
            title = await session.get_title()
        except AutomationError as e:
            logger.debug("Could not read page title: %s", e)
            title = "Unknown"

        return ToolCallResult.text(
            "# Browser Navigated\n\n"
            "✅ Successfully navigated to URL.\n\n"
            f"- **URL**: {current_url or url}\n"
            f"- **Title**: {title or 'Unknown'}"
        )


class BrowserStatusTool(BaseTool):
    def __init__(self) -> None:
        super().__init__(
            name="webpuppet_browser_status",
            description="Get current browser status including URL, title, and visibility.",
        )

    async def run(self, arguments: dict[str, Any], context: ToolContext) -> ToolCallResult:
        if not await context.has_automation():
            return ToolCallResult.text(
                "# Browser Status\n\n"
                "⚪ No browser session is currently active.\n\n"
                "A browser will be launched when you use `webpuppet_navigate` or "
                "`webpuppet_prompt`."
            )

        mode = "Headless" if context.headless else "Visible"
        providers = ", ".join(p.display_name for p in Provider)
        return ToolCallResult.text(
            "# Browser Status\n\n"
            "🟢 Browser session is active.\n\n"
            f"- **Mode**: {mode}\n"
            f"- **Providers**: {providers}"
        )
