"""Screenshot tool."""

from __future__ import annotations

import base64
from typing import TYPE_CHECKING, Any

from webpuppet_mcp.core.policy import Operation
from webpuppet_mcp.core.types import ContentItem, ToolCallResult
from webpuppet_mcp.tool.base import BaseTool

if TYPE_CHECKING:
    from webpuppet_mcp.tool.context import ToolContext


class ScreenshotTool(BaseTool):
    """Capture a PNG of a page. The URL must pass the Navigate check first."""

    def __init__(self) -> None:
        super().__init__(
            name="webpuppet_screenshot",
            description="Take a screenshot of a web page. Only allowed domains can be accessed.",
            input_schema={
                "type": "object",
                "properties": {
                    "url": {
                        "type": "string",
                        "description": "URL to take a screenshot of",
                    },
                },
                "required": ["url"],
            },
        )

    async def run(self, arguments: dict[str, Any], context: ToolContext) -> ToolCallResult:
        url = arguments["url"]
        context.permissions.require_with_url(Operation.NAVIGATE, url)
        context.permissions.require(Operation.SCREENSHOT)

        automation = await context.get_automation()
        png = await automation.screenshot(url)

        return ToolCallResult(
            content=(
                ContentItem.image_item(base64.b64encode(png).decode("ascii"), "image/png"),
                ContentItem.text_item(f"Screenshot of `{url}` ({len(png)} bytes)"),
            )
        )
