"""Provider listing and declared-capability tools."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from webpuppet_mcp.automation.providers import PROVIDER_IDS, Provider, parse_provider
from webpuppet_mcp.core.errors import InvalidParamsError
from webpuppet_mcp.core.policy import Operation
from webpuppet_mcp.core.types import ToolCallResult
from webpuppet_mcp.tool.base import BaseTool

if TYPE_CHECKING:
    from webpuppet_mcp.tool.context import ToolContext


class ListProvidersTool(BaseTool):
    """List every provider with its home page and strengths. Needs no permission."""

    def __init__(self) -> None:
        super().__init__(
            name="webpuppet_list_providers",
            description="List available AI providers and their status.",
        )

    async def run(self, arguments: dict[str, Any], context: ToolContext) -> ToolCallResult:
        lines = []
        for provider in Provider:
            info = provider.info
            lines.append(
                f"- **{info.name}** (`{provider.value}`): [{info.url}]({info.url})\n"
                f"  _{info.features}_"
            )
        return ToolCallResult.text(
            "# Available Providers\n\n"
            + "\n".join(lines)
            + "\n\n*Note: Uses browser sessions; some providers require login.*"
        )


class ProviderCapabilitiesTool(BaseTool):
    def __init__(self) -> None:
        super().__init__(
            name="webpuppet_provider_capabilities",
            description=(
                "Get declared capabilities for a provider/tool (conversation, vision, "
                "file upload, web search, etc)."
            ),
            input_schema={
                "type": "object",
                "properties": {
                    "provider": {
                        "type": "string",
                        "description": f"Provider/tool to inspect: {', '.join(PROVIDER_IDS)}",
                    },
                },
                "required": ["provider"],
            },
        )

    async def run(self, arguments: dict[str, Any], context: ToolContext) -> ToolCallResult:
        context.permissions.require(Operation.READ_CONTENT)
        provider = parse_provider(arguments["provider"])

        automation = await context.get_automation()
        capabilities = automation.provider_capabilities(provider)
        if capabilities is None:
            raise InvalidParamsError(f"provider not available: {provider}")

        payload = {
            "provider": provider.value,
            "capabilities": {
                **capabilities.to_dict(),
                "note": "Declared capabilities (not runtime UI detection).",
            },
        }
        return ToolCallResult.text(json.dumps(payload, indent=2))
