"""Prompt tool: send a message to an AI provider through the browser."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from webpuppet_mcp.automation.interfaces import PromptRequest
from webpuppet_mcp.automation.providers import PROVIDER_IDS, parse_provider
from webpuppet_mcp.core.policy import Operation
from webpuppet_mcp.core.types import ToolCallResult
from webpuppet_mcp.tool.base import BaseTool

if TYPE_CHECKING:
    from webpuppet_mcp.tool.context import ToolContext

logger = logging.getLogger(__name__)

PROVIDER_DESCRIPTION = (
    f"Provider/tool to use: {', '.join(PROVIDER_IDS)} "
    "(aliases: openai -> chatgpt, notebook -> notebooklm)"
)


class PromptTool(BaseTool):
    """Authenticate with a provider, send a prompt, return the screened reply.

    A reply that fails screening is still returned, prefixed with a visible
    risk warning.
    """

    def __init__(self) -> None:
        super().__init__(
            name="webpuppet_prompt",
            description=(
                "Send a prompt through browser automation (AI providers + select web "
                "tools). Uses existing authenticated sessions."
            ),
            input_schema={
                "type": "object",
                "properties": {
                    "provider": {
                        "type": "string",
                        "description": PROVIDER_DESCRIPTION,
                    },
                    "message": {
                        "type": "string",
                        "description": "The prompt message to send",
                    },
                    "context": {
                        "type": "string",
                        "description": "Optional context or system instructions",
                    },
                },
                "required": ["provider", "message"],
            },
        )

    async def run(self, arguments: dict[str, Any], context: ToolContext) -> ToolCallResult:
        context.permissions.require(Operation.SEND_PROMPT)

        provider = parse_provider(arguments["provider"])
        request = PromptRequest(arguments["message"])
        if arguments.get("context"):
            request = request.with_context(arguments["context"])

        automation = await context.get_automation()
        await automation.authenticate(provider)
        response, screening = await automation.prompt_screened(provider, request)

        if screening.passed:
            return ToolCallResult.text(response.text)

        logger.warning(
            "Response from %s failed screening (risk %.2f): %s",
            provider,
            screening.risk_score,
            ", ".join(screening.issues) or "no details",
        )
        return ToolCallResult.text(
            f"[SECURITY WARNING: Response had risk score {screening.risk_score:.2f}]\n\n"
            f"{response.text}"
        )
