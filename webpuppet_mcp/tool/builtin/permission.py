"""Permission check tool."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from webpuppet_mcp.core.policy import Operation
from webpuppet_mcp.core.types import ToolCallResult
from webpuppet_mcp.tool.base import BaseTool

if TYPE_CHECKING:
    from webpuppet_mcp.tool.context import ToolContext

VALID_OPERATIONS = ", ".join(op.value for op in Operation)


class CheckPermissionTool(BaseTool):
    """Report whether the active policy allows an operation.

    The operation name is free text. An unrecognized name is a tool-level
    error (is_error) since the check itself ran fine.
    """

    def __init__(self) -> None:
        super().__init__(
            name="webpuppet_check_permission",
            description="Check if an operation is allowed by the security policy.",
            input_schema={
                "type": "object",
                "properties": {
                    "operation": {
                        "type": "string",
                        "description": (
                            "Operation to check (e.g., Navigate, SendPrompt, DeleteAccount)"
                        ),
                    },
                    "url": {
                        "type": "string",
                        "description": "Optional URL context for navigation checks",
                    },
                },
                "required": ["operation"],
            },
        )

    async def run(self, arguments: dict[str, Any], context: ToolContext) -> ToolCallResult:
        raw = arguments["operation"]
        operation = Operation.parse(raw)
        if operation is None:
            return ToolCallResult.text(
                f"Unknown operation: `{raw}`\n\nValid operations: {VALID_OPERATIONS}",
                is_error=True,
            )

        url = arguments.get("url")
        if url:
            decision = context.permissions.check_with_url(operation, url)
        else:
            decision = context.permissions.check(operation)

        status = "✅ ALLOWED" if decision.allowed else "❌ DENIED"
        text = (
            "# Permission Check\n\n"
            f"**Operation**: `{operation}`\n"
            f"**Status**: {status}\n"
            f"**Reason**: {decision.reason}\n"
            f"**Risk Level**: {decision.risk_level}/10"
        )
        if url:
            text += f"\n**URL**: {url}"
        return ToolCallResult.text(text)
