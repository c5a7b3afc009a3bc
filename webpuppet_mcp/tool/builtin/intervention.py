"""Human-in-the-loop intervention tools.

These tools only read or mutate the InterventionHandler in the context;
they never touch the browser.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from webpuppet_mcp.core.intervention import InterventionState
from webpuppet_mcp.core.types import ToolCallResult
from webpuppet_mcp.tool.base import BaseTool

if TYPE_CHECKING:
    from webpuppet_mcp.core.intervention import InterventionOutcome
    from webpuppet_mcp.tool.context import ToolContext

STATE_LABELS: dict[InterventionState, str] = {
    InterventionState.RUNNING: "🟢 Running",
    InterventionState.WAITING_FOR_HUMAN: "🟡 Waiting for human",
    InterventionState.RESUMING: "🔵 Resuming",
    InterventionState.TIMED_OUT: "🔴 Timed out",
    InterventionState.CANCELLED: "⚫ Cancelled",
}


def _format_outcome(outcome: InterventionOutcome) -> str:
    status = "✅ SUCCESS" if outcome.success else "❌ FAILED"
    when = datetime.fromtimestamp(outcome.completed_at, tz=timezone.utc)
    lines = [
        "## Last Intervention",
        "",
        f"**Status**: {status}",
        f"**Message**: {outcome.message or 'None'}",
    ]
    if outcome.reason:
        lines.append(f"**Reason**: {outcome.reason}")
    lines.append(f"**Completed**: {when.strftime('%Y-%m-%d %H:%M:%S UTC')}")
    return "\n".join(lines)


class InterventionStatusTool(BaseTool):
    def __init__(self) -> None:
        super().__init__(
            name="webpuppet_intervention_status",
            description=(
                "Check if human intervention is needed (captcha, 2FA, etc.). Returns current "
                "automation state and any pending intervention reason."
            ),
        )

    async def run(self, arguments: dict[str, Any], context: ToolContext) -> ToolCallResult:
        snapshot = context.intervention.snapshot()
        state = STATE_LABELS[snapshot.state]

        if snapshot.reason:
            text = (
                "# Intervention Status\n\n"
                f"**State**: {state}\n"
                f"**Reason**: {snapshot.reason}\n\n"
                "⚠️ **Action Required**: Please complete the intervention in the browser, "
                "then call `webpuppet_intervention_complete` with success=true."
            )
        elif snapshot.state == InterventionState.RUNNING:
            text = (
                "# Intervention Status\n\n"
                f"**State**: {state}\n\n"
                "No intervention currently required. Automation is running normally."
            )
        else:
            text = (
                "# Intervention Status\n\n"
                f"**State**: {state}\n\n"
                "No intervention currently required. Call `webpuppet_resume` to continue "
                "automation."
            )

        if snapshot.last_outcome is not None:
            text += "\n\n" + _format_outcome(snapshot.last_outcome)
        return ToolCallResult.text(text)


class InterventionCompleteTool(BaseTool):
    def __init__(self) -> None:
        super().__init__(
            name="webpuppet_intervention_complete",
            description=(
                "Signal that a human intervention (captcha, 2FA, etc.) has been completed. "
                "Call this after manually handling the intervention in the browser."
            ),
            input_schema={
                "type": "object",
                "properties": {
                    "success": {
                        "type": "boolean",
                        "description": "Whether the intervention was completed successfully",
                    },
                    "message": {
                        "type": "string",
                        "description": "Optional message about what was done",
                    },
                },
                "required": ["success"],
            },
        )

    async def run(self, arguments: dict[str, Any], context: ToolContext) -> ToolCallResult:
        success = arguments["success"]
        message = arguments.get("message")
        context.intervention.complete(success, message)

        status = "✅ SUCCESS" if success else "❌ FAILED"
        return ToolCallResult.text(
            "# Intervention Complete\n\n"
            f"**Status**: {status}\n"
            f"**Message**: {message or 'None'}\n\n"
            "Automation will now resume."
        )


class PauseTool(BaseTool):
    def __init__(self) -> None:
        super().__init__(
            name="webpuppet_pause",
            description=(
                "Pause browser automation. Use this when you need to manually interact "
                "with the browser."
            ),
        )

    async def run(self, arguments: dict[str, Any], context: ToolContext) -> ToolCallResult:
        context.intervention.pause()
        return ToolCallResult.text(
            "# Automation Paused\n\n"
            "⏸️ Automation is now paused. The browser is available for manual interaction.\n\n"
            "Call `webpuppet_resume` when ready to continue."
        )


class ResumeTool(BaseTool):
    def __init__(self) -> None:
        super().__init__(
            name="webpuppet_resume",
            description="Resume browser automation after a pause or manual intervention.",
        )

    async def run(self, arguments: dict[str, Any], context: ToolContext) -> ToolCallResult:
        context.intervention.resume()
        return ToolCallResult.text(
            "# Automation Resumed\n\n"
            "▶️ Automation has been resumed. Browser operations will continue."
        )
