"""Shared execution context handed to every tool.

One ToolContext is created per server and shared by reference. Everything
in it is immutable after construction except the automation slot, which is
filled lazily on first use and can be reset so the next use rebuilds it.
"""

from __future__ import annotations

import logging

from webpuppet_mcp.automation.detection import BrowserDetector
from webpuppet_mcp.automation.devtools import create_devtools_automation
from webpuppet_mcp.automation.interfaces import AutomationFactory, AutomationHandle
from webpuppet_mcp.automation.screening import ScreeningConfig
from webpuppet_mcp.core.errors import AutomationError, WebpuppetError
from webpuppet_mcp.core.intervention import InterventionHandler
from webpuppet_mcp.core.policy import PermissionGate
from webpuppet_mcp.core.rwlock import AsyncRWLock

logger = logging.getLogger(__name__)


class ToolContext:
    """Collaborators and shared state for tool execution.

    Attributes:
        permissions: Permission gate consulted by tools.
        screening_config: Screening settings passed to the automation factory.
        intervention: Human-in-the-loop state machine.
        headless: Whether the browser runs without a window.
        detector: Browser detector used by the detection tool.
    """

    def __init__(
        self,
        permissions: PermissionGate,
        *,
        screening_config: ScreeningConfig | None = None,
        intervention: InterventionHandler | None = None,
        headless: bool = True,
        detector: BrowserDetector | None = None,
        automation_factory: AutomationFactory | None = None,
    ) -> None:
        self.permissions = permissions
        self.screening_config = screening_config or ScreeningConfig()
        self.intervention = intervention or InterventionHandler()
        self.headless = headless
        self.detector = detector or BrowserDetector()
        self._automation_factory = automation_factory or create_devtools_automation
        self._automation: AutomationHandle | None = None
        self._lock = AsyncRWLock()

    async def get_automation(self) -> AutomationHandle:
        """Return the automation handle, building it on first use.

        Concurrent callers share one construction: the fast path takes a
        read lock, and the build re-checks the slot under the write lock.

        Raises:
            AutomationError: If the factory fails.
        """
        async with self._lock.read():
            if self._automation is not None:
                return self._automation

        async with self._lock.write():
            if self._automation is None:
                logger.info("Starting browser automation (headless=%s)", self.headless)
                try:
                    self._automation = await self._automation_factory(
                        self.headless, self.screening_config
                    )
                except WebpuppetError:
                    raise
                except Exception as e:
                    raise AutomationError(
                        f"Failed to start browser automation: {type(e).__name__}: {e}"
                    ) from e
            return self._automation

    async def has_automation(self) -> bool:
        async with self._lock.read():
            return self._automation is not None

    async def reset_automation(self) -> None:
        """Close and drop the handle; the next get_automation() rebuilds it."""
        async with self._lock.write():
            handle, self._automation = self._automation, None
        if handle is not None:
            try:
                await handle.close()
            except Exception as e:
                logger.warning("Error closing browser automation: %s", e)

    async def close(self) -> None:
        await self.reset_automation()
