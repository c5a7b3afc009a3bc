"""Human-in-the-loop intervention state machine.

Long-running browser automation sometimes needs a person to step in: a
CAPTCHA, a two-factor prompt, a login wall. The InterventionHandler tracks
whether automation is running or waiting for a human, and lets tools pause,
resume and report completion.

States:
    RUNNING -> WAITING_FOR_HUMAN   via pause() or request(reason)
    WAITING_FOR_HUMAN -> RESUMING  via complete(success, message)
    any -> RUNNING                 via resume()
    WAITING_FOR_HUMAN -> TIMED_OUT via wait_for_human() deadline
    any -> CANCELLED               via cancel()

TIMED_OUT and CANCELLED end the current episode; the next pause() or
request() starts a new one.

All mutation happens under a threading.Lock, and readers get an immutable
InterventionSnapshot, so concurrent tool calls never observe a half-updated
state (for example a WAITING state with the previous episode's reason).
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)

MANUAL_PAUSE_REASON = "Manual pause requested"


class InterventionState(Enum):
    """Automation state with respect to human intervention."""

    RUNNING = "running"
    WAITING_FOR_HUMAN = "waiting_for_human"
    RESUMING = "resuming"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class InterventionOutcome:
    """Result reported by complete().

    Attributes:
        success: Whether the human finished the step successfully.
        message: Optional free-text note from the human.
        reason: The reason that was pending when complete() was called.
        completed_at: Unix timestamp of the completion.
    """

    success: bool
    message: str | None
    reason: str | None
    completed_at: float


@dataclass(frozen=True)
class InterventionSnapshot:
    """Consistent view of the handler at one instant."""

    state: InterventionState
    reason: str | None
    last_outcome: InterventionOutcome | None
    episode: int


class InterventionHandler:
    """Tracks and mutates the intervention state.

    Methods are synchronous and cheap so they can be called from tools,
    from collaborator callbacks, or from another thread. wait_for_human()
    is the only coroutine; it blocks until the episode ends or times out.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state = InterventionState.RUNNING
        self._reason: str | None = None
        self._last_outcome: InterventionOutcome | None = None
        self._episode = 0
        self._watchers: list[tuple[asyncio.AbstractEventLoop, asyncio.Event]] = []

    def state(self) -> InterventionState:
        with self._lock:
            return self._state

    def current_reason(self) -> str | None:
        with self._lock:
            return self._reason

    def last_outcome(self) -> InterventionOutcome | None:
        with self._lock:
            return self._last_outcome

    def snapshot(self) -> InterventionSnapshot:
        """Return state, reason and last outcome read together."""
        with self._lock:
            return InterventionSnapshot(
                state=self._state,
                reason=self._reason,
                last_outcome=self._last_outcome,
                episode=self._episode,
            )

    @property
    def is_waiting(self) -> bool:
        return self.state() == InterventionState.WAITING_FOR_HUMAN

    def request(self, reason: str) -> None:
        """Signal that automation needs a human (e.g. a CAPTCHA appeared)."""
        with self._lock:
            if self._state != InterventionState.WAITING_FOR_HUMAN:
                self._episode += 1
            self._state = InterventionState.WAITING_FOR_HUMAN
            self._reason = reason
        logger.info("Intervention requested: %s", reason)

    def pause(self) -> None:
        """Pause automation so the browser can be used manually."""
        self.request(MANUAL_PAUSE_REASON)

    def complete(self, success: bool, message: str | None = None) -> None:
        """Record the outcome of an intervention and signal resumption."""
        with self._lock:
            self._last_outcome = InterventionOutcome(
                success=success,
                message=message,
                reason=self._reason,
                completed_at=time.time(),
            )
            self._state = InterventionState.RESUMING
            self._reason = None
        logger.info(
            "Intervention completed (success=%s): %s", success, message or "no message"
        )
        self._notify()

    def resume(self) -> None:
        """Return to normal running."""
        with self._lock:
            self._state = InterventionState.RUNNING
            self._reason = None
        logger.info("Automation resumed")
        self._notify()

    def cancel(self) -> None:
        """Abandon the current episode."""
        with self._lock:
            self._state = InterventionState.CANCELLED
            self._reason = None
        logger.info("Intervention cancelled")
        self._notify()

    async def wait_for_human(self, timeout: float | None = None) -> InterventionState:
        """Wait until the current episode is no longer WAITING_FOR_HUMAN.

        Args:
            timeout: Seconds to wait. None waits indefinitely.

        Returns:
            The state that ended the wait. On timeout the state is moved to
            TIMED_OUT (unless the episode ended at the same moment).
        """
        loop = asyncio.get_running_loop()
        event = asyncio.Event()
        with self._lock:
            if self._state != InterventionState.WAITING_FOR_HUMAN:
                return self._state
            episode = self._episode
            self._watchers.append((loop, event))

        try:
            await asyncio.wait_for(event.wait(), timeout)
        except asyncio.TimeoutError:
            with self._lock:
                if (
                    self._state == InterventionState.WAITING_FOR_HUMAN
                    and self._episode == episode
                ):
                    self._state = InterventionState.TIMED_OUT
                    self._reason = None
                    logger.warning("Intervention timed out after %ss", timeout)
        finally:
            with self._lock:
                if (loop, event) in self._watchers:
                    self._watchers.remove((loop, event))

        return self.state()

    def _notify(self) -> None:
        with self._lock:
            watchers = list(self._watchers)
            self._watchers.clear()
        for loop, event in watchers:
            if loop.is_closed():
                continue
            loop.call_soon_threadsafe(event.set)
