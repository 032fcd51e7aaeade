"""
Debounce scheduler for interactive re-filtering.

A ``Debouncer`` coalesces a burst of calls into one execution after a quiet
period. It is a two-state machine::

    IDLE    --schedule-->  PENDING
    PENDING --schedule-->  PENDING   (pending call cancelled and replaced)
    PENDING --fire------>  IDLE      (the latest call runs)
    PENDING --cancel---->  IDLE      (the pending call is dropped)

The timer is an asyncio ``TimerHandle`` from ``loop.call_later``; no threads
are involved. All calls must come from the loop's thread, so the state is
not lock-protected.

A superseded call never runs: "last write wins".
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Any, Optional

from broker_matcher.errors import SchedulerError

logger = logging.getLogger(__name__)

DEFAULT_QUIET_PERIOD_S = 0.5


class DebounceState(StrEnum):
    IDLE = "idle"
    PENDING = "pending"


class Debouncer:
    """Run only the most recent scheduled call after ``quiet_period`` seconds.

    Args:
        quiet_period: Seconds without a new ``schedule()`` before firing.
        loop:         Event loop to schedule on. Defaults to the running loop
                      at ``schedule()`` time.
    """

    def __init__(
        self,
        quiet_period: float = DEFAULT_QUIET_PERIOD_S,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        if quiet_period < 0:
            raise ValueError(f"quiet_period must be >= 0, got {quiet_period}.")
        self._quiet_period = quiet_period
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def quiet_period(self) -> float:
        return self._quiet_period

    @property
    def state(self) -> DebounceState:
        return DebounceState.IDLE if self._handle is None else DebounceState.PENDING

    def schedule(self, fn: Callable[..., Any], *args: Any) -> None:
        """Schedule ``fn(*args)``, replacing any pending call.

        Raises:
            SchedulerError: If no loop was given and none is running.
        """
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                raise SchedulerError(
                    "Debounced scheduling needs a running event loop; "
                    "use the immediate path outside of one."
                ) from None

        if self._handle is not None:
            self._handle.cancel()
            logger.debug("Pending call superseded")

        self._handle = loop.call_later(self._quiet_period, self._fire, fn, args)

    def cancel(self) -> bool:
        """Drop the pending call, if any.

        Returns:
            ``True`` if a pending call was cancelled.
        """
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        return True

    def _fire(self, fn: Callable[..., Any], args: tuple[Any, ...]) -> None:
        self._handle = None
        fn(*args)
