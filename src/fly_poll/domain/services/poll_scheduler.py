"""Timer that drives automatic polling of an incomplete search."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import StrEnum

logger = logging.getLogger(__name__)

PollCallback = Callable[[], Awaitable[None]]


class SchedulerState(StrEnum):
    """Scheduler states."""

    IDLE = "idle"
    ARMED = "armed"
    FIRING = "firing"


class PollScheduler:
    """
    Single-slot scheduler for the next automatic poll.

    At most one timer is pending and at most one fired callback is running.
    Arming again replaces the pending timer.
    """

    def __init__(self) -> None:
        self._state = SchedulerState.IDLE
        self._timer: asyncio.TimerHandle | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_armed(self) -> bool:
        return self._state is SchedulerState.ARMED

    def arm(self, delay: float, callback: PollCallback) -> None:
        """
        Schedule `callback` to run after `delay` seconds.

        Args:
            delay: Delay in seconds
            callback: Coroutine function invoked when the timer fires
        """
        if self._timer is not None:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(delay, self._fire, callback)
        self._state = SchedulerState.ARMED
        logger.debug("poll armed", extra={"delay": delay})

    def disarm(self) -> None:
        """
        Cancel the pending timer.

        A fired callback that is still running is cancelled as well, unless
        disarm is called from inside it.
        """
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        task = self._task
        if task is not None and task is not asyncio.current_task():
            if not task.done():
                task.cancel()
            self._task = None

        self._state = SchedulerState.IDLE

    def _fire(self, callback: PollCallback) -> None:
        self._timer = None
        self._state = SchedulerState.FIRING
        task = asyncio.ensure_future(callback())
        self._task = task
        task.add_done_callback(self._on_fired)

    def _on_fired(self, task: asyncio.Task[None]) -> None:
        if self._task is task:
            self._task = None
            # The callback may have re-armed meanwhile
            if self._state is SchedulerState.FIRING:
                self._state = SchedulerState.IDLE

        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                "Scheduled poll raised",
                exc_info=error,
                extra={"error": str(error)},
            )
