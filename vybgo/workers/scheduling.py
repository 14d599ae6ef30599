"""
Deferred-action scheduling.

The simulator never touches the event loop directly; it asks a
``Scheduler`` to run an async action after a delay and keeps the
returned handle so the action can be cancelled before it fires.
Tests substitute a virtual-time scheduler.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Protocol

logger = logging.getLogger(__name__)

Action = Callable[[], Awaitable[None]]


class CancelHandle(Protocol):
    def cancel(self) -> None: ...

    def cancelled(self) -> bool: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, action: Action) -> CancelHandle: ...


class AsyncioScheduler:
    """Schedules actions on the running event loop.

    Cancelling a handle only stops an action that has not fired yet; once
    fired, the action runs to completion as a task tracked here so that
    shutdown can wait for it.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()

    def call_later(self, delay: float, action: Action) -> asyncio.TimerHandle:
        loop = asyncio.get_running_loop()
        return loop.call_later(delay, self._fire, action)

    def _fire(self, action: Action) -> None:
        task = asyncio.ensure_future(action())
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(
                "Scheduled action failed", exc_info=task.exception()
            )

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every action that has already fired."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
