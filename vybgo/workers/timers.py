"""Per-ride registry of pending scheduled transitions."""

from __future__ import annotations

import logging

from .scheduling import Action, CancelHandle, Scheduler

logger = logging.getLogger(__name__)


class TimerRegistry:
    """Tracks, per ride id, the handles of not-yet-fired actions.

    One instance is owned by the application and shared by every
    simulation; all of them go through the same scheduler.
    """

    def __init__(self, scheduler: Scheduler):
        self.scheduler = scheduler
        self._timers: dict[str, list[CancelHandle]] = {}

    def schedule(self, ride_id: str, delay: float, action: Action) -> None:
        handle = self.scheduler.call_later(delay, action)
        self._timers.setdefault(ride_id, []).append(handle)

    def cancel_all(self, ride_id: str) -> None:
        """Cancel every pending action for *ride_id*.  No-op if none."""
        for handle in self._timers.pop(ride_id, []):
            handle.cancel()

    def cancel_everything(self) -> None:
        for ride_id in list(self._timers):
            self.cancel_all(ride_id)

    def pending(self, ride_id: str) -> int:
        return len(self._timers.get(ride_id, []))

    def active_rides(self) -> list[str]:
        return list(self._timers)

    def __contains__(self, ride_id: object) -> bool:
        return ride_id in self._timers

    def __len__(self) -> int:
        return len(self._timers)
