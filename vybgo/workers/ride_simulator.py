"""
Ride Lifecycle Simulator
========================

Stands in for real driver dispatch by walking a freshly created ride
through a fixed timeline:

* +5 s   -> ``ACCEPTED``
* +15 s  -> ``IN_PROGRESS``
* +30 s  -> ``COMPLETED`` (then the ride's timers are dropped)

Each step is scheduled independently at ``start`` time; none is chained
to the previous one.  A step that fires for a ride which has meanwhile
reached a terminal state leaves the status alone.

Failure policy
--------------
Best effort.  A step that cannot read or write the ride is logged and
lost: nothing is retried and nothing reaches the caller of ``start``,
which returned long before.  A ride whose step was lost simply stays in
its last written status.
"""

from __future__ import annotations

import enum
import logging
from typing import Optional, Protocol, Sequence

from vybgo.config import settings
from vybgo.domain.entities import Ride, RideNotFoundError
from vybgo.domain.enums import RideStatus

from .timers import TimerRegistry

logger = logging.getLogger(__name__)


class RideStore(Protocol):
    async def find_by_id(self, ride_id: str) -> Optional[Ride]: ...

    async def update_status(self, ride_id: str, status: RideStatus) -> Ride: ...


class TransitionOutcome(str, enum.Enum):
    APPLIED = "APPLIED"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_TERMINAL = "ALREADY_TERMINAL"
    FAILED = "FAILED"


Timeline = Sequence[tuple[float, RideStatus]]


def default_timeline() -> Timeline:
    return (
        (settings.simulation_accepted_after_seconds, RideStatus.ACCEPTED),
        (settings.simulation_in_progress_after_seconds, RideStatus.IN_PROGRESS),
        (settings.simulation_completed_after_seconds, RideStatus.COMPLETED),
    )


class RideSimulator:
    def __init__(
        self,
        store: RideStore,
        registry: TimerRegistry,
        timeline: Optional[Timeline] = None,
    ):
        self.store = store
        self.registry = registry
        self.timeline = tuple(timeline) if timeline is not None else default_timeline()

    # ── Public API ────────────────────────────────────────────────────

    def start(self, ride_id: str) -> None:
        """Schedule every timeline step for *ride_id* and return at once."""
        if ride_id in self.registry:
            # Steps are appended, not replaced.
            logger.warning("Ride %s already has a running simulation", ride_id)

        for delay, status in self.timeline:
            self.registry.schedule(ride_id, delay, self._step(ride_id, status))

        logger.info("Started simulation for ride %s", ride_id)

    def stop(self, ride_id: str) -> None:
        """Cancel the ride's pending steps.  The stored status is untouched."""
        self.registry.cancel_all(ride_id)
        logger.info("Stopped simulation for ride %s", ride_id)

    async def apply_transition(
        self, ride_id: str, target: RideStatus
    ) -> TransitionOutcome:
        try:
            ride = await self.store.find_by_id(ride_id)
            if ride is None:
                logger.info("Ride %s not found, skipping status update", ride_id)
                return TransitionOutcome.NOT_FOUND

            if ride.is_terminal:
                logger.info(
                    "Ride %s is already %s, stopping simulation",
                    ride_id,
                    RideStatus(ride.status).value,
                )
                self.registry.cancel_all(ride_id)
                return TransitionOutcome.ALREADY_TERMINAL

            await self.store.update_status(ride_id, target)
        except RideNotFoundError:
            logger.info("Ride %s disappeared before update to %s", ride_id, target.value)
            return TransitionOutcome.NOT_FOUND
        except Exception:
            logger.exception("Error updating ride %s status to %s", ride_id, target.value)
            return TransitionOutcome.FAILED

        logger.info("Ride %s status updated to %s", ride_id, target.value)
        if target is RideStatus.COMPLETED:
            self.registry.cancel_all(ride_id)
        return TransitionOutcome.APPLIED

    # ── Internals ─────────────────────────────────────────────────────

    def _step(self, ride_id: str, status: RideStatus):
        async def action() -> None:
            await self.apply_transition(ride_id, status)
            if status is RideStatus.COMPLETED:
                self.registry.cancel_all(ride_id)

        return action
