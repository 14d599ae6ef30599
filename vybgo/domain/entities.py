"""
Domain entities.

``Ride`` is the plain view of a ride record handed to the lifecycle
simulator by a ride store; it carries no persistence state.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import RideStatus, VibeType


class RideNotFoundError(Exception):
    """Raised when a ride id has no corresponding record."""

    def __init__(self, ride_id: str):
        super().__init__(f"Ride {ride_id} not found")
        self.ride_id = ride_id


@dataclass
class Ride:
    id: str
    user_id: str
    pickup: str
    dropoff: str
    vibe: VibeType = VibeType.CHILL
    status: RideStatus = RideStatus.PENDING
    created_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return RideStatus(self.status).is_terminal
