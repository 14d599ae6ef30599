"""Domain enumerations and the vibe catalogue."""

import enum


class RideStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


# No transition of any kind leaves these.
TERMINAL_STATUSES: frozenset[RideStatus] = frozenset(
    {RideStatus.COMPLETED, RideStatus.CANCELLED}
)


class VibeType(str, enum.Enum):
    CHILL = "CHILL"
    UPBEAT = "UPBEAT"
    FOCUSED = "FOCUSED"
    CUSTOM = "CUSTOM"


VIBE_CATALOGUE: list[dict[str, str]] = [
    {
        "id": VibeType.CHILL.value,
        "name": "Chill",
        "description": "Relaxed vibes for a smooth ride",
        "color": "#4A90E2",
    },
    {
        "id": VibeType.UPBEAT.value,
        "name": "Upbeat",
        "description": "High energy beats to keep the party going",
        "color": "#E24A90",
    },
    {
        "id": VibeType.FOCUSED.value,
        "name": "Focused",
        "description": "Productive sounds for your journey",
        "color": "#90E24A",
    },
    {
        "id": VibeType.CUSTOM.value,
        "name": "Custom",
        "description": "Your own playlist, your own mood",
        "color": "#E24A4A",
    },
]
