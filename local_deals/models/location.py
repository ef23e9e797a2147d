"""
Location models for the near-me feature.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class LocationPrecision(Enum):
    """How the user coordinate was obtained."""

    EXACT = "exact"
    APPROXIMATE = "approximate"


class LocationStatus(Enum):
    """States of the location acquisition strategy."""

    IDLE = "idle"
    LOADING = "loading"
    ACTIVE = "active"
    IP_FALLBACK = "ip-fallback"
    DENIED = "denied"
    ERROR = "error"


@dataclass(frozen=True)
class UserCoordinate:
    """Session-scoped user position. Never persisted."""

    lat: float
    lng: float
    precision: LocationPrecision = LocationPrecision.EXACT

    def validate(self) -> bool:
        """Validate coordinate ranges."""
        if not (-90 <= self.lat <= 90):
            raise ValueError("Latitude must be between -90 and 90")

        if not (-180 <= self.lng <= 180):
            raise ValueError("Longitude must be between -180 and 180")

        if not isinstance(self.precision, LocationPrecision):
            raise ValueError("precision must be a LocationPrecision enum")

        return True


@dataclass(frozen=True)
class LocationState:
    """Observable snapshot of the location acquisition strategy."""

    status: LocationStatus = LocationStatus.IDLE
    coordinate: Optional[UserCoordinate] = None
    error: Optional[str] = None

    @property
    def has_coordinate(self) -> bool:
        return self.coordinate is not None
