"""
Protocol interfaces for the Local Deals discovery system.

This module defines the protocol interfaces that establish system
boundaries: the external collaborators the core consumes (deal repository,
geolocation providers) and the engines it exposes to presentation layers.
"""

from datetime import date
from typing import Any, Callable, Iterable, List, Optional, Protocol, Tuple

from .models.deal import Deal
from .models.filter import FilterState
from .models.location import LocationState, UserCoordinate
from .models.pin import PinItem


class IDealRepository(Protocol):
    """Protocol for read-only deal sources."""

    def fetch_deals(self, **criteria: Any) -> List[Deal]:
        """Return an unordered set of deals matching caller criteria."""
        ...


class IDeviceGeolocationProvider(Protocol):
    """Protocol for single-shot device geolocation."""

    async def request_current_position(
        self, timeout_ms: int, max_cached_age_ms: int
    ) -> Tuple[float, float]:
        """Return (lat, lng) or raise PermissionDeniedError / GeolocationError."""
        ...


class IIPGeolocationProvider(Protocol):
    """Protocol for best-effort IP geolocation."""

    async def lookup_by_ip(self) -> Optional[Tuple[float, float]]:
        """Return (lat, lng), or None when the lookup fails."""
        ...


class IFilterEngine(Protocol):
    """Protocol for filtering and ranking deals."""

    def filter_and_rank(
        self,
        deals: Iterable[Deal],
        filter_state: FilterState,
        user_coordinate: Optional[UserCoordinate] = None,
        now: Optional[date] = None,
    ) -> List[Deal]:
        """Apply the filter pipeline and return the ordered deals."""
        ...


class IClusteringEngine(Protocol):
    """Protocol for building map pins."""

    def build_pins(self, deals: Iterable[Deal], zoom_level: float) -> List[PinItem]:
        """Group deals into single and cluster pins for a zoom level."""
        ...


class ILocationStrategy(Protocol):
    """Protocol for the near-me location acquisition strategy."""

    @property
    def state(self) -> LocationState:
        """Current observable state."""
        ...

    @property
    def coordinate(self) -> Optional[UserCoordinate]:
        """Resolved coordinate while active."""
        ...

    async def activate(self) -> LocationState:
        """Turn near-me on and resolve a coordinate."""
        ...

    def deactivate(self) -> LocationState:
        """Turn near-me off."""
        ...

    def subscribe(self, listener: Callable[[LocationState], None]) -> None:
        """Observe state changes."""
        ...
