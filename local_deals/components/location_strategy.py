"""
Location acquisition strategy for the near-me feature.

Resolves a user coordinate through a fixed fallback chain: cached
coordinate, device geolocation, IP approximation, failure state. Provider
failures never escape this module; they become LocationState values.
"""

import asyncio
from typing import Callable, List, Optional, Tuple

from ..interfaces import IDeviceGeolocationProvider, IIPGeolocationProvider
from ..models.config import LocationConfig
from ..models.location import (
    LocationPrecision,
    LocationState,
    LocationStatus,
    UserCoordinate,
)
from ..utils.error_handling import (
    ErrorCategory,
    ErrorSeverity,
    get_degradation_manager,
    get_error_tracker,
)
from ..utils.logging import get_logger
from .geolocation_providers import PermissionDeniedError

logger = get_logger("location.strategy")

StateListener = Callable[[LocationState], None]

PROXIMITY_FEATURE = "near_me"


class LocationAcquisitionStrategy:
    """
    State machine behind the near-me toggle.

    States: idle -> loading -> active | ip-fallback | denied | error.
    A lookup that finishes after deactivate(), or after a newer activate(),
    is discarded instead of committed.
    """

    def __init__(
        self,
        device_provider: Optional[IDeviceGeolocationProvider],
        ip_provider: Optional[IIPGeolocationProvider],
        config: Optional[LocationConfig] = None,
    ):
        """
        Initialize the strategy.

        Args:
            device_provider: Device geolocation API, or None when the
                platform has no geolocation capability
            ip_provider: IP geolocation collaborator, or None to disable
                the approximate fallback
            config: Timeouts and fallback options
        """
        self.device_provider = device_provider
        self.ip_provider = ip_provider
        self.config = config or LocationConfig()

        self._state = LocationState()
        self._cached: Optional[UserCoordinate] = None
        self._active = False
        self._generation = 0
        self._listeners: List[StateListener] = []

    @property
    def state(self) -> LocationState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def coordinate(self) -> Optional[UserCoordinate]:
        """Coordinate usable for ranking: only while the toggle is on."""
        if not self._active:
            return None
        return self._state.coordinate

    def subscribe(self, listener: StateListener) -> None:
        """Register a callback invoked with every new state."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def activate(self) -> LocationState:
        """
        Turn near-me on and resolve a coordinate.

        Returns:
            The state after this activation settled (or the current state if
            the activation was superseded while in flight)
        """
        self._generation += 1
        generation = self._generation
        self._active = True

        if self._cached is not None:
            logger.info(
                "Reusing cached coordinate",
                extra={"precision": self._cached.precision.value},
            )
            self._set_state(self._state_for(self._cached))
            return self._state

        self._set_state(LocationState(status=LocationStatus.LOADING))
        result = await self._acquire(generation)

        if generation != self._generation or not self._active:
            logger.info("Discarding stale location result")
            return self._state

        if result.coordinate is not None:
            self._cached = result.coordinate
            get_degradation_manager().restore_component(PROXIMITY_FEATURE)
        else:
            get_degradation_manager().degrade_component(
                PROXIMITY_FEATURE,
                reason=result.error or result.status.value,
                fallback_behavior="Non-geo filtering only",
                severity=ErrorSeverity.LOW,
            )

        self._set_state(result)
        return self._state

    def deactivate(self) -> LocationState:
        """Turn near-me off. The last coordinate is kept if configured."""
        self._generation += 1
        self._active = False

        if not self.config.retain_coordinate:
            self._cached = None

        self._set_state(LocationState(status=LocationStatus.IDLE))
        return self._state

    async def refresh(self) -> LocationState:
        """Drop the cached coordinate and acquire a fresh one."""
        self._cached = None
        return await self.activate()

    async def _acquire(self, generation: int) -> LocationState:
        if self.device_provider is None:
            logger.info("No device geolocation, trying IP approximation")
            return await self._ip_fallback(failure_status=LocationStatus.ERROR)

        try:
            position = await asyncio.wait_for(
                self.device_provider.request_current_position(
                    self.config.timeout_ms, self.config.max_cached_age_ms
                ),
                timeout=self.config.timeout_ms / 1000,
            )
            coordinate = self._make_coordinate(position, LocationPrecision.EXACT)
            logger.info("Device geolocation resolved")
            return LocationState(status=LocationStatus.ACTIVE, coordinate=coordinate)

        except PermissionDeniedError as e:
            self._record(e, "Location permission denied", ErrorSeverity.LOW)
            denied = LocationState(status=LocationStatus.DENIED, error=str(e))
            if generation == self._generation:
                self._set_state(denied)

            if not self.config.ip_fallback_on_denied:
                return denied
            return await self._ip_fallback(failure_status=LocationStatus.DENIED)

        except asyncio.TimeoutError as e:
            self._record(e, "Device geolocation timed out", ErrorSeverity.LOW)
            return await self._ip_fallback(failure_status=LocationStatus.ERROR)

        except Exception as e:
            self._record(e, f"Device geolocation failed: {e}", ErrorSeverity.MEDIUM)
            return await self._ip_fallback(failure_status=LocationStatus.ERROR)

    async def _ip_fallback(self, failure_status: LocationStatus) -> LocationState:
        error = "Location could not be resolved"
        if failure_status == LocationStatus.DENIED:
            error = "Location permission denied"

        if self.ip_provider is None:
            return LocationState(status=failure_status, error=error)

        try:
            position = await self.ip_provider.lookup_by_ip()
        except Exception as e:
            self._record(e, f"IP geolocation failed: {e}", ErrorSeverity.LOW)
            position = None

        if position is None:
            return LocationState(status=failure_status, error=error)

        try:
            coordinate = self._make_coordinate(position, LocationPrecision.APPROXIMATE)
        except ValueError as e:
            self._record(e, f"IP geolocation returned bad data: {e}", ErrorSeverity.LOW)
            return LocationState(status=failure_status, error=error)

        logger.info("Using approximate IP location")
        return LocationState(status=LocationStatus.IP_FALLBACK, coordinate=coordinate)

    @staticmethod
    def _make_coordinate(
        position: Tuple[float, float], precision: LocationPrecision
    ) -> UserCoordinate:
        lat, lng = position
        coordinate = UserCoordinate(lat=float(lat), lng=float(lng), precision=precision)
        coordinate.validate()
        return coordinate

    @staticmethod
    def _state_for(coordinate: UserCoordinate) -> LocationState:
        if coordinate.precision == LocationPrecision.EXACT:
            return LocationState(status=LocationStatus.ACTIVE, coordinate=coordinate)
        return LocationState(status=LocationStatus.IP_FALLBACK, coordinate=coordinate)

    @staticmethod
    def _record(error: BaseException, message: str, severity: ErrorSeverity) -> None:
        get_error_tracker().record_error(
            component="location.strategy",
            category=ErrorCategory.GEOLOCATION,
            severity=severity,
            message=message,
            exception=error,
        )

    def _set_state(self, state: LocationState) -> None:
        self._state = state
        logger.debug("Location state changed", extra={"status": state.status.value})
        for listener in list(self._listeners):
            listener(state)
