"""
Geolocation providers used by the location acquisition strategy.

This module provides the IP-geolocation HTTP client and simple device
position providers for hosts without a real geolocation API (the CLI and
tests).
"""

from typing import Any, Dict, Optional, Tuple

import aiohttp
from aiohttp import ClientTimeout

from ..utils.error_handling import (
    ErrorCategory,
    ErrorSeverity,
    RetryConfig,
    with_error_handling,
)
from ..utils.logging import get_logger

logger = get_logger("ip.geolocation")


class GeolocationError(Exception):
    """Device geolocation failed for a reason other than permission."""


class PermissionDeniedError(GeolocationError):
    """The user refused the geolocation permission."""


class IPGeolocationClient:
    """Best-effort approximate location from the caller's network address."""

    def __init__(
        self,
        url: str = "https://ipapi.co/json/",
        timeout: int = 5,
        retry_config: Optional[RetryConfig] = None,
    ):
        """
        Initialize IP geolocation client.

        Args:
            url: JSON endpoint returning the caller's approximate position
            timeout: Request timeout in seconds
            retry_config: Optional retry behaviour for transient failures
        """
        self.url = url
        self.timeout = timeout
        self.session: Optional[aiohttp.ClientSession] = None
        self._owns_session = False

        fetch = with_error_handling(
            component="ip.geolocation",
            category=ErrorCategory.EXTERNAL_SERVICE,
            severity=ErrorSeverity.LOW,
            retry_config=retry_config,
            fallback_value=None,
            suppress_exceptions=True,
        )(self._fetch_position)
        self._fetch = fetch

    async def __aenter__(self):
        """Async context manager entry."""
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=ClientTimeout(total=self.timeout),
                headers={"User-Agent": "Local-Deals/1.0 (IP Geolocation)"},
            )
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        if self.session and self._owns_session:
            await self.session.close()
        self.session = None
        self._owns_session = False

    async def lookup_by_ip(self) -> Optional[Tuple[float, float]]:
        """
        Look up the approximate position of this host.

        Returns:
            (lat, lng) tuple, or None when the service fails in any way
        """
        position = await self._fetch()
        if position is None:
            logger.warning("IP geolocation unavailable", extra={"url": self.url})
        else:
            logger.info("IP geolocation resolved", extra={"url": self.url})
        return position

    async def _fetch_position(self) -> Tuple[float, float]:
        if self.session is None:
            async with aiohttp.ClientSession(
                timeout=ClientTimeout(total=self.timeout),
                headers={"User-Agent": "Local-Deals/1.0 (IP Geolocation)"},
            ) as session:
                payload = await self._get_json(session)
        else:
            payload = await self._get_json(self.session)

        return self.parse_position(payload)

    async def _get_json(self, session: aiohttp.ClientSession) -> Dict[str, Any]:
        async with session.get(self.url) as response:
            response.raise_for_status()
            return await response.json(content_type=None)

    @staticmethod
    def parse_position(payload: Dict[str, Any]) -> Tuple[float, float]:
        """
        Extract a coordinate from an IP-geolocation response body.

        Raises:
            ValueError: If the body carries no usable coordinate
        """
        if not isinstance(payload, dict):
            raise ValueError("IP geolocation response is not a JSON object")

        lat = payload.get("latitude", payload.get("lat"))
        lng = payload.get("longitude", payload.get("lon", payload.get("lng")))

        if lat is None or lng is None:
            raise ValueError("IP geolocation response has no coordinates")

        lat, lng = float(lat), float(lng)
        if not (-90 <= lat <= 90) or not (-180 <= lng <= 180):
            raise ValueError(f"IP geolocation coordinates out of range: {lat}, {lng}")

        return (lat, lng)


class FixedPositionProvider:
    """Device provider that always reports the same position."""

    def __init__(self, lat: float, lng: float):
        self.lat = lat
        self.lng = lng

    async def request_current_position(
        self, timeout_ms: int, max_cached_age_ms: int
    ) -> Tuple[float, float]:
        return (self.lat, self.lng)


class DeniedPositionProvider:
    """Device provider for a host where the user refused location access."""

    async def request_current_position(
        self, timeout_ms: int, max_cached_age_ms: int
    ) -> Tuple[float, float]:
        raise PermissionDeniedError("Location permission denied")
