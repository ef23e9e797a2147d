"""
Core components for the Local Deals discovery system.

This module contains the geo math, category catalogue, filtering and
ranking engine, map clustering engine and location acquisition strategy.
"""

from .clustering import ClusteringEngine, build_pins
from .filter_engine import FilterEngine, filter_and_rank
from .geo import directions_url, distance_km, grid_key
from .geolocation_providers import (
    GeolocationError,
    IPGeolocationClient,
    PermissionDeniedError,
)
from .location_strategy import LocationAcquisitionStrategy

__all__ = [
    "distance_km",
    "grid_key",
    "directions_url",
    "FilterEngine",
    "filter_and_rank",
    "ClusteringEngine",
    "build_pins",
    "LocationAcquisitionStrategy",
    "IPGeolocationClient",
    "GeolocationError",
    "PermissionDeniedError",
]
