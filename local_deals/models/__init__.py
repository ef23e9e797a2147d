"""
Data models for the Local Deals discovery system.

This module contains all data classes and type definitions used throughout
the application for representing deals, locations, filters and map pins.
"""

from .config import (
    ClusteringConfig,
    Configuration,
    FilterDefaults,
    LocationConfig,
    RepositoryConfig,
)
from .deal import Deal, DealStatus
from .filter import FeedMode, FilterState
from .location import LocationPrecision, LocationState, LocationStatus, UserCoordinate
from .pin import PinItem

__all__ = [
    "Deal",
    "DealStatus",
    "FeedMode",
    "FilterState",
    "UserCoordinate",
    "LocationPrecision",
    "LocationStatus",
    "LocationState",
    "PinItem",
    "Configuration",
    "RepositoryConfig",
    "LocationConfig",
    "ClusteringConfig",
    "FilterDefaults",
]
