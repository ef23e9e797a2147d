"""Geo math helpers: great-circle distance and grid bucketing."""

import math
from typing import Tuple

EARTH_RADIUS_KM = 6371.0

# Initial map view (Bengaluru city centre)
DEFAULT_CENTER: Tuple[float, float] = (12.9716, 77.5946)


def distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine great-circle distance between two points in kilometers."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    h = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Clamp rounding noise so asin stays defined for antipodal points
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def grid_key(lat: float, lng: float, cell_size_deg: float) -> str:
    """
    Bucket a coordinate into a fixed-size lat/lng grid cell.

    Args:
        lat: Latitude in decimal degrees
        lng: Longitude in decimal degrees
        cell_size_deg: Cell edge in degrees

    Returns:
        Cell key of the form "<lat_index>:<lng_index>"
    """
    if cell_size_deg <= 0:
        raise ValueError("cell_size_deg must be positive")

    return f"{_round_half_up(lat / cell_size_deg)}:{_round_half_up(lng / cell_size_deg)}"


def directions_url(lat: float, lng: float) -> str:
    """Google Maps directions link to the given destination."""
    return f"https://www.google.com/maps/dir/?api=1&destination={lat},{lng}"
