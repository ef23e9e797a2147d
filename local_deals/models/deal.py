"""
Deal data models for the Local Deals discovery system.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from dateutil import parser as date_parser


class DealStatus(Enum):
    """Publication status of a deal."""

    ACTIVE = "active"
    PAUSED = "paused"


@dataclass
class Deal:
    """A time-bound local offer with optional geolocation."""

    id: str
    title: str
    description: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    category: Optional[str] = None
    city: Optional[str] = None
    area: Optional[str] = None
    valid_till_date: Optional[date] = None
    rating: Optional[float] = None
    rating_count: int = 0
    views: int = 0
    clicks: int = 0
    is_verified: Optional[bool] = None
    status: Optional[DealStatus] = None
    offer_price: Optional[str] = None
    original_price: Optional[str] = None
    discount_label: Optional[str] = None
    image: Optional[str] = None

    @property
    def coordinate(self) -> Optional[Tuple[float, float]]:
        """Latitude/longitude pair, or None for an unlocated deal."""
        if self.latitude is None or self.longitude is None:
            return None
        return (self.latitude, self.longitude)

    @property
    def is_located(self) -> bool:
        return self.coordinate is not None

    def validate(self) -> bool:
        """Validate the deal data."""
        if not self.id or not str(self.id).strip():
            raise ValueError("Deal ID cannot be empty")

        if not isinstance(self.title, str):
            raise ValueError("Deal title must be text")

        if not self.title.strip():
            raise ValueError("Deal title cannot be empty")

        # Coordinates come in pairs
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("Latitude and longitude must both be set or both be empty")

        if self.latitude is not None and not (-90 <= self.latitude <= 90):
            raise ValueError("Latitude must be between -90 and 90")

        if self.longitude is not None and not (-180 <= self.longitude <= 180):
            raise ValueError("Longitude must be between -180 and 180")

        if self.rating is not None and not (0 <= self.rating <= 5):
            raise ValueError("Rating must be between 0 and 5")

        if self.rating_count < 0:
            raise ValueError("Rating count cannot be negative")

        if self.views < 0:
            raise ValueError("View count cannot be negative")

        if self.clicks < 0:
            raise ValueError("Click count cannot be negative")

        if len(self.title) > 500:
            raise ValueError("Deal title too long (max 500 characters)")

        return True

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Deal":
        """
        Build a deal from a repository row.

        Accepts both snake_case column names and camelCase keys. Missing
        optional fields fall back to their defaults.

        Args:
            record: Raw row as returned by the deal repository

        Returns:
            Deal instance (not validated)
        """

        def pick(*keys: str) -> Any:
            for key in keys:
                if key in record and record[key] is not None:
                    return record[key]
            return None

        deal_id = pick("id")
        status = pick("status")

        return cls(
            id=str(deal_id) if deal_id is not None else "",
            title=_to_text(pick("title")) or "",
            description=_to_text(pick("description")) or "",
            latitude=_to_float(pick("latitude", "lat")),
            longitude=_to_float(pick("longitude", "lng", "lon")),
            category=_to_text(pick("category")),
            city=_to_text(pick("city")),
            area=_to_text(pick("area")),
            valid_till_date=_to_date(pick("valid_till_date", "validTillDate")),
            rating=_to_float(pick("rating")),
            rating_count=int(pick("rating_count", "ratingCount") or 0),
            views=int(pick("views") or 0),
            clicks=int(pick("clicks") or 0),
            is_verified=_to_bool(pick("is_verified", "isVerified")),
            status=_to_status(status),
            offer_price=_to_text(pick("offer_price", "offerPrice")),
            original_price=_to_text(pick("original_price", "originalPrice")),
            discount_label=_to_text(pick("discount_label", "discountLabel")),
            image=_to_text(pick("image")),
        )


def _to_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _to_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date_parser.parse(str(value)).date()


def _to_status(value: Any) -> Optional[DealStatus]:
    if value is None:
        return None
    if isinstance(value, DealStatus):
        return value
    try:
        return DealStatus(str(value).strip().lower())
    except ValueError:
        # Unknown status strings are treated as "status not known"
        return None


def _to_bool(value: Any) -> Optional[bool]:
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("true", "1"):
            return True
        if text in ("false", "0"):
            return False
        if text == "":
            return None
    raise ValueError(f"Invalid boolean flag: {value!r}")
