"""
Filter state models.
"""

from dataclasses import dataclass
from enum import Enum


class FeedMode(Enum):
    """Sort strategies for the home feed."""

    FOR_YOU = "for-you"
    TOP_RATED = "top-rated"
    ENDING_SOON = "ending-soon"
    TRENDING = "trending"


@dataclass(frozen=True)
class FilterState:
    """Viewing-session filter configuration passed into the ranking engine."""

    category: str = "all"
    search_text: str = ""
    radius_km: float = 5.0
    near_me_active: bool = False
    verified_only: bool = False
    feed_mode: FeedMode = FeedMode.FOR_YOU
    show_expired: bool = False

    def validate(self) -> bool:
        """Validate filter state data."""
        if not isinstance(self.radius_km, (int, float)):
            raise ValueError("radius_km must be a number")

        if self.radius_km <= 0:
            raise ValueError("radius_km must be positive")

        if not isinstance(self.feed_mode, FeedMode):
            raise ValueError("feed_mode must be a FeedMode enum")

        if not isinstance(self.category, str) or not self.category.strip():
            raise ValueError("category must be a non-empty string")

        return True
