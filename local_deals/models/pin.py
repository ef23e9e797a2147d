"""
Map pin models.
"""

from dataclasses import dataclass, field
from typing import List

from .deal import Deal


@dataclass
class PinItem:
    """A map marker: either a single deal or a cluster of nearby deals."""

    latitude: float
    longitude: float
    count: int
    has_verified: bool
    member_deals: List[Deal] = field(default_factory=list)

    @property
    def is_cluster(self) -> bool:
        return self.count > 1

    @property
    def key(self) -> str:
        """Stable marker key for the presentation layer."""
        if self.is_cluster:
            return f"cluster-{self.latitude:.5f}-{self.longitude:.5f}-{self.count}"
        return f"deal-{self.member_deals[0].id}"
