"""Zoom-dependent grid-bucket clustering of deals into map pins."""

import logging
from typing import Dict, Iterable, List, Optional

from ..models.config import ClusteringConfig
from ..models.deal import Deal
from ..models.pin import PinItem
from .geo import grid_key

logger = logging.getLogger(__name__)


class ClusteringEngine:
    """
    Groups nearby deals into cluster pins.

    Deals are bucketed into a lat/lng grid whose cell size depends on the
    zoom band; each bucket with more than one member becomes a cluster at
    the members' mean coordinate. O(n) and deterministic: buckets keep the
    order in which their first member appeared.
    """

    def __init__(self, config: Optional[ClusteringConfig] = None):
        self.config = config or ClusteringConfig()

    def cell_size_for_zoom(self, zoom_level: float) -> Optional[float]:
        """Grid cell size in degrees, or None when the zoom is past clustering."""
        if zoom_level >= self.config.no_cluster_zoom:
            return None
        if zoom_level < self.config.coarse_zoom:
            return self.config.coarse_cell_deg
        if zoom_level < self.config.medium_zoom:
            return self.config.medium_cell_deg
        return self.config.fine_cell_deg

    def build_pins(self, deals: Iterable[Deal], zoom_level: float) -> List[PinItem]:
        """
        Build map pins for the given deals at a zoom level.

        Unlocated deals never appear on the map and are skipped.
        """
        located = [deal for deal in deals if deal.coordinate is not None]
        cell_size = self.cell_size_for_zoom(zoom_level)

        if cell_size is None:
            return [self._single_pin(deal) for deal in located]

        buckets: Dict[str, List[Deal]] = {}
        for deal in located:
            key = grid_key(deal.latitude, deal.longitude, cell_size)
            buckets.setdefault(key, []).append(deal)

        pins = []
        for members in buckets.values():
            if len(members) == 1:
                pins.append(self._single_pin(members[0]))
            else:
                pins.append(self._cluster_pin(members))

        logger.debug(
            f"Built {len(pins)} pins from {len(located)} located deals "
            f"at zoom {zoom_level} (cell {cell_size} deg)"
        )
        return pins

    @staticmethod
    def _single_pin(deal: Deal) -> PinItem:
        return PinItem(
            latitude=deal.latitude,
            longitude=deal.longitude,
            count=1,
            has_verified=bool(deal.is_verified),
            member_deals=[deal],
        )

    @staticmethod
    def _cluster_pin(members: List[Deal]) -> PinItem:
        count = len(members)
        return PinItem(
            latitude=sum(d.latitude for d in members) / count,
            longitude=sum(d.longitude for d in members) / count,
            count=count,
            has_verified=any(d.is_verified for d in members),
            member_deals=list(members),
        )


_default_engine = ClusteringEngine()


def build_pins(deals: Iterable[Deal], zoom_level: float) -> List[PinItem]:
    """Module-level shortcut for ClusteringEngine.build_pins with default bands."""
    return _default_engine.build_pins(deals, zoom_level)
