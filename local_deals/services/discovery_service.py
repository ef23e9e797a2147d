"""
Discovery service that ties deals, filters and location together.

This service is the session-level façade the list, map and spotlight views
talk to. It owns the current FilterState and the near-me strategy, and
recomputes outputs on demand from whatever coordinate is available at call
time.
"""

import logging
from dataclasses import replace
from datetime import date
from typing import Any, List, Optional, Tuple

from ..components.clustering import ClusteringEngine
from ..components.filter_engine import FilterEngine
from ..interfaces import IDealRepository, ILocationStrategy
from ..models.deal import Deal
from ..models.filter import FeedMode, FilterState
from ..models.location import LocationState, UserCoordinate
from ..models.pin import PinItem

logger = logging.getLogger(__name__)


class DiscoveryService:
    """
    Session façade over the ranking, clustering and location components.

    The core components are pure; the only mutable state is held here: the
    loaded deal snapshot, the filter state and the strategy's activation.
    """

    def __init__(
        self,
        repository: IDealRepository,
        location_strategy: Optional[ILocationStrategy] = None,
        filter_engine: Optional[FilterEngine] = None,
        clustering_engine: Optional[ClusteringEngine] = None,
        filter_state: Optional[FilterState] = None,
    ):
        self.repository = repository
        self.location_strategy = location_strategy
        self.filter_engine = filter_engine or FilterEngine()
        self.clustering_engine = clustering_engine or ClusteringEngine()
        self.filter_state = filter_state or FilterState()
        self.deals: List[Deal] = []

        self.stats = {
            "loads": 0,
            "recomputes": 0,
        }

    def load_deals(self, **criteria: Any) -> List[Deal]:
        """Fetch a fresh deal snapshot from the repository."""
        self.deals = list(self.repository.fetch_deals(**criteria))
        self.stats["loads"] += 1
        logger.info(f"Loaded {len(self.deals)} deals")
        return self.deals

    def update_filters(self, **changes: Any) -> FilterState:
        """
        Apply filter changes; the latest change always wins.

        near_me_active is owned by toggle_near_me, which also drives the
        location strategy.

        Raises:
            ValueError: If the resulting filter state is invalid or
                near_me_active is passed
        """
        if "near_me_active" in changes:
            raise ValueError("Use toggle_near_me to change near_me_active")

        if isinstance(changes.get("feed_mode"), str):
            changes["feed_mode"] = FeedMode(changes["feed_mode"])

        new_state = replace(self.filter_state, **changes)
        new_state.validate()
        self.filter_state = new_state
        return self.filter_state

    async def toggle_near_me(self, active: bool) -> LocationState:
        """
        Turn the near-me filter on or off.

        Activation never raises: an unresolvable location leaves near-me on
        with no coordinate, and ranking falls back to non-geo criteria.
        """
        self.filter_state = replace(self.filter_state, near_me_active=active)

        if self.location_strategy is None:
            logger.warning("Near-me requested without a location strategy")
            return LocationState()

        if not active:
            return self.location_strategy.deactivate()

        state = await self.location_strategy.activate()
        logger.info(f"Near-me location status: {state.status.value}")
        return state

    @property
    def user_coordinate(self) -> Optional[UserCoordinate]:
        if self.location_strategy is None or not self.filter_state.near_me_active:
            return None
        return self.location_strategy.coordinate

    def list_view(self, now: Optional[date] = None) -> List[Deal]:
        """Filtered and ranked deals for the home feed."""
        self.stats["recomputes"] += 1
        return self.filter_engine.filter_and_rank(
            self.deals, self.filter_state, self.user_coordinate, now
        )

    def list_view_with_distances(
        self, now: Optional[date] = None
    ) -> List[Tuple[Deal, Optional[float]]]:
        return self.filter_engine.annotate_distances(
            self.list_view(now), self.user_coordinate
        )

    def map_view(self, zoom_level: float, now: Optional[date] = None) -> List[PinItem]:
        """Pins for the map at the given zoom, built from the filtered list."""
        return self.clustering_engine.build_pins(self.list_view(now), zoom_level)

    def spotlight(self, limit: int = 3, now: Optional[date] = None) -> List[Deal]:
        """Top-rated picks among the deals currently visible in the feed."""
        ranked = self.filter_engine.order_by_mode(self.list_view(now), FeedMode.TOP_RATED)
        return ranked[:limit]
