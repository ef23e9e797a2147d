"""Filter engine for narrowing and ranking deals for the list and map views."""

import logging
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

from ..models.deal import Deal, DealStatus
from ..models.filter import FeedMode, FilterState
from ..models.location import UserCoordinate
from .categories import category_matches_filter, get_category_label
from .geo import distance_km

logger = logging.getLogger(__name__)

# Radius choices offered by the near-me selector
RADIUS_OPTIONS_KM: Tuple[int, ...] = (1, 3, 5, 10)


class FilterEngine:
    """
    Applies the filter pipeline to a set of deals.

    Stages run in a fixed order, each narrowing or reordering the previous
    stage's output: de-duplication, status/expiry, category, text search,
    verified-only, proximity, then feed-mode ordering. Proximity ordering
    replaces feed-mode ordering whenever near-me is active with a resolved
    coordinate. All sorts are stable and the input list is never modified.
    """

    def filter_and_rank(
        self,
        deals: Iterable[Deal],
        filter_state: FilterState,
        user_coordinate: Optional[UserCoordinate] = None,
        now: Optional[date] = None,
    ) -> List[Deal]:
        """
        Produce the ordered, filtered deal list for a filter state.

        Args:
            deals: Deal records from the repository
            filter_state: Current viewing-session filters
            user_coordinate: Resolved user position, if any
            now: Reference day for expiry checks (defaults to today)

        Returns:
            New list of deals; empty when nothing matches
        """
        today = now or date.today()

        result = self._deduplicate(deals)
        total = len(result)

        result = [d for d in result if self._is_visible(d, filter_state, today)]
        result = [
            d for d in result if category_matches_filter(d.category, filter_state.category)
        ]

        query = (filter_state.search_text or "").strip().lower()
        if query:
            result = [d for d in result if self._matches_search(d, query)]

        if filter_state.verified_only:
            result = [d for d in result if d.is_verified is True]

        if filter_state.near_me_active and user_coordinate is not None:
            result = self._apply_proximity(
                result, user_coordinate, filter_state.radius_km
            )
        else:
            result = self.order_by_mode(result, filter_state.feed_mode)

        logger.debug(
            f"filter_and_rank kept {len(result)}/{total} deals "
            f"(category={filter_state.category}, mode={filter_state.feed_mode.value}, "
            f"near_me={filter_state.near_me_active and user_coordinate is not None})"
        )

        return result

    def annotate_distances(
        self, deals: Sequence[Deal], user_coordinate: Optional[UserCoordinate]
    ) -> List[Tuple[Deal, Optional[float]]]:
        """Pair each deal with its distance from the user, when both are known."""
        annotated = []
        for deal in deals:
            coordinate = deal.coordinate
            if user_coordinate is None or coordinate is None:
                annotated.append((deal, None))
            else:
                annotated.append(
                    (
                        deal,
                        distance_km(
                            user_coordinate.lat,
                            user_coordinate.lng,
                            coordinate[0],
                            coordinate[1],
                        ),
                    )
                )
        return annotated

    @staticmethod
    def _deduplicate(deals: Iterable[Deal]) -> List[Deal]:
        seen = set()
        unique = []
        for deal in deals:
            if deal.id in seen:
                continue
            seen.add(deal.id)
            unique.append(deal)
        return unique

    @staticmethod
    def _is_visible(deal: Deal, filter_state: FilterState, today: date) -> bool:
        """Status and expiry check."""
        if deal.status is not None and deal.status != DealStatus.ACTIVE:
            return False

        if filter_state.show_expired or deal.valid_till_date is None:
            return True

        # A deal is still live on its last valid day
        return deal.valid_till_date >= today

    @staticmethod
    def _matches_search(deal: Deal, query: str) -> bool:
        fields = [
            deal.title,
            deal.description,
            deal.city,
            deal.area,
            deal.category,
            get_category_label(deal.category) if deal.category else None,
        ]
        return any(query in field.lower() for field in fields if field)

    @staticmethod
    def _apply_proximity(
        deals: List[Deal], user_coordinate: UserCoordinate, radius_km: float
    ) -> List[Deal]:
        in_range = []
        for deal in deals:
            coordinate = deal.coordinate
            if coordinate is None:
                continue

            distance = distance_km(
                user_coordinate.lat, user_coordinate.lng, coordinate[0], coordinate[1]
            )
            if distance <= radius_km:
                in_range.append((distance, deal))

        in_range.sort(key=lambda pair: pair[0])
        return [deal for _, deal in in_range]

    @staticmethod
    def order_by_mode(deals: Sequence[Deal], feed_mode: FeedMode) -> List[Deal]:
        """Stable feed-mode ordering; for-you keeps the incoming order."""
        if feed_mode == FeedMode.TOP_RATED:
            return sorted(
                deals, key=lambda d: (-(d.rating or 0.0), -(d.rating_count or 0))
            )

        if feed_mode == FeedMode.ENDING_SOON:
            # Deals without an end date sort last
            return sorted(
                deals,
                key=lambda d: (
                    d.valid_till_date is None,
                    d.valid_till_date or date.max,
                ),
            )

        if feed_mode == FeedMode.TRENDING:
            return sorted(deals, key=lambda d: -((d.clicks or 0) + (d.views or 0)))

        return list(deals)


_default_engine = FilterEngine()


def filter_and_rank(
    deals: Iterable[Deal],
    filter_state: FilterState,
    user_coordinate: Optional[UserCoordinate] = None,
    now: Optional[date] = None,
) -> List[Deal]:
    """Module-level shortcut for FilterEngine.filter_and_rank."""
    return _default_engine.filter_and_rank(deals, filter_state, user_coordinate, now)
