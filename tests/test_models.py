"""
Unit tests for data models.
"""

from datetime import date, datetime

import pytest

from local_deals.models.deal import Deal, DealStatus
from local_deals.models.filter import FeedMode, FilterState
from local_deals.models.location import (
    LocationPrecision,
    LocationState,
    LocationStatus,
    UserCoordinate,
)
from local_deals.models.pin import PinItem


class TestDeal:
    """Test cases for the Deal model."""

    def test_valid_deal(self):
        deal = Deal(id="1", title="Dosa", latitude=12.97, longitude=77.59, rating=4.2)

        assert deal.validate() is True
        assert deal.coordinate == (12.97, 77.59)
        assert deal.is_located

    def test_unlocated_deal(self):
        deal = Deal(id="1", title="Dosa")

        assert deal.validate() is True
        assert deal.coordinate is None
        assert not deal.is_located

    def test_zero_coordinates_are_a_location(self):
        assert Deal(id="1", title="Null island", latitude=0.0, longitude=0.0).is_located

    @pytest.mark.parametrize(
        "fields,message",
        [
            ({"id": ""}, "ID"),
            ({"title": "   "}, "title"),
            ({"latitude": 12.9}, "both"),
            ({"latitude": 91.0, "longitude": 0.0}, "Latitude"),
            ({"latitude": 0.0, "longitude": 181.0}, "Longitude"),
            ({"rating": 5.5}, "Rating"),
            ({"rating_count": -1}, "Rating count"),
            ({"views": -1}, "View"),
            ({"clicks": -2}, "Click"),
            ({"title": "x" * 501}, "too long"),
            ({"title": 2024}, "must be text"),
        ],
    )
    def test_invalid_deal(self, fields, message):
        values = {"id": "1", "title": "Dosa"}
        values.update(fields)

        with pytest.raises(ValueError, match=message):
            Deal(**values).validate()

    def test_from_snake_case_record(self):
        deal = Deal.from_record(
            {
                "id": 42,
                "title": "Bike rental",
                "latitude": "12.97",
                "longitude": 77.59,
                "valid_till_date": "2025-06-30T00:00:00+00:00",
                "rating": "4.4",
                "rating_count": "12",
                "is_verified": False,
                "status": "ACTIVE",
                "offer_price": 499,
                "original_price": "799",
            }
        )

        assert deal.id == "42"
        assert deal.latitude == 12.97
        assert deal.valid_till_date == date(2025, 6, 30)
        assert deal.rating == 4.4
        assert deal.rating_count == 12
        assert deal.is_verified is False
        assert deal.status == DealStatus.ACTIVE
        assert deal.offer_price == "499"
        assert deal.original_price == "799"

    def test_from_camel_case_record(self):
        deal = Deal.from_record(
            {
                "id": "c1",
                "title": "Haircut",
                "lat": 12.93,
                "lng": 77.62,
                "validTillDate": date(2025, 7, 1),
                "ratingCount": 3,
                "isVerified": True,
                "discountLabel": "40% off",
            }
        )

        assert deal.coordinate == (12.93, 77.62)
        assert deal.valid_till_date == date(2025, 7, 1)
        assert deal.rating_count == 3
        assert deal.is_verified is True
        assert deal.discount_label == "40% off"

    def test_from_record_defaults(self):
        deal = Deal.from_record({"id": "x", "title": "Plain"})

        assert deal.description == ""
        assert deal.valid_till_date is None
        assert deal.rating is None
        assert deal.views == 0
        assert deal.status is None
        assert deal.is_verified is None

    def test_from_record_datetime_and_blank_values(self):
        deal = Deal.from_record(
            {
                "id": "x",
                "title": "Plain",
                "valid_till_date": datetime(2025, 6, 30, 18, 0),
                "latitude": "",
                "longitude": "",
            }
        )

        assert deal.valid_till_date == date(2025, 6, 30)
        assert deal.coordinate is None

    def test_unknown_status_is_treated_as_unknown(self):
        assert Deal.from_record({"id": "x", "title": "T", "status": "archived"}).status is None

    def test_from_record_converts_text_fields(self):
        deal = Deal.from_record(
            {
                "id": 7,
                "title": 2024,
                "description": 42,
                "area": 560038,
                "city": 411001,
                "category": 3,
                "discount_label": 40,
            }
        )

        assert deal.title == "2024"
        assert deal.description == "42"
        assert deal.area == "560038"
        assert deal.city == "411001"
        assert deal.category == "3"
        assert deal.discount_label == "40"
        assert deal.validate() is True

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (True, True),
            (False, False),
            ("true", True),
            ("False", False),
            (" TRUE ", True),
            (1, True),
            (0, False),
            ("1", True),
            ("0", False),
            ("", None),
        ],
    )
    def test_from_record_verified_flag(self, raw, expected):
        deal = Deal.from_record({"id": "x", "title": "T", "is_verified": raw})
        assert deal.is_verified is expected

    @pytest.mark.parametrize("raw", ["maybe", 2, 0.5])
    def test_from_record_rejects_unknown_verified_flag(self, raw):
        with pytest.raises(ValueError, match="boolean"):
            Deal.from_record({"id": "x", "title": "T", "isVerified": raw})


class TestFilterState:
    """Test cases for FilterState."""

    def test_defaults(self):
        state = FilterState()

        assert state.category == "all"
        assert state.radius_km == 5.0
        assert state.feed_mode == FeedMode.FOR_YOU
        assert state.near_me_active is False
        assert state.validate() is True

    @pytest.mark.parametrize(
        "fields",
        [
            {"radius_km": 0},
            {"radius_km": -3},
            {"radius_km": "5"},
            {"feed_mode": "trending"},
            {"category": ""},
        ],
    )
    def test_invalid_states(self, fields):
        with pytest.raises(ValueError):
            FilterState(**fields).validate()

    def test_is_immutable(self):
        with pytest.raises(AttributeError):
            FilterState().radius_km = 10

    def test_feed_mode_values(self):
        assert [mode.value for mode in FeedMode] == [
            "for-you",
            "top-rated",
            "ending-soon",
            "trending",
        ]


class TestLocationModels:
    """Test cases for coordinates and location state."""

    def test_coordinate_defaults_to_exact(self):
        assert UserCoordinate(12.97, 77.59).precision == LocationPrecision.EXACT

    @pytest.mark.parametrize("lat,lng", [(90.1, 0), (-91, 0), (0, 180.5), (0, -181)])
    def test_coordinate_out_of_range(self, lat, lng):
        with pytest.raises(ValueError):
            UserCoordinate(lat, lng).validate()

    def test_state_defaults(self):
        state = LocationState()

        assert state.status == LocationStatus.IDLE
        assert not state.has_coordinate

    def test_status_values(self):
        assert LocationStatus.IP_FALLBACK.value == "ip-fallback"
        assert {status.value for status in LocationStatus} == {
            "idle",
            "loading",
            "active",
            "ip-fallback",
            "denied",
            "error",
        }


class TestPinItem:
    """Test cases for PinItem."""

    def test_single_pin(self):
        deal = Deal(id="d1", title="Dosa", latitude=12.97, longitude=77.59)
        pin = PinItem(12.97, 77.59, 1, False, [deal])

        assert not pin.is_cluster
        assert pin.key == "deal-d1"

    def test_cluster_pin_key(self):
        pin = PinItem(12.971234, 77.591234, 4, True)

        assert pin.is_cluster
        assert pin.key == "cluster-12.97123-77.59123-4"
