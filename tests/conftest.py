"""
Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the Local Deals test suite.
"""

import tempfile
from datetime import date
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from local_deals.models.deal import Deal, DealStatus
from local_deals.models.filter import FilterState
from local_deals.models.location import LocationPrecision, UserCoordinate
from local_deals.utils import error_handling

# Bengaluru city centre
CITY_CENTER = (12.9716, 77.5946)

TODAY = date(2025, 6, 15)


def make_deal(deal_id, **fields):
    """Build a Deal with sensible defaults for the fields a test ignores."""
    fields.setdefault("title", f"Deal {deal_id}")
    fields.setdefault("description", f"Description for deal {deal_id}")
    return Deal(id=str(deal_id), **fields)


# Test data fixtures
@pytest.fixture
def today():
    """Fixed reference day for expiry checks."""
    return TODAY


@pytest.fixture
def sample_deals():
    """A mixed set of located, unlocated, verified and paused deals."""
    return [
        make_deal(
            "biryani",
            title="Weekend biryani combo",
            category="food",
            city="Bengaluru",
            area="Indiranagar",
            latitude=12.9784,
            longitude=77.6408,
            rating=4.5,
            rating_count=120,
            views=340,
            clicks=41,
            is_verified=True,
            status=DealStatus.ACTIVE,
            valid_till_date=date(2025, 6, 30),
        ),
        make_deal(
            "haircut",
            title="Haircut and beard trim",
            category="salon",
            city="Bengaluru",
            area="Koramangala",
            latitude=12.9352,
            longitude=77.6245,
            rating=4.1,
            rating_count=36,
            views=95,
            clicks=12,
            status=DealStatus.ACTIVE,
            valid_till_date=date(2025, 6, 16),
        ),
        make_deal(
            "gym",
            title="Monthly gym membership",
            category="gym",
            city="Bengaluru",
            area="HSR Layout",
            latitude=12.9116,
            longitude=77.6474,
            rating=3.9,
            rating_count=18,
            views=210,
            clicks=30,
        ),
        make_deal(
            "phone",
            title="Phone screen replacement",
            category="electronics",
            city="Bengaluru",
            area="SP Road",
            views=50,
            clicks=3,
        ),
        make_deal(
            "paused-spa",
            title="Spa day",
            category="spa",
            latitude=12.97,
            longitude=77.59,
            status=DealStatus.PAUSED,
        ),
    ]


@pytest.fixture
def default_filters():
    return FilterState()


@pytest.fixture
def city_center_coordinate():
    return UserCoordinate(
        lat=CITY_CENTER[0], lng=CITY_CENTER[1], precision=LocationPrecision.EXACT
    )


# Mock fixtures
@pytest.fixture
def mock_device_provider():
    """Device provider that resolves to the city centre."""
    provider = AsyncMock()
    provider.request_current_position.return_value = CITY_CENTER
    return provider


@pytest.fixture
def mock_ip_provider():
    """IP provider that resolves to a coarse city position."""
    provider = AsyncMock()
    provider.lookup_by_ip.return_value = (12.9, 77.5)
    return provider


# Temporary directory fixtures
@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def reset_error_globals():
    """Give every test a fresh error tracker and degradation manager."""
    error_handling._error_tracker = None
    error_handling._degradation_manager = None
    yield
    error_handling._error_tracker = None
    error_handling._degradation_manager = None


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "unit: mark test as unit test")


def pytest_collection_modifyitems(config, items):
    """Add the unit marker to every test not marked otherwise."""
    for item in items:
        if not any(
            marker.name in ["integration", "slow"] for marker in item.iter_markers()
        ):
            item.add_marker(pytest.mark.unit)
