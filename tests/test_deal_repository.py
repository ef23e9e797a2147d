"""Unit tests for the deal repository adapters."""

import json
from datetime import date
from unittest.mock import Mock, patch

import pytest
import requests
import yaml

from local_deals.models.config import RepositoryConfig
from local_deals.models.deal import DealStatus
from local_deals.services.deal_repository import (
    DEAL_COLUMNS,
    FileDealRepository,
    RestDealRepository,
    create_repository,
    records_to_deals,
)

ROWS = [
    {
        "id": "d1",
        "title": "Masala dosa breakfast",
        "category": "food",
        "latitude": 12.9716,
        "longitude": 77.5946,
        "valid_till_date": "2025-06-30",
        "is_verified": True,
        "status": "active",
    },
    {
        "id": "d2",
        "title": "Spa afternoon",
        "category": "Spa",
        "status": "paused",
    },
    {
        "id": "d3",
        "title": "Bike rental",
        "category": "rentals-travel",
        "validTillDate": "2025-07-01",
        "ratingCount": 4,
        "status": "active",
    },
]


@pytest.fixture
def yaml_file(temp_dir):
    path = temp_dir / "deals.yaml"
    path.write_text(yaml.safe_dump({"deals": ROWS}), encoding="utf-8")
    return path


@pytest.fixture
def json_file(temp_dir):
    path = temp_dir / "deals.json"
    path.write_text(json.dumps(ROWS), encoding="utf-8")
    return path


class TestRecordsToDeals:
    """Test cases for row conversion."""

    def test_valid_rows_are_converted(self):
        deals = records_to_deals(ROWS, "test")

        assert [d.id for d in deals] == ["d1", "d2", "d3"]
        assert deals[0].valid_till_date == date(2025, 6, 30)
        assert deals[2].valid_till_date == date(2025, 7, 1)
        assert deals[2].rating_count == 4

    def test_invalid_rows_are_skipped(self):
        rows = [
            {"id": "ok", "title": "Fine"},
            {"id": "", "title": "No id"},
            {"id": "half", "title": "Half located", "latitude": 12.9},
            {"id": "bad-rating", "title": "Too good", "rating": 7},
            {"id": "bad-date", "title": "Bad date", "valid_till_date": "not a date"},
        ]

        deals = records_to_deals(rows, "test")

        assert [d.id for d in deals] == ["ok"]


class TestFileDealRepository:
    """Test cases for FileDealRepository."""

    def test_fetch_from_yaml_mapping(self, yaml_file):
        deals = FileDealRepository(str(yaml_file)).fetch_deals()
        assert [d.id for d in deals] == ["d1", "d2", "d3"]

    def test_fetch_from_json_list(self, json_file):
        deals = FileDealRepository(str(json_file)).fetch_deals()
        assert [d.id for d in deals] == ["d1", "d2", "d3"]

    def test_status_criteria(self, yaml_file):
        repo = FileDealRepository(str(yaml_file))

        assert [d.id for d in repo.fetch_deals(status="active")] == ["d1", "d3"]
        assert [d.id for d in repo.fetch_deals(status=DealStatus.PAUSED)] == ["d2"]

    def test_category_criteria(self, yaml_file):
        repo = FileDealRepository(str(yaml_file))

        assert [d.id for d in repo.fetch_deals(category="spa")] == ["d2"]
        assert len(repo.fetch_deals(category="all")) == 3

    def test_empty_file(self, temp_dir):
        path = temp_dir / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert FileDealRepository(str(path)).fetch_deals() == []

    def test_missing_file(self, temp_dir):
        with pytest.raises(ValueError, match="not found"):
            FileDealRepository(str(temp_dir / "nope.yaml")).fetch_deals()

    def test_invalid_yaml(self, temp_dir):
        path = temp_dir / "broken.yaml"
        path.write_text("deals: [unclosed", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid YAML"):
            FileDealRepository(str(path)).fetch_deals()

    def test_invalid_json(self, temp_dir):
        path = temp_dir / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid JSON"):
            FileDealRepository(str(path)).fetch_deals()

    def test_badly_typed_rows_do_not_abort_load(self, temp_dir):
        path = temp_dir / "deals.yaml"
        path.write_text(
            "- {id: 1, title: 2024}\n"
            "- {id: 2, title: Good deal, area: 560038}\n"
            "- {id: 3, title: Odd flag, is_verified: maybe}\n",
            encoding="utf-8",
        )

        deals = FileDealRepository(str(path)).fetch_deals()

        assert [d.id for d in deals] == ["1", "2"]
        assert deals[0].title == "2024"
        assert deals[1].area == "560038"

    def test_scalar_document_is_rejected(self, temp_dir):
        path = temp_dir / "scalar.yaml"
        path.write_text("just a string", encoding="utf-8")

        with pytest.raises(ValueError, match="list of deals"):
            FileDealRepository(str(path)).fetch_deals()


class TestRestDealRepository:
    """Test cases for RestDealRepository."""

    @pytest.fixture
    def repo(self):
        return RestDealRepository(
            base_url="https://project.supabase.co/", api_key="anon-key"
        )

    def test_endpoint_and_headers(self, repo):
        assert repo.endpoint == "https://project.supabase.co/rest/v1/deals"
        assert repo.session.headers["apikey"] == "anon-key"
        assert repo.session.headers["Authorization"] == "Bearer anon-key"

    def test_default_params(self, repo):
        params = repo.build_params()

        assert params == {
            "select": ",".join(DEAL_COLUMNS),
            "order": "created_at.desc",
        }

    def test_filter_params(self, repo):
        params = repo.build_params(
            category="food",
            status=DealStatus.ACTIVE,
            valid_from=date(2025, 6, 15),
            located_only=True,
        )

        assert params["category"] == "eq.food"
        assert params["status"] == "eq.active"
        assert params["valid_till_date"] == "gte.2025-06-15"
        assert params["latitude"] == "not.is.null"
        assert params["longitude"] == "not.is.null"

    def test_all_category_adds_no_filter(self, repo):
        assert "category" not in repo.build_params(category="all")

    def test_fetch_deals(self, repo):
        response = Mock()
        response.json.return_value = ROWS
        response.raise_for_status = Mock()

        with patch.object(repo.session, "get", return_value=response) as mock_get:
            deals = repo.fetch_deals(status="active")

        assert [d.id for d in deals] == ["d1", "d2", "d3"]
        args, kwargs = mock_get.call_args
        assert args == ("https://project.supabase.co/rest/v1/deals",)
        assert kwargs["params"]["status"] == "eq.active"
        assert kwargs["timeout"] == 10

    def test_fetch_deals_http_error(self, repo):
        response = Mock()
        response.raise_for_status.side_effect = requests.HTTPError("401")

        with patch.object(repo.session, "get", return_value=response):
            with pytest.raises(requests.HTTPError):
                repo.fetch_deals()

    def test_fetch_deals_unexpected_body(self, repo):
        response = Mock()
        response.json.return_value = {"message": "relation does not exist"}

        with patch.object(repo.session, "get", return_value=response):
            with pytest.raises(ValueError):
                repo.fetch_deals()


class TestCreateRepository:
    """Test cases for the repository factory."""

    def test_file_repository(self):
        repo = create_repository(RepositoryConfig(type="file", path="data/deals.yaml"))
        assert isinstance(repo, FileDealRepository)

    def test_rest_repository(self):
        repo = create_repository(
            RepositoryConfig(
                type="rest", base_url="https://project.supabase.co", api_key="k"
            )
        )
        assert isinstance(repo, RestDealRepository)
        assert repo.table == "deals"
