"""
Read-only deal repository adapters.

Deals are owned by the hosted backend; the discovery core only ever reads
them. Two sources are supported: a local YAML/JSON export (used for the CLI,
demos and tests) and the backend's PostgREST-style HTTP API.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import requests
import yaml
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..interfaces import IDealRepository
from ..models.config import RepositoryConfig
from ..models.deal import Deal, DealStatus

logger = logging.getLogger(__name__)

DEAL_COLUMNS = [
    "id",
    "title",
    "description",
    "latitude",
    "longitude",
    "category",
    "city",
    "area",
    "valid_till_date",
    "rating",
    "rating_count",
    "views",
    "clicks",
    "is_verified",
    "status",
    "offer_price",
    "original_price",
    "discount_label",
    "image",
]


def records_to_deals(records: List[Dict[str, Any]], source: str) -> List[Deal]:
    """Convert raw rows to deals, skipping rows that fail validation."""
    deals = []
    for index, record in enumerate(records):
        try:
            deal = Deal.from_record(record)
            deal.validate()
        except (ValueError, TypeError, OverflowError) as e:
            logger.warning(f"Skipping invalid deal row {index} from {source}: {e}")
            continue
        deals.append(deal)
    return deals


class FileDealRepository(IDealRepository):
    """Deals loaded from a YAML or JSON export."""

    def __init__(self, path: str):
        self.path = Path(path)

    def fetch_deals(self, **criteria: Any) -> List[Deal]:
        """
        Load deals from the export file.

        Supported criteria: category (raw string equality after lowercasing)
        and status.

        Raises:
            ValueError: If the file is missing or cannot be parsed
        """
        records = self._read_records()
        deals = records_to_deals(records, str(self.path))

        category = criteria.get("category")
        if category and category != "all":
            deals = [
                d for d in deals if (d.category or "").strip().lower() == category.lower()
            ]

        status = criteria.get("status")
        if status:
            wanted = DealStatus(status) if isinstance(status, str) else status
            deals = [d for d in deals if d.status == wanted]

        logger.info(f"Loaded {len(deals)} deals from {self.path}")
        return deals

    def _read_records(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            raise ValueError(f"Deal file not found: {self.path}")

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                if self.path.suffix == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in deal file: {e}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in deal file: {e}")

        if data is None:
            return []
        if isinstance(data, dict):
            data = data.get("deals", [])
        if not isinstance(data, list):
            raise ValueError("Deal file must contain a list of deals")

        return [row for row in data if isinstance(row, dict)]


class RestDealRepository(IDealRepository):
    """Deals read from the backend's PostgREST endpoint."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = "deals",
        timeout: int = 10,
        max_retries: int = 3,
    ):
        """
        Initialize REST repository.

        Args:
            base_url: Project URL, e.g. https://xyz.supabase.co
            api_key: Public (anon) API key
            table: Table holding deal rows
            timeout: Request timeout in seconds
            max_retries: Retry attempts for transient HTTP failures
        """
        self.base_url = base_url.rstrip("/")
        self.table = table
        self.timeout = timeout

        self.session = requests.Session()
        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)
        self.session.headers.update(
            {
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
                "User-Agent": "Local-Deals/1.0 (Deal Repository)",
            }
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    def build_params(self, **criteria: Any) -> Dict[str, str]:
        """Translate caller criteria into PostgREST query parameters."""
        params = {"select": ",".join(DEAL_COLUMNS), "order": "created_at.desc"}

        category = criteria.get("category")
        if category and category != "all":
            params["category"] = f"eq.{category}"

        status = criteria.get("status")
        if status:
            value = status.value if isinstance(status, DealStatus) else status
            params["status"] = f"eq.{value}"

        valid_from = criteria.get("valid_from")
        if valid_from:
            params["valid_till_date"] = f"gte.{valid_from.isoformat()}"

        if criteria.get("located_only"):
            params["latitude"] = "not.is.null"
            params["longitude"] = "not.is.null"

        return params

    def fetch_deals(self, **criteria: Any) -> List[Deal]:
        """
        Fetch deals from the backend.

        Raises:
            requests.RequestException: On network or HTTP errors
            ValueError: If the response body is not a list of rows
        """
        params = self.build_params(**criteria)
        logger.debug(f"Fetching deals from {self.endpoint} with {params}")

        response = self.session.get(self.endpoint, params=params, timeout=self.timeout)
        response.raise_for_status()

        rows = response.json()
        if not isinstance(rows, list):
            raise ValueError("Deal endpoint did not return a list")

        deals = records_to_deals(rows, self.endpoint)
        logger.info(f"Fetched {len(deals)} deals from {self.endpoint}")
        return deals


def create_repository(config: RepositoryConfig) -> IDealRepository:
    """Build the repository described by the configuration."""
    if config.type == "rest":
        return RestDealRepository(
            base_url=config.base_url, api_key=config.api_key, table=config.table
        )
    return FileDealRepository(config.path)
