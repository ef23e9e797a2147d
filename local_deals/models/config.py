"""
Configuration models for the system.
"""

from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlparse

from .filter import FeedMode


@dataclass
class RepositoryConfig:
    """Configuration for the deal repository."""

    type: str = "file"  # "file" or "rest"
    path: Optional[str] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    table: str = "deals"

    def validate(self) -> bool:
        """Validate repository configuration."""
        if self.type not in ["file", "rest"]:
            raise ValueError("Repository type must be 'file' or 'rest'")

        if self.type == "file":
            if not self.path or not self.path.strip():
                raise ValueError("File repository requires 'path'")

        if self.type == "rest":
            if not self.base_url:
                raise ValueError("REST repository requires 'base_url'")

            parsed_url = urlparse(self.base_url)
            if parsed_url.scheme not in ["http", "https"] or not parsed_url.netloc:
                raise ValueError(f"Invalid repository URL format: {self.base_url}")

            if not self.api_key:
                raise ValueError("REST repository requires 'api_key'")

            if not self.table or not self.table.strip():
                raise ValueError("REST repository table cannot be empty")

        return True


@dataclass
class LocationConfig:
    """Configuration for location acquisition."""

    timeout_ms: int = 10000
    max_cached_age_ms: int = 30000
    ip_fallback_on_denied: bool = True
    retain_coordinate: bool = True

    def validate(self) -> bool:
        """Validate location acquisition configuration."""
        if not isinstance(self.timeout_ms, int) or not (
            8000 <= self.timeout_ms <= 12000
        ):
            raise ValueError("Location timeout must be between 8000 and 12000 ms")

        if not isinstance(self.max_cached_age_ms, int) or not (
            0 <= self.max_cached_age_ms <= 60000
        ):
            raise ValueError("Max cached age must be between 0 and 60000 ms")

        return True


@dataclass
class ClusteringConfig:
    """Zoom thresholds and grid cell sizes for map clustering."""

    no_cluster_zoom: float = 12.5
    coarse_zoom: float = 9.0
    medium_zoom: float = 11.0
    coarse_cell_deg: float = 0.08
    medium_cell_deg: float = 0.04
    fine_cell_deg: float = 0.02

    def validate(self) -> bool:
        """Validate clustering configuration."""
        if not (self.coarse_zoom < self.medium_zoom < self.no_cluster_zoom):
            raise ValueError(
                "Zoom thresholds must satisfy coarse < medium < no_cluster"
            )

        for name in ["coarse_cell_deg", "medium_cell_deg", "fine_cell_deg"]:
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")

        return True


@dataclass
class FilterDefaults:
    """Initial filter values for a new viewing session."""

    radius_km: float = 5.0
    feed_mode: str = FeedMode.FOR_YOU.value
    show_expired: bool = False

    def validate(self) -> bool:
        """Validate filter defaults."""
        if not isinstance(self.radius_km, (int, float)) or self.radius_km <= 0:
            raise ValueError("Default radius must be a positive number")

        valid_modes = [mode.value for mode in FeedMode]
        if self.feed_mode not in valid_modes:
            raise ValueError(f"Feed mode must be one of: {valid_modes}")

        return True


@dataclass
class Configuration:
    """System configuration."""

    repository: RepositoryConfig
    location: LocationConfig = field(default_factory=LocationConfig)
    clustering: ClusteringConfig = field(default_factory=ClusteringConfig)
    defaults: FilterDefaults = field(default_factory=FilterDefaults)
    ip_geolocation_url: str = "https://ipapi.co/json/"
    log_level: str = "INFO"

    def validate(self) -> bool:
        """Validate system configuration."""
        parsed_url = urlparse(self.ip_geolocation_url)
        if parsed_url.scheme not in ["http", "https"] or not parsed_url.netloc:
            raise ValueError(
                f"Invalid IP geolocation URL format: {self.ip_geolocation_url}"
            )

        if self.log_level.upper() not in [
            "DEBUG",
            "INFO",
            "WARNING",
            "ERROR",
            "CRITICAL",
        ]:
            raise ValueError(f"Invalid log level: {self.log_level}")

        # Validate nested configurations
        self.repository.validate()
        self.location.validate()
        self.clustering.validate()
        self.defaults.validate()

        return True
