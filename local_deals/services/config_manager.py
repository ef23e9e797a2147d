"""
Configuration management for the Local Deals discovery system.
"""

import json
import os
import re
from typing import Any, Dict, Optional

import yaml

from ..models.config import (
    ClusteringConfig,
    Configuration,
    FilterDefaults,
    LocationConfig,
    RepositoryConfig,
)

ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

EXAMPLE_CONFIG = "config/config.example.yaml"


class ConfigurationManager:
    """Loads, validates and hot-reloads the YAML/JSON configuration file."""

    SEARCH_PATHS = [
        "config/config.yaml",
        "config/config.yml",
        "config/config.json",
        "config.yaml",
        "config.yml",
        "config.json",
    ]

    def __init__(self, config_path: Optional[str] = None):
        """
        Args:
            config_path: Explicit file to use; SEARCH_PATHS are tried when None

        Raises:
            ValueError: If no path was given and none of SEARCH_PATHS exists
        """
        self.config_path = config_path or self._find_config_file()
        self._config: Optional[Configuration] = None
        self._last_modified: Optional[float] = None

    def _find_config_file(self) -> str:
        found = next((path for path in self.SEARCH_PATHS if os.path.exists(path)), None)
        if found:
            return found

        if os.path.exists(EXAMPLE_CONFIG):
            hint = f"Copy '{EXAMPLE_CONFIG}' to 'config/config.yaml' and adjust it."
        else:
            hint = "Create one of: " + ", ".join(self.SEARCH_PATHS)
        raise ValueError(f"No configuration file found. {hint}")

    def load_config(self) -> Configuration:
        """
        Read, expand, parse and validate the configuration file.

        Raises:
            FileNotFoundError: If the configured path does not exist
            ValueError: For unreadable, malformed or invalid configuration
        """
        if not os.path.exists(self.config_path):
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        try:
            config = self._build(self._read_file(self.config_path), strict=True)
        except ValueError as e:
            raise ValueError(f"Error loading configuration: {e}")

        self._config = config
        self._last_modified = os.path.getmtime(self.config_path)
        return config

    def _build(self, raw_config: Dict[str, Any], strict: bool) -> Configuration:
        config = self._parse_config(self._expand_env_vars(raw_config, strict))
        config.validate()
        return config

    @staticmethod
    def _read_file(path: str) -> Dict[str, Any]:
        """Parse a YAML or JSON file into a mapping (empty file gives {})."""
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()

        try:
            data = json.loads(text) if path.endswith(".json") else yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file: {e}")

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError("Configuration root must be a mapping")
        return data

    def _expand_env_vars(self, obj: Any, strict: bool = True) -> Any:
        """
        Replace ${VAR} references in string values with environment values.

        In strict mode an unset variable is an error; otherwise the
        reference is left in place.
        """
        if isinstance(obj, dict):
            return {key: self._expand_env_vars(value, strict) for key, value in obj.items()}
        if isinstance(obj, list):
            return [self._expand_env_vars(item, strict) for item in obj]
        if not isinstance(obj, str):
            return obj

        def substitute(match: "re.Match") -> str:
            value = os.getenv(match.group(1))
            if value is not None:
                return value
            if strict:
                raise ValueError(f"Environment variable '{match.group(1)}' not found")
            return match.group(0)

        return ENV_PATTERN.sub(substitute, obj)

    @staticmethod
    def _section(raw_config: Dict[str, Any], name: str) -> Dict[str, Any]:
        section = raw_config.get(name) or {}
        if not isinstance(section, dict):
            raise ValueError(f"Configuration section '{name}' must be a mapping")
        return section

    def _parse_config(self, raw_config: Dict[str, Any]) -> Configuration:
        """Map the raw sections onto the configuration dataclasses."""
        repository = self._section(raw_config, "repository")
        location = self._section(raw_config, "location")
        clustering = self._section(raw_config, "clustering")
        defaults = self._section(raw_config, "defaults")
        system = self._section(raw_config, "system")

        try:
            return Configuration(
                repository=RepositoryConfig(
                    type=repository.get("type", "file"),
                    path=repository.get("path"),
                    base_url=repository.get("base_url"),
                    api_key=repository.get("api_key"),
                    table=repository.get("table", "deals"),
                ),
                location=LocationConfig(
                    **{
                        key: location[key]
                        for key in LocationConfig.__dataclass_fields__
                        if key in location
                    }
                ),
                clustering=ClusteringConfig(
                    **{
                        key: float(clustering[key])
                        for key in ClusteringConfig.__dataclass_fields__
                        if key in clustering
                    }
                ),
                defaults=FilterDefaults(
                    **{
                        key: defaults[key]
                        for key in FilterDefaults.__dataclass_fields__
                        if key in defaults
                    }
                ),
                ip_geolocation_url=system.get(
                    "ip_geolocation_url", Configuration.ip_geolocation_url
                ),
                log_level=system.get("log_level", Configuration.log_level),
            )
        except (TypeError, AttributeError) as e:
            raise ValueError(f"Error parsing configuration: {e}")

    def get_config(self) -> Configuration:
        """Current configuration, loaded on first use."""
        if self._config is None:
            return self.load_config()
        return self._config

    def reload_if_changed(self) -> bool:
        """
        Reload when the file's mtime moved forward.

        A broken new file leaves the previous configuration in place.

        Returns:
            True if a new configuration was loaded
        """
        if not os.path.exists(self.config_path):
            return False

        modified = os.path.getmtime(self.config_path)
        if self._last_modified is not None and modified <= self._last_modified:
            return False

        try:
            self.load_config()
        except ValueError:
            return False
        return True

    def validate_config_file(self, config_path: str) -> bool:
        """
        Check a configuration file without making it current.

        Unset environment variables are tolerated here so that templates
        can be checked on machines without the secrets.

        Raises:
            ValueError: Describing the first problem found
        """
        if not os.path.exists(config_path):
            raise ValueError(f"Configuration file not found: {config_path}")

        try:
            self._build(self._read_file(config_path), strict=False)
        except ValueError as e:
            raise ValueError(f"Configuration validation failed: {e}")
        return True

    def get_config_template(self) -> Dict[str, Any]:
        """A complete configuration with every default spelled out."""
        return {
            "repository": {
                "type": "file",
                "path": "data/deals.yaml",
                "base_url": "${SUPABASE_URL}",
                "api_key": "${SUPABASE_ANON_KEY}",
                "table": "deals",
            },
            "location": {
                "timeout_ms": 10000,
                "max_cached_age_ms": 30000,
                "ip_fallback_on_denied": True,
                "retain_coordinate": True,
            },
            "clustering": {
                "no_cluster_zoom": 12.5,
                "coarse_zoom": 9.0,
                "medium_zoom": 11.0,
                "coarse_cell_deg": 0.08,
                "medium_cell_deg": 0.04,
                "fine_cell_deg": 0.02,
            },
            "defaults": {
                "radius_km": 5.0,
                "feed_mode": "for-you",
                "show_expired": False,
            },
            "system": {
                "ip_geolocation_url": "https://ipapi.co/json/",
                "log_level": "INFO",
            },
        }
