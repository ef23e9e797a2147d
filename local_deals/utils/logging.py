"""
Structured logging utilities for the Local Deals discovery system.

Every component logs one JSON object per record (timestamp, component,
message plus any context) under the `local_deals.<component>` logger
namespace. `setup_logging` attaches console, rotating file and per-component
handlers to that namespace; until it is called, records go wherever the
host application has configured the root logger.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

LOGGER_NAMESPACE = "local_deals"

MB = 1024 * 1024


class ComponentLogger:
    """JSON-payload logger bound to one component name."""

    def __init__(self, component_name: str, extra_context: Optional[Dict[str, Any]] = None):
        """
        Args:
            component_name: Dotted component name, e.g. 'location.strategy'
            extra_context: Values added to every record from this logger
        """
        self.component_name = component_name
        self.extra_context = extra_context or {}
        self.logger = logging.getLogger(f"{LOGGER_NAMESPACE}.{component_name}")

    def _payload(self, message: str, extra: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        payload = {
            "timestamp": datetime.now().isoformat(),
            "component": self.component_name,
            "message": message,
        }
        payload.update(self.extra_context)
        payload.update(extra or {})
        return payload

    def _emit(self, level: int, payload: Dict[str, Any], exc_info: bool = False):
        if self.logger.isEnabledFor(level):
            self.logger.log(level, json.dumps(payload, default=str), exc_info=exc_info)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit(logging.DEBUG, self._payload(message, extra))

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit(logging.INFO, self._payload(message, extra))

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit(logging.WARNING, self._payload(message, extra))

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None, exc_info: bool = False):
        payload = self._payload(message, extra)
        if exc_info:
            payload["exception"] = True
        self._emit(logging.ERROR, payload, exc_info=exc_info)


class LoggingManager:
    """
    Owns the handlers of the `local_deals` logger namespace.

    Files written under log_dir:
      local_deals.log        everything at the configured level (10MB x 5)
      errors.log             ERROR and above only (5MB x 3)
      <component>.log        one per entry in COMPONENTS (5MB x 2), dots
                             replaced by underscores
    """

    COMPONENTS = [
        "location.strategy",
        "ip.geolocation",
        "components.filter_engine",
        "components.clustering",
        "services.deal_repository",
        "services.discovery_service",
    ]

    ERROR_LOG = "errors.log"

    def __init__(self, log_dir: str = "logs", log_level: str = "INFO"):
        self.log_dir = Path(log_dir)
        self.log_level = getattr(logging, log_level.upper())
        self.component_loggers: Dict[str, ComponentLogger] = {}

        self.log_dir.mkdir(parents=True, exist_ok=True)
        self._configure_namespace()
        self._configure_components()

    def _rotating_handler(
        self, filename: str, max_mb: int, backups: int, level: int, fmt: str
    ) -> logging.Handler:
        handler = logging.handlers.RotatingFileHandler(
            self.log_dir / filename, maxBytes=max_mb * MB, backupCount=backups
        )
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(fmt))
        return handler

    def _configure_namespace(self):
        fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

        console = logging.StreamHandler(sys.stderr)
        console.setLevel(self.log_level)
        console.setFormatter(logging.Formatter(fmt))

        namespace = logging.getLogger(LOGGER_NAMESPACE)
        namespace.setLevel(self.log_level)
        namespace.handlers.clear()
        for handler in (
            console,
            self._rotating_handler("local_deals.log", 10, 5, self.log_level, fmt),
            self._rotating_handler(self.ERROR_LOG, 5, 3, logging.ERROR, fmt),
        ):
            namespace.addHandler(handler)

    def _configure_components(self):
        for component in self.COMPONENTS:
            component_logger = logging.getLogger(f"{LOGGER_NAMESPACE}.{component}")
            component_logger.handlers.clear()
            component_logger.addHandler(
                self._rotating_handler(
                    f"{component.replace('.', '_')}.log",
                    5,
                    2,
                    self.log_level,
                    "%(asctime)s - %(levelname)s - %(message)s",
                )
            )

    def get_component_logger(
        self, component_name: str, extra_context: Optional[Dict[str, Any]] = None
    ) -> ComponentLogger:
        """Cached ComponentLogger per (component, context) pair."""
        cache_key = f"{component_name}:{json.dumps(extra_context, sort_keys=True, default=str)}"
        if cache_key not in self.component_loggers:
            self.component_loggers[cache_key] = ComponentLogger(component_name, extra_context)
        return self.component_loggers[cache_key]

    def set_log_level(self, level: str):
        """Change the level of every handler except the error file."""
        self.log_level = getattr(logging, level.upper())

        namespace = logging.getLogger(LOGGER_NAMESPACE)
        namespace.setLevel(self.log_level)
        for handler in namespace.handlers:
            if str(getattr(handler, "baseFilename", "")).endswith(self.ERROR_LOG):
                continue
            handler.setLevel(self.log_level)


_logging_manager: Optional[LoggingManager] = None


def setup_logging(log_dir: str = "logs", log_level: str = "INFO") -> LoggingManager:
    """Configure the `local_deals` logger namespace for this process."""
    global _logging_manager
    _logging_manager = LoggingManager(log_dir, log_level)
    return _logging_manager


def get_logger(component_name: str, extra_context: Optional[Dict[str, Any]] = None) -> ComponentLogger:
    """
    Get a component logger.

    Works before setup_logging() is called; records then go to whatever
    handlers the host application has configured.
    """
    if _logging_manager is None:
        return ComponentLogger(component_name, extra_context)
    return _logging_manager.get_component_logger(component_name, extra_context)
