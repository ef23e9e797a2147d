"""
Service layer for the Local Deals discovery system.

This module contains the services that load configuration and deals and
coordinate the ranking, clustering and location components for a viewing
session.
"""

from .config_manager import ConfigurationManager
from .deal_repository import FileDealRepository, RestDealRepository, create_repository
from .discovery_service import DiscoveryService

__all__ = [
    "ConfigurationManager",
    "FileDealRepository",
    "RestDealRepository",
    "create_repository",
    "DiscoveryService",
]
