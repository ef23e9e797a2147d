"""
Utility modules for the Local Deals discovery system.
"""

from .error_handling import (
    ErrorCategory,
    ErrorSeverity,
    get_degradation_manager,
    get_error_tracker,
    with_error_handling,
)
from .logging import get_logger, setup_logging

__all__ = [
    "ErrorCategory",
    "ErrorSeverity",
    "get_degradation_manager",
    "get_error_tracker",
    "with_error_handling",
    "get_logger",
    "setup_logging",
]
