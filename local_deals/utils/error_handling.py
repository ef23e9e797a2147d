"""
Error handling utilities for the Local Deals discovery system.

Components that talk to external collaborators (geolocation providers and
deal repositories) report failures here. The tracker keeps a bounded
history for diagnostics, the decorator adds retries and optional
suppression, and the degradation manager records which optional features
are currently running in a reduced mode.
"""

import asyncio
import functools
import random
import traceback
from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional

from .logging import get_logger


class ErrorSeverity(Enum):
    """How badly a failure affects the session."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Where a failure came from."""

    NETWORK = "network"
    CONFIGURATION = "configuration"
    PARSING = "parsing"
    GEOLOCATION = "geolocation"
    DATA_VALIDATION = "data_validation"
    SYSTEM = "system"
    EXTERNAL_SERVICE = "external_service"


@dataclass
class ErrorInfo:
    """A single recorded failure."""

    timestamp: datetime
    component: str
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    exception_type: str = "Unknown"
    traceback: str = ""
    context: Dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return f"{self.component}.{self.category.value}.{self.severity.value}"


class ErrorTracker:
    """
    Bounded in-memory record of failures.

    Keeps the most recent `max_errors` failures overall and the most recent
    100 per component; counts per component/category/severity key are kept
    for the whole process lifetime.
    """

    PER_COMPONENT_LIMIT = 100

    def __init__(self, max_errors: int = 1000):
        self.max_errors = max_errors
        self.errors: Deque[ErrorInfo] = deque(maxlen=max_errors)
        self.error_counts: Counter = Counter()
        self.component_errors: Dict[str, Deque[ErrorInfo]] = {}
        self.logger = get_logger("error_tracker")

    def record_error(
        self,
        component: str,
        category: ErrorCategory,
        severity: ErrorSeverity,
        message: str,
        exception: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> ErrorInfo:
        """
        Record a failure and log it.

        Args:
            component: Component that failed, e.g. 'location.strategy'
            category: Failure category
            severity: Failure severity
            message: Human-readable description
            exception: The exception, when there is one
            context: Extra diagnostic values

        Returns:
            The recorded ErrorInfo
        """
        info = ErrorInfo(
            timestamp=datetime.now(),
            component=component,
            category=category,
            severity=severity,
            message=message,
            context=dict(context or {}),
        )
        if exception is not None:
            info.exception_type = type(exception).__name__
            info.traceback = "".join(
                traceback.format_exception(
                    type(exception), exception, exception.__traceback__
                )
            )

        self.errors.append(info)
        self.error_counts[info.key] += 1
        self.component_errors.setdefault(
            component, deque(maxlen=self.PER_COMPONENT_LIMIT)
        ).append(info)

        self.logger.error(
            f"Error recorded: {message}",
            extra={
                "component": component,
                "category": category.value,
                "severity": severity.value,
                "exception_type": info.exception_type,
                "context": info.context,
            },
        )
        return info

    def get_error_stats(self) -> Dict[str, Any]:
        """Summary counts for diagnostics output."""
        cutoff = datetime.now() - timedelta(hours=1)
        by_category = Counter(info.category.value for info in self.errors)

        return {
            "total_errors": len(self.errors),
            "errors_last_hour": sum(1 for info in self.errors if info.timestamp >= cutoff),
            "error_counts": dict(self.error_counts),
            "component_error_counts": {
                name: len(history) for name, history in self.component_errors.items()
            },
            "category_breakdown": {
                category.value: by_category.get(category.value, 0)
                for category in ErrorCategory
            },
        }

    def get_component_errors(self, component: str, limit: int = 10) -> List[ErrorInfo]:
        """Most recent failures of one component, oldest first."""
        history = list(self.component_errors.get(component, ()))
        return history[-limit:]


class RetryConfig:
    """Retry policy for the async path of with_error_handling."""

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        exponential_backoff: bool = True,
        jitter: bool = True,
    ):
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_backoff = exponential_backoff
        self.jitter = jitter

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait before retrying after the given zero-based attempt."""
        delay = self.base_delay
        if self.exponential_backoff:
            delay = min(self.base_delay * (2**attempt), self.max_delay)

        if self.jitter:
            delay *= 0.5 + random.random() * 0.5

        return delay


_error_tracker: Optional[ErrorTracker] = None


def get_error_tracker() -> ErrorTracker:
    """Process-wide error tracker."""
    global _error_tracker
    if _error_tracker is None:
        _error_tracker = ErrorTracker()
    return _error_tracker


def with_error_handling(
    component: str,
    category: ErrorCategory,
    severity: ErrorSeverity = ErrorSeverity.MEDIUM,
    retry_config: Optional[RetryConfig] = None,
    fallback_value: Any = None,
    suppress_exceptions: bool = False,
):
    """
    Decorator that records failures, retries and optionally suppresses them.

    Works on both coroutine functions and plain functions; retries only
    apply to coroutine functions.

    Args:
        component: Component name used in the tracker and log records
        category: Failure category
        severity: Failure severity
        retry_config: Retry policy; a single attempt when omitted
        fallback_value: Returned instead of raising when suppressing
        suppress_exceptions: Return fallback_value after the last failure
    """

    def decorator(func: Callable) -> Callable:
        name = getattr(func, "__name__", repr(func))

        def record(error: Exception, **context: Any) -> None:
            get_error_tracker().record_error(
                component=component,
                category=category,
                severity=severity,
                message=f"Error in {name}: {error}",
                exception=error,
                context={"function": name, **context},
            )

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            logger = get_logger(component)
            attempts = retry_config.max_attempts if retry_config else 1

            for attempt in range(1, attempts + 1):
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    record(e, attempt=attempt, max_attempts=attempts)
                    if attempt < attempts:
                        delay = retry_config.delay_for(attempt - 1)
                        logger.info(
                            f"Retrying {name} in {delay:.2f}s "
                            f"(attempt {attempt}/{attempts} failed)"
                        )
                        await asyncio.sleep(delay)
                        continue
                    if not suppress_exceptions:
                        raise
                    logger.warning(f"Suppressing exception in {name}: {e}")
                    return fallback_value

                if attempt > 1:
                    logger.info(f"{name} succeeded on attempt {attempt}")
                return result

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                record(e)
                if not suppress_exceptions:
                    raise
                get_logger(component).warning(f"Suppressing exception in {name}: {e}")
                return fallback_value

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


class GracefulDegradation:
    """
    Registry of optional features running in a reduced mode.

    The near-me feature is the main client: when no coordinate can be
    resolved, proximity is marked degraded while list filtering continues.
    """

    def __init__(self):
        self.degraded_components: Dict[str, Dict[str, Any]] = {}
        self.logger = get_logger("graceful_degradation")

    def degrade_component(
        self,
        component: str,
        reason: str,
        fallback_behavior: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
    ):
        """Mark a feature as degraded, replacing any earlier entry."""
        self.degraded_components[component] = {
            "reason": reason,
            "fallback_behavior": fallback_behavior,
            "severity": severity.value,
            "timestamp": datetime.now().isoformat(),
        }
        self.logger.warning(
            f"Component degraded: {component}",
            extra={"component": component, **self.degraded_components[component]},
        )

    def restore_component(self, component: str):
        if self.degraded_components.pop(component, None) is not None:
            self.logger.info(f"Component restored: {component}")

    def is_degraded(self, component: str) -> bool:
        return component in self.degraded_components

    def get_degradation_info(self, component: str) -> Optional[Dict[str, Any]]:
        return self.degraded_components.get(component)


_degradation_manager: Optional[GracefulDegradation] = None


def get_degradation_manager() -> GracefulDegradation:
    """Process-wide degradation registry."""
    global _degradation_manager
    if _degradation_manager is None:
        _degradation_manager = GracefulDegradation()
    return _degradation_manager
