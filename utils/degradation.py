"""
Stagebot - Graceful Degradation Module

Tracks health of external collaborators and implements the cascade's
degrade-gracefully policy: a configuration layer that cannot be loaded
is treated as absent and resolution continues with the remaining layers.

Feedback store failures are NOT degraded here; they are surfaced to the
caller (see repositories.feedback.StoreError).
"""

import time
from collections.abc import Callable
from functools import wraps
from typing import Any

import httpx
from loguru import logger

from utils.metrics import config_layer_loads_total
from utils.rule_loader import ConfigLoadError


class HealthStatus:
    """
    Tracks health status of external services.

    Reported by the /health endpoint.
    """

    def __init__(self):
        self.store_healthy: bool = True
        self.standards_healthy: bool = True
        self.last_check: float = time.time()

    def set_store_health(self, healthy: bool) -> None:
        """Update feedback store health status."""
        self.store_healthy = healthy
        self.last_check = time.time()

    def set_standards_health(self, healthy: bool) -> None:
        """Update central standards source health status."""
        self.standards_healthy = healthy
        self.last_check = time.time()

    def as_dict(self) -> dict[str, Any]:
        return {
            "store": "healthy" if self.store_healthy else "unhealthy",
            "central_standards": "healthy" if self.standards_healthy else "degraded",
            "last_check": self.last_check,
        }


# Global health status instance
_health_status = HealthStatus()


def get_health_status() -> HealthStatus:
    """Get global health status instance."""
    return _health_status


# =============================================================================
# Configuration Layer Fallback
# =============================================================================

# Failures that mean "this layer is unavailable", never programming errors
LAYER_LOAD_ERRORS = (ConfigLoadError, OSError, httpx.HTTPError)


def with_layer_fallback(layer: str, log_level: str = "warning") -> Callable:
    """
    Decorator treating a failed cascade layer load as an absent layer.

    The wrapped loader returns a RuleConfig or None (layer not present).
    Load failures are logged, counted and converted to None.

    Args:
        layer: Layer name for logging and metrics ("central", "repo")
        log_level: Log level for failure messages (default: warning)

    Example:
        @with_layer_fallback("central")
        def load_central(self) -> RuleConfig | None:
            ...
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                result = func(*args, **kwargs)
            except LAYER_LOAD_ERRORS as e:
                if layer == "central":
                    _health_status.set_standards_health(False)

                log_func = getattr(logger.bind(layer=layer), log_level, logger.warning)
                log_func(f"Failed to load {layer} config layer, treating as absent: {e}")
                config_layer_loads_total.labels(layer=layer, outcome="failed").inc()
                return None

            if layer == "central":
                _health_status.set_standards_health(True)

            outcome = "loaded" if result is not None else "absent"
            config_layer_loads_total.labels(layer=layer, outcome=outcome).inc()
            return result

        return wrapper

    return decorator


# =============================================================================
# Health Check Functions
# =============================================================================


def check_store_health(supabase_client, table: str = "feedback") -> bool:
    """
    Check feedback store connection health.

    Args:
        supabase_client: Supabase client instance
        table: Feedback table name

    Returns:
        True if healthy, False otherwise
    """
    if supabase_client is None:
        _health_status.set_store_health(False)
        return False

    try:
        supabase_client.table(table).select("row_key").limit(1).execute()
        _health_status.set_store_health(True)
        return True

    except Exception as e:
        _health_status.set_store_health(False)
        logger.warning(f"Feedback store health check failed: {e}")
        return False


# =============================================================================
# Module Exports
# =============================================================================
__all__ = [
    "HealthStatus",
    "LAYER_LOAD_ERRORS",
    "check_store_health",
    "get_health_status",
    "with_layer_fallback",
]
