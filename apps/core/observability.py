"""
Health checks for the Newsroom.

The site depends on three collaborators: the database holding the documents,
the media storage holding images, and the cache holding throttle counters
for the public submission form. Each gets a named check; /health/ runs them
all, /readyz/ only the database.

A failing cache only degrades the site (throttling falls open), so its check
reports DEGRADED rather than UNHEALTHY.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class HealthStatus(Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthCheckResult:
    name: str
    status: HealthStatus
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)
    duration_ms: float = 0

    @property
    def healthy(self) -> bool:
        return self.status == HealthStatus.HEALTHY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "details": self.details,
            "duration_ms": round(self.duration_ms, 2),
        }


CheckFunction = Callable[[], HealthCheckResult]


class HealthChecker:
    """Registry of named checks; a check that raises counts as UNHEALTHY."""

    def __init__(self):
        self._checks: Dict[str, CheckFunction] = {}

    def register(self, name: str, check_fn: CheckFunction) -> None:
        self._checks[name] = check_fn

    def names(self) -> List[str]:
        return list(self._checks)

    def check(self, name: str) -> HealthCheckResult:
        check_fn = self._checks.get(name)
        if check_fn is None:
            return HealthCheckResult(name, HealthStatus.UNHEALTHY, f"Unknown check: {name}")

        started = time.perf_counter()
        try:
            result = check_fn()
        except Exception as e:
            logger.warning("Health check %s raised: %s", name, e)
            result = HealthCheckResult(name, HealthStatus.UNHEALTHY, str(e))
        result.duration_ms = (time.perf_counter() - started) * 1000
        return result

    def check_all(self) -> Dict[str, Any]:
        results = [self.check(name) for name in self._checks]
        statuses = {result.status for result in results}

        if HealthStatus.UNHEALTHY in statuses:
            overall = HealthStatus.UNHEALTHY
        elif HealthStatus.DEGRADED in statuses:
            overall = HealthStatus.DEGRADED
        else:
            overall = HealthStatus.HEALTHY

        return {
            "status": overall.value,
            "checks": {result.name: result.to_dict() for result in results},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


health_checker = HealthChecker()


# =============================================================================
# Newsroom Checks
# =============================================================================

def check_database() -> HealthCheckResult:
    """Database answers and the documents table is readable."""
    from django.db import DatabaseError, connection
    from apps.core.models import Document

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        Document.objects.exists()
    except DatabaseError as e:
        return HealthCheckResult("database", HealthStatus.UNHEALTHY, f"Database error: {e}")
    return HealthCheckResult("database", HealthStatus.HEALTHY, "Documents table reachable",
                             details={"vendor": connection.vendor})


def check_media_storage() -> HealthCheckResult:
    """Media storage backend answers a lookup in the submissions namespace."""
    from django.core.files.storage import default_storage

    try:
        default_storage.exists("submissions/.health-check")
    except Exception as e:
        return HealthCheckResult("media_storage", HealthStatus.UNHEALTHY, f"Media storage error: {e}")
    return HealthCheckResult("media_storage", HealthStatus.HEALTHY, "Media storage reachable",
                             details={"backend": default_storage.__class__.__name__})


def check_cache() -> HealthCheckResult:
    """Throttle cache round-trips a value."""
    from django.core.cache import cache

    try:
        cache.set("newsroom:health-check", "ok", timeout=5)
        answered = cache.get("newsroom:health-check") == "ok"
    except Exception as e:
        return HealthCheckResult("cache", HealthStatus.DEGRADED, f"Cache error: {e}")
    if not answered:
        return HealthCheckResult("cache", HealthStatus.DEGRADED, "Cache did not return the probe value")
    return HealthCheckResult("cache", HealthStatus.HEALTHY, "Throttle cache reachable")


def register_default_checks():
    health_checker.register("database", check_database)
    health_checker.register("media_storage", check_media_storage)
    health_checker.register("cache", check_cache)
