"""
Catalog Service Health Check Utilities
======================================

Runs named dependency checks and aggregates them into one health report.
"""

import inspect
import time
from typing import Any, Awaitable, Callable, Dict, Union

HealthCheck = Callable[[], Union[bool, Awaitable[bool]]]


class CatalogServiceHealthChecker:
    """Aggregates dependency checks into a single health report"""

    def __init__(
        self, service_name: str = "catalog-service", version: str = "1.0.0"
    ) -> None:
        self.service_name = service_name
        self.version = version
        self.checks: Dict[str, HealthCheck] = {}
        self.start_time = time.time()

    def add_check(self, name: str, check_func: HealthCheck) -> None:
        """Register a check returning True when the dependency is usable"""
        self.checks[name] = check_func

    async def run_checks(self) -> Dict[str, Any]:
        results: Dict[str, Dict[str, Any]] = {}
        check_start_time = time.time()

        for name, check_func in self.checks.items():
            individual_start = time.time()
            try:
                outcome = check_func()
                if inspect.isawaitable(outcome):
                    outcome = await outcome
                results[name] = {"status": "healthy" if outcome else "unhealthy"}
            except Exception as e:
                results[name] = {"status": "error", "error": str(e)}
            results[name]["duration_ms"] = round(
                (time.time() - individual_start) * 1000, 2
            )

        # The primary store is the only hard dependency; the rest degrade
        if results.get("database", {}).get("status") not in (None, "healthy"):
            status = "unhealthy"
        elif all(r["status"] == "healthy" for r in results.values()):
            status = "healthy"
        else:
            status = "degraded"

        return {
            "service": self.service_name,
            "version": self.version,
            "status": status,
            "checks": results,
            "total_duration_ms": round((time.time() - check_start_time) * 1000, 2),
            "uptime_seconds": round(time.time() - self.start_time, 2),
            "timestamp": time.time(),
        }
