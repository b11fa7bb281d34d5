"""
Health checks for liveness and readiness probes.

- Liveness: Is the process serving HTTP? (no I/O)
- Readiness: Can the customer table be queried? (SELECT 1 on the storage handle)
"""

import time
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

from customers_api.observability.logging import get_logger

logger = get_logger(__name__)


class HealthStatus(str, Enum):
    """Health status enumeration."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    """Health status of a single component."""

    name: str = Field(description="Component name")
    status: HealthStatus = Field(description="Component health status")
    message: str | None = Field(default=None, description="Status message")
    latency_ms: float | None = Field(
        default=None, description="Health check latency in milliseconds"
    )
    last_check: datetime = Field(description="Last health check timestamp")


class LivenessResponse(BaseModel):
    """Minimal liveness probe response."""

    status: str = Field(default="alive", description="Liveness status")
    timestamp: datetime = Field(description="Check timestamp")
    uptime_seconds: float = Field(description="Service uptime in seconds")


class ReadinessResponse(BaseModel):
    """Readiness probe response with dependency checks."""

    status: HealthStatus = Field(description="Readiness status")
    timestamp: datetime = Field(description="Check timestamp")
    ready: bool = Field(description="Whether service is ready to accept traffic")
    components: list[ComponentHealth] = Field(description="Critical component health statuses")


class HealthChecker:
    """Health check coordinator; tracks uptime and probes the storage handle."""

    def __init__(self):
        self.start_time = time.time()

    def get_uptime_seconds(self) -> float:
        return time.time() - self.start_time

    async def check_liveness(self) -> LivenessResponse:
        """
        Liveness probe: Is the service alive?

        Performs no I/O, so it only fails if the process itself is dead.
        """
        return LivenessResponse(
            status="alive",
            timestamp=datetime.now(UTC),
            uptime_seconds=round(self.get_uptime_seconds(), 3),
        )

    async def check_readiness(self, customer_db=None) -> ReadinessResponse:
        """
        Readiness probe: Is the service ready to accept traffic?

        A missing storage handle counts as unhealthy: no customer
        endpoint can answer without it.
        """
        if customer_db is None:
            db_health = ComponentHealth(
                name="customer_database",
                status=HealthStatus.UNHEALTHY,
                message="Customer database not initialized",
                last_check=datetime.now(UTC),
            )
        else:
            db_health = await self._check_database_health(customer_db)

        return ReadinessResponse(
            status=db_health.status,
            timestamp=datetime.now(UTC),
            ready=db_health.status == HealthStatus.HEALTHY,
            components=[db_health],
        )

    async def _check_database_health(self, customer_db) -> ComponentHealth:
        start_time = time.perf_counter()

        try:
            await customer_db.ping()
        except Exception as e:
            latency_ms = (time.perf_counter() - start_time) * 1000
            logger.error("Database health check failed", error=str(e), exc_info=True)
            return ComponentHealth(
                name="customer_database",
                status=HealthStatus.UNHEALTHY,
                message=f"Database check failed: {str(e)}",
                latency_ms=round(latency_ms, 2),
                last_check=datetime.now(UTC),
            )

        latency_ms = (time.perf_counter() - start_time) * 1000
        return ComponentHealth(
            name="customer_database",
            status=HealthStatus.HEALTHY,
            message="Database responsive",
            latency_ms=round(latency_ms, 2),
            last_check=datetime.now(UTC),
        )


# Global health checker instance
_health_checker: HealthChecker | None = None


def get_health_checker() -> HealthChecker:
    """Get global health checker instance."""
    global _health_checker
    if _health_checker is None:
        _health_checker = HealthChecker()
    return _health_checker
