"""
Health Check Module
===================
Health, liveness and readiness endpoints with per-component status.
"""

import time
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel
import structlog

logger = structlog.get_logger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    status: str
    latency_ms: Optional[float] = None
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: HealthStatus
    service: str
    version: str
    components: Dict[str, ComponentHealth]
    timestamp: float


async def check_component(name: str, check: Callable[[], Awaitable[bool]]) -> ComponentHealth:
    """Run a component's health_check and time it."""
    try:
        start = time.time()
        ok = await check()
        latency = (time.time() - start) * 1000
        if ok:
            return ComponentHealth(status="connected", latency_ms=round(latency, 2))
        return ComponentHealth(status="error", latency_ms=round(latency, 2), error="check failed")
    except Exception as e:
        logger.error("Health check failed", component=name, error=str(e))
        return ComponentHealth(status="error", error=str(e))


def create_health_router(
    service_name: str,
    version: str,
    critical: Dict[str, Callable[[], Awaitable[bool]]],
    optional: Optional[Dict[str, Callable[[], Awaitable[bool]]]] = None,
) -> APIRouter:
    """
    Create a health check router.

    Args:
        service_name: Name of the service (e.g., "otp-reset")
        version: Service version
        critical: Checks whose failure makes the service unhealthy and not ready
        optional: Checks whose failure only degrades the service

    Returns:
        FastAPI router with /health, /health/live, and /health/ready endpoints
    """
    router = APIRouter(tags=["Health"])
    optional = optional or {}

    @router.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check with all component statuses."""
        components: Dict[str, ComponentHealth] = {}
        overall_status = HealthStatus.HEALTHY

        for name, check in critical.items():
            components[name] = await check_component(name, check)
            if components[name].status == "error":
                overall_status = HealthStatus.UNHEALTHY

        for name, check in optional.items():
            components[name] = await check_component(name, check)
            if components[name].status == "error" and overall_status == HealthStatus.HEALTHY:
                overall_status = HealthStatus.DEGRADED

        return HealthResponse(
            status=overall_status,
            service=service_name,
            version=version,
            components=components,
            timestamp=time.time(),
        )

    @router.get("/health/live")
    async def liveness_probe():
        """Liveness probe - always returns 200 if the process is serving."""
        return {"status": "alive"}

    @router.get("/health/ready")
    async def readiness_probe():
        """Readiness probe - critical components only."""
        for name, check in critical.items():
            component = await check_component(name, check)
            if component.status == "error":
                return JSONResponse(
                    status_code=503,
                    content={"status": "not_ready", "reason": f"{name}_unavailable"},
                )
        return {"status": "ready"}

    return router
