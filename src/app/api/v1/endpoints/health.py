"""Health check endpoints.

Provides liveness and readiness probes for Kubernetes and load balancers.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status
from starlette.responses import JSONResponse, Response

from app.cache.redis import check_redis_health
from app.core.config import Settings, get_settings
from app.database.connection import check_database_health
from app.schemas.enums import HealthStatus
from app.schemas.health import HealthResponse, ReadinessResponse


router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Basic health check to verify the service is running.",
)
async def health_check(
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """Check if the service is alive.

    Used by liveness probes and load balancers. External dependencies are
    not checked.
    """
    return HealthResponse(
        status=HealthStatus.HEALTHY,
        version=settings.app.version,
        environment=settings.APP_ENV,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    description="Readiness check pinging MongoDB and Redis.",
    responses={503: {"description": "The document store is unreachable"}},
)
async def readiness_check(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Response:
    """Check if the service is ready to handle requests.

    The document store is required; Redis only degrades the service since
    rate limiting and recommendation caching fall back without it.
    """
    dependencies = {
        "mongodb": await check_database_health(),
        "redis": await check_redis_health(),
    }

    if dependencies["mongodb"] != "healthy":
        overall = HealthStatus.UNHEALTHY
    elif dependencies["redis"] != "healthy":
        overall = HealthStatus.DEGRADED
    else:
        overall = HealthStatus.HEALTHY

    body = ReadinessResponse(
        status=overall,
        version=settings.app.version,
        environment=settings.APP_ENV,
        dependencies=dependencies,
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        if overall == HealthStatus.UNHEALTHY
        else status.HTTP_200_OK,
        content=body.model_dump(mode="json"),
    )
