"""Health check endpoints."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from app.config import settings
from app.core.redis_client import check_redis_connection
from app.database import check_database_connection
from app.schemas.common import ApiResponse

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    environment: str


class DetailedHealthResponse(HealthResponse):
    """Health check including the database and the session store."""

    database: str
    redis: str


@router.get(
    "/health",
    response_model=ApiResponse[HealthResponse],
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
)
async def health_check() -> ApiResponse[HealthResponse]:
    """
    Liveness check. Touches no dependency.

    Returns:
        Basic health status
    """
    return ApiResponse(
        data=HealthResponse(
            status="healthy",
            version=settings.app_version,
            environment=settings.environment,
        )
    )


@router.get(
    "/health/detailed",
    response_model=ApiResponse[DetailedHealthResponse],
    status_code=status.HTTP_200_OK,
    summary="Detailed health check",
)
async def detailed_health_check() -> ApiResponse[DetailedHealthResponse]:
    """
    Health check with database and Redis status.

    Without Redis no session can be validated, so the service is reported
    as degraded when either dependency is down.
    """
    db_healthy = await check_database_connection()
    redis_healthy = await check_redis_connection()

    return ApiResponse(
        success=db_healthy and redis_healthy,
        data=DetailedHealthResponse(
            status="healthy" if db_healthy and redis_healthy else "degraded",
            version=settings.app_version,
            environment=settings.environment,
            database="healthy" if db_healthy else "unhealthy",
            redis="healthy" if redis_healthy else "unhealthy",
        ),
    )


@router.get(
    "/ping",
    response_model=ApiResponse[None],
    status_code=status.HTTP_200_OK,
    summary="Simple ping",
)
async def ping() -> ApiResponse[None]:
    """Simple ping endpoint."""
    return ApiResponse(message="pong")
