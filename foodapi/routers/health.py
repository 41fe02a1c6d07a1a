# =============================================================================
# foodapi/routers/health.py - Health Check Endpoint
# =============================================================================
# Provides the health check endpoint for monitoring and load balancers.
# No auth, no side effects.
# =============================================================================

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from foodapi.dependencies import SettingsDep

router = APIRouter()


class HealthResponse(BaseModel):
    """Basic health check response."""
    success: bool
    message: str
    timestamp: str
    environment: str


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds, e.g. 2024-01-15T10:30:00.123Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: SettingsDep):
    """
    Health check endpoint.

    Returns basic health status for load balancers and monitoring.
    """
    return HealthResponse(
        success=True,
        message="SB Foods API is running!",
        timestamp=utc_timestamp(),
        environment=settings.NODE_ENV,
    )
