"""Liveness endpoint.

The connector holds no connections worth checking between calls, so only a
liveness check is exposed: /health/live
"""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, status

from crowdstrike_connector.core.settings import get_app_settings
from crowdstrike_connector.features.health.schemas import LivenessResponse

router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "/live",
    response_model=LivenessResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness check (Kubernetes)",
    description="Kubernetes liveness check, always returns 200 if service is responsive",
)
async def liveness_check() -> LivenessResponse:
    """Kubernetes liveness endpoint."""
    return LivenessResponse(
        alive=True,
        timestamp=datetime.now(UTC),
        service=get_app_settings().service_name,
    )
