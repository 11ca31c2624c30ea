"""
Health Check Endpoints

Liveness for load balancers and readiness with component status.
"""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from serene import __version__
from serene.api.dependencies import get_service
from serene.services.orchestration import StressAnalysisService

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    environment: str


class ReadinessResponse(BaseModel):
    """Readiness check response with component health."""

    ready: bool
    components: dict[str, Any]


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
)
async def health_check(service: StressAnalysisService = Depends(get_service)) -> HealthResponse:
    """Returns 200 while the application is running."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=service.settings.env,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
)
async def readiness_check(service: StressAnalysisService = Depends(get_service)) -> ReadinessResponse:
    """
    Component readiness.

    The service is ready when its store is reachable. Missing AI
    credentials do not block readiness: analysis falls back to
    heuristics.
    """
    components = await service.health_check()
    ready = components.get("database") is not False
    return ReadinessResponse(ready=ready, components=components)
