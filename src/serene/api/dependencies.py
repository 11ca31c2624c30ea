"""FastAPI dependencies."""

from fastapi import HTTPException, Request, status

from serene.services.orchestration import StressAnalysisService


def get_service(request: Request) -> StressAnalysisService:
    """The application's StressAnalysisService (set during lifespan startup)."""
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Analysis service not initialized",
        )
    return service
