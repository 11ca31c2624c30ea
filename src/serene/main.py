"""
SERENE FastAPI Application Entry Point

Main application initialization with:
- Lifespan management (service startup and queue drain on shutdown)
- CORS configuration
- Error handling middleware
- Router registration
- Prometheus metrics endpoint
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from serene import __version__
from serene.api.middleware import ErrorHandlerMiddleware
from serene.api.v1.router import api_router
from serene.config import Settings, get_settings
from serene.config.logging_config import configure_logging, get_logger
from serene.infrastructure.metrics import metrics_router, update_system_info
from serene.infrastructure.monitoring import init_sentry
from serene.services.orchestration import StressAnalysisService

logger = get_logger(__name__)


def create_application(
    settings: Optional[Settings] = None,
    service: Optional[StressAnalysisService] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Application settings (defaults to environment settings)
        service: Pre-built analysis service, mainly for tests

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Starting SERENE application", env=settings.env, version=__version__)

        init_sentry(
            settings.monitoring.dsn.get_secret_value(),
            environment=settings.env,
            release=f"serene@{__version__}",
            traces_sample_rate=settings.monitoring.traces_sample_rate,
        )
        update_system_info(settings.env, __version__)

        active = service or StressAnalysisService.from_settings(settings)
        await active.initialize()
        app.state.service = active
        try:
            yield
        finally:
            logger.info("Shutting down SERENE application")
            await active.shutdown()
            logger.info("SERENE application shutdown complete")

    app = FastAPI(
        title="SERENE API",
        description="Stress and crisis analysis for outgoing chat messages",
        version=__version__,
        docs_url="/docs" if not settings.is_production() else None,
        redoc_url="/redoc" if not settings.is_production() else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(ErrorHandlerMiddleware)

    app.include_router(api_router, prefix=f"/api/{settings.api_version}")
    app.include_router(metrics_router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        return {
            "name": "SERENE API",
            "version": __version__,
            "status": "operational",
        }

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "serene.main:app",
        host="0.0.0.0",
        port=8000,
        reload=_settings.env == "development",
        log_level=_settings.log_level.lower(),
    )
