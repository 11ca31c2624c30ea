"""
API v1 Router

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter

from serene.api.v1.endpoints.health import router as health_router
from serene.api.v1.endpoints.messages import router as messages_router
from serene.api.v1.endpoints.notifications import router as notifications_router
from serene.api.v1.endpoints.profiles import router as profiles_router
from serene.api.v1.endpoints.trends import router as trends_router

api_router = APIRouter()

api_router.include_router(health_router, prefix="/health", tags=["Health"])
api_router.include_router(messages_router, prefix="/messages", tags=["Messages"])
api_router.include_router(notifications_router, prefix="/notifications", tags=["Notifications"])
api_router.include_router(trends_router, prefix="/trends", tags=["Trends"])
api_router.include_router(profiles_router, prefix="/profiles", tags=["Profiles"])
