"""Stress trend endpoint."""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from serene.api.dependencies import get_service
from serene.services.orchestration import StressAnalysisService

router = APIRouter()


class DailyStressResponse(BaseModel):
    date: str
    average_stress: float
    message_count: int


class TrendResponse(BaseModel):
    user_id: str
    days: int
    total_messages: int
    average_stress: float
    high_stress_count: int
    top_emotions: list[str]
    daily: list[DailyStressResponse]
    trend: str


@router.get(
    "/{user_id}",
    response_model=TrendResponse,
    summary="Stress trend summary over the last N days",
)
async def get_trends(
    user_id: str,
    days: int = Query(default=7, ge=1, le=90),
    service: StressAnalysisService = Depends(get_service),
) -> TrendResponse:
    summary = await service.trends(user_id, days)
    return TrendResponse(**summary.to_dict())
