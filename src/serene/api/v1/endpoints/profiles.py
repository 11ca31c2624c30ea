"""
Profile Endpoints

Explicit profile changes: stress feedback, trigger words and calming
factors.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from serene.api.dependencies import get_service
from serene.config.logging_config import get_logger
from serene.domain.enums import Modality
from serene.domain.models import UserEmotionalProfile, UserFeedback
from serene.services.orchestration import StressAnalysisService

logger = get_logger(__name__)
router = APIRouter()


class FeedbackRequest(BaseModel):
    """User's own rating of an analysed message."""

    request_id: str = Field(..., min_length=1, max_length=100)
    reported_stress: float = Field(..., ge=0.0, le=10.0)
    predicted_stress: float = Field(..., ge=0.0, le=10.0)
    modality_scores: dict[Modality, float] = Field(default_factory=dict)
    was_helpful: Optional[bool] = None
    comment: str = Field(default="", max_length=1000)


class ProfileItemsRequest(BaseModel):
    items: list[str] = Field(..., min_length=1, max_length=20)


class ProfileResponse(BaseModel):
    user_id: str
    baseline_stress: float
    personalized_weights: Optional[dict[str, float]]
    trigger_words: list[str]
    calming_factors: list[str]
    feedback_count: int
    response_accuracy: float
    updated_at: str

    @classmethod
    def from_domain(cls, profile: UserEmotionalProfile) -> "ProfileResponse":
        data = profile.to_dict()
        return cls(
            user_id=data["user_id"],
            baseline_stress=data["baseline_stress"],
            personalized_weights=data["personalized_weights"],
            trigger_words=data["trigger_words"],
            calming_factors=data["calming_factors"],
            feedback_count=len(profile.feedback_history),
            response_accuracy=data["response_accuracy"],
            updated_at=data["updated_at"],
        )


@router.get("/{user_id}", response_model=ProfileResponse, summary="Get a user's emotional profile")
async def get_profile(
    user_id: str,
    service: StressAnalysisService = Depends(get_service),
) -> ProfileResponse:
    return ProfileResponse.from_domain(await service.profile_service.get_or_create(user_id))


@router.post("/{user_id}/feedback", response_model=ProfileResponse, summary="Record stress feedback")
async def record_feedback(
    user_id: str,
    body: FeedbackRequest,
    service: StressAnalysisService = Depends(get_service),
) -> ProfileResponse:
    feedback = UserFeedback(
        request_id=body.request_id,
        reported_stress=body.reported_stress,
        predicted_stress=body.predicted_stress,
        modality_scores=dict(body.modality_scores),
        was_helpful=body.was_helpful,
        comment=body.comment,
    )
    profile = await service.profile_service.record_feedback(user_id, feedback)
    return ProfileResponse.from_domain(profile)


@router.post("/{user_id}/triggers", response_model=ProfileResponse, summary="Add trigger words")
async def add_triggers(
    user_id: str,
    body: ProfileItemsRequest,
    service: StressAnalysisService = Depends(get_service),
) -> ProfileResponse:
    profile = await service.profile_service.add_trigger_words(user_id, body.items)
    return ProfileResponse.from_domain(profile)


@router.post("/{user_id}/calming-factors", response_model=ProfileResponse, summary="Add calming factors")
async def add_calming_factors(
    user_id: str,
    body: ProfileItemsRequest,
    service: StressAnalysisService = Depends(get_service),
) -> ProfileResponse:
    profile = await service.profile_service.add_calming_factors(user_id, body.items)
    return ProfileResponse.from_domain(profile)
