"""
Message Endpoints

Transport contract for the chat client: every outgoing message passes
the synchronous crisis gate and is queued for deferred analysis.

- 202 Accepted: message may be sent; analysis queued
- 409 Conflict: critical crisis language; the client must show the
  safety prompt and resubmit with safety_acknowledged=true
"""

import base64
import binascii
from typing import Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field, field_validator

from serene.api.dependencies import get_service
from serene.config.logging_config import get_logger
from serene.domain.errors import QueueClosedError
from serene.domain.models import AnalysisRequest, AudioSignal, ImageSignal
from serene.services.orchestration import StressAnalysisService

logger = get_logger(__name__)
router = APIRouter()


class AudioFeatures(BaseModel):
    """Voice message features extracted by the client."""

    transcript: str = Field(default="", max_length=4000)
    speech_rate_wpm: Optional[float] = Field(default=None, ge=0.0, le=600.0)
    pitch_variation: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    energy_level: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    pause_durations: list[float] = Field(default_factory=list, max_length=200)


class ImagePayload(BaseModel):
    """Base64-encoded image."""

    data: str = Field(..., min_length=1, description="Base64-encoded image bytes")
    mime_type: str = Field(default="image/jpeg", pattern=r"^image/[a-z0-9.+-]+$")

    @field_validator("data")
    @classmethod
    def _valid_base64(cls, value: str) -> str:
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError("data must be valid base64") from e
        return value

    def decoded(self) -> bytes:
        return base64.b64decode(self.data)


class SubmitMessageRequest(BaseModel):
    """A message about to be sent."""

    request_id: str = Field(default_factory=lambda: str(uuid4()), min_length=1, max_length=100)
    user_id: str = Field(..., min_length=1, max_length=128)
    group_id: str = Field(default="", max_length=128)
    text: str = Field(..., min_length=1, max_length=4000)
    conversation_context: list[str] = Field(default_factory=list, max_length=20)
    audio: Optional[AudioFeatures] = None
    image: Optional[ImagePayload] = None
    safety_acknowledged: bool = False

    def to_request(self) -> AnalysisRequest:
        return AnalysisRequest(
            id=self.request_id,
            text=self.text,
            user_id=self.user_id,
            group_id=self.group_id,
            conversation_context=list(self.conversation_context),
            audio=AudioSignal(**self.audio.model_dump()) if self.audio else None,
            image=ImageSignal(data=self.image.decoded(), mime_type=self.image.mime_type) if self.image else None,
        )


class SubmitMessageResponse(BaseModel):
    """Gate decision for a submitted message."""

    request_id: str
    allowed: bool
    requires_acknowledgement: bool
    risk_level: str
    enqueued: bool
    safety_prompt: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "request_id": "6f1c2f4e-1f0b-4b7e-9d7c-2b8f7e1f9a10",
                "allowed": True,
                "requires_acknowledgement": False,
                "risk_level": "none",
                "enqueued": True,
                "safety_prompt": None,
            }
        }


@router.post(
    "",
    response_model=SubmitMessageResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses={409: {"model": SubmitMessageResponse, "description": "Safety acknowledgement required"}},
    summary="Gate and queue an outgoing message",
)
async def submit_message(
    body: SubmitMessageRequest,
    response: Response,
    service: StressAnalysisService = Depends(get_service),
) -> SubmitMessageResponse:
    """
    Run the crisis gate and queue the message for analysis.

    Analysis happens later; the result surfaces as notifications.
    """
    try:
        result = service.submit(body.to_request(), safety_acknowledged=body.safety_acknowledged)
    except QueueClosedError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Analysis queue is shutting down",
        ) from e

    if not result.allowed:
        response.status_code = status.HTTP_409_CONFLICT

    decision = result.decision
    return SubmitMessageResponse(
        request_id=result.request_id,
        allowed=decision.allowed,
        requires_acknowledgement=decision.requires_acknowledgement,
        risk_level=decision.risk_level.value,
        enqueued=result.enqueued,
        safety_prompt=decision.safety_prompt,
    )
