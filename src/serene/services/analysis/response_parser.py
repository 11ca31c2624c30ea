"""
Model Response Parser

Strict, schema-validating deserializer for generative-AI replies.

The reply may wrap the JSON object in prose or markdown fences. The
first JSON object in the reply is decoded and validated against a
pydantic schema; out-of-range values are rejected rather than
clamped. The result is a tagged value: Parsed on success, ParseFailure
otherwise. Callers substitute their heuristic default on failure.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from serene.config.logging_config import get_logger
from serene.domain.errors import ParseError

logger = get_logger(__name__)

PayloadT = TypeVar("PayloadT", bound=BaseModel)

EXCERPT_LENGTH = 120
_FENCE_PATTERN = re.compile(r"```(?:json)?", re.IGNORECASE)


def _confidence_to_percent(value: Any) -> Any:
    # Some models answer 0-1 instead of 0-100
    if isinstance(value, (int, float)) and 0.0 < value <= 1.0:
        return float(value) * 100.0
    return value


def _string_list(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    return value


class TextAnalysisPayload(BaseModel):
    """Expected reply for text analysis."""

    model_config = ConfigDict(extra="ignore")

    stress_score: float = Field(
        ge=0.0,
        le=10.0,
        validation_alias=AliasChoices("stress_score", "stress_level", "stressLevel", "stressScore"),
    )
    mood: Optional[str] = Field(default=None, validation_alias=AliasChoices("mood", "mood_type", "moodType"))
    intent: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("intent", "intent_type", "intentType")
    )
    emotions: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    sentiment_polarity: float = Field(default=0.0, ge=-1.0, le=1.0)
    emotional_intensity: float = Field(default=0.5, ge=0.0, le=1.0)
    confidence: float = Field(default=75.0, ge=0.0, le=100.0)
    crisis_indicators: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("crisis_indicators", "crisisIndicators"),
    )
    summary: str = ""

    _percent = field_validator("confidence", mode="before")(_confidence_to_percent)
    _lists = field_validator("emotions", "keywords", "crisis_indicators", mode="before")(_string_list)

    @field_validator("crisis_indicators", mode="before")
    @classmethod
    def _boolean_crisis(cls, value: Any) -> Any:
        # Older prompts asked for a boolean flag
        if value is True:
            return ["model_flagged_crisis"]
        if value is False:
            return []
        return value


class AudioAnalysisPayload(BaseModel):
    """Expected reply for voice analysis."""

    model_config = ConfigDict(extra="ignore")

    stress_score: float = Field(
        ge=0.0, le=10.0, validation_alias=AliasChoices("stress_score", "stress_level", "stressLevel")
    )
    voice_stress: Optional[float] = Field(default=None, ge=0.0, le=10.0)
    emotions: list[str] = Field(default_factory=list)
    indicators: dict[str, bool] = Field(default_factory=dict)
    confidence: float = Field(default=75.0, ge=0.0, le=100.0)
    crisis_indicators: list[str] = Field(default_factory=list)
    summary: str = ""

    _percent = field_validator("confidence", mode="before")(_confidence_to_percent)
    _lists = field_validator("emotions", "crisis_indicators", mode="before")(_string_list)


class FacialEmotionPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    emotion: str
    intensity: float = Field(default=0.5, ge=0.0, le=1.0)


class VisualAnalysisPayload(BaseModel):
    """Expected reply for image analysis."""

    model_config = ConfigDict(extra="ignore")

    stress_score: float = Field(
        ge=0.0, le=10.0, validation_alias=AliasChoices("stress_score", "stress_level", "stressLevel")
    )
    facial_emotions: list[FacialEmotionPayload] = Field(default_factory=list)
    body_language: list[str] = Field(default_factory=list)
    confidence: float = Field(default=60.0, ge=0.0, le=100.0)
    summary: str = ""

    _percent = field_validator("confidence", mode="before")(_confidence_to_percent)
    _lists = field_validator("body_language", mode="before")(_string_list)


@dataclass(frozen=True)
class Parsed(Generic[PayloadT]):
    """Successfully validated payload."""

    value: PayloadT


@dataclass(frozen=True)
class ParseFailure:
    """Why a reply could not be used."""

    reason: str
    excerpt: str = ""

    def to_error(self) -> ParseError:
        return ParseError(self.reason, excerpt=self.excerpt)


ParseResult = Union[Parsed[PayloadT], ParseFailure]


def extract_json_object(raw: str) -> Optional[dict[str, Any]]:
    """
    Return the first JSON object embedded in raw, or None.

    Tries the whole (fence-stripped) text first, then decodes from
    each opening brace in turn.
    """
    text = _FENCE_PATTERN.sub("", raw).strip()
    if not text:
        return None

    try:
        value = json.loads(text)
        if isinstance(value, dict):
            return value
    except json.JSONDecodeError:
        pass

    decoder = json.JSONDecoder()
    index = text.find("{")
    while index != -1:
        try:
            value, _ = decoder.raw_decode(text, index)
            if isinstance(value, dict):
                return value
        except json.JSONDecodeError:
            pass
        index = text.find("{", index + 1)

    return None


class ModelResponseParser:
    """Parses model replies into validated payloads."""

    def parse(self, raw: str, schema: type[PayloadT]) -> ParseResult:
        """
        Parse raw model output against a schema.

        Args:
            raw: Model reply text
            schema: Pydantic payload model

        Returns:
            Parsed(value) or ParseFailure(reason)
        """
        excerpt = raw[:EXCERPT_LENGTH]

        if not raw or not raw.strip():
            return ParseFailure(reason="empty reply")

        data = extract_json_object(raw)
        if data is None:
            logger.info("Model reply contained no JSON object", schema=schema.__name__, length=len(raw))
            return ParseFailure(reason="no JSON object in reply", excerpt=excerpt)

        try:
            return Parsed(schema.model_validate(data))
        except ValidationError as e:
            fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
            logger.info("Model reply failed schema validation", schema=schema.__name__, fields=fields)
            return ParseFailure(reason=f"schema validation failed: {', '.join(fields)}", excerpt=excerpt)
