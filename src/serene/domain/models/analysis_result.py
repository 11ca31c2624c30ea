"""
Analysis Result Domain Models

Per-modality sub-analysis results, the crisis verdict computed ahead
of fusion, and the immutable combined HybridAnalysis.

SAFETY_CRITICAL: HybridAnalysis refuses construction with crisis
indicators set and a stress level below the crisis floor. The floor
is applied during fusion; it is never patched onto a finished result.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from serene.domain.enums import (
    AnalysisSource,
    ConversationTone,
    IntentType,
    Modality,
    MoodType,
    RiskLevel,
    StressTier,
    SupportLevel,
)

STRESS_MIN = 0.0
STRESS_MAX = 10.0
CRISIS_STRESS_FLOOR = 8.0


def clamp_stress(value: float) -> float:
    """Clamp a stress value into [0, 10]."""
    return max(STRESS_MIN, min(STRESS_MAX, float(value)))


def clamp_confidence(value: float) -> float:
    """Clamp a confidence value into [0, 100]."""
    return max(0.0, min(100.0, float(value)))


@dataclass
class SubAnalysisResult:
    """
    Output of one modality analyzer.

    Attributes:
        modality: Analyzed channel
        stress_score: Semantic stress score (0-10)
        confidence: Per-modality confidence (0-100)
        source: AI reply, heuristic fallback or default placeholder
        sentiment_polarity: -1.0 (negative) to 1.0 (positive)
        emotional_intensity: 0.0-1.0
        keywords: Emotional keywords found
        mood: Mood suggested by this modality
        intent: Intent suggested by this modality
        emotions: Emotion labels
        crisis_markers: Crisis phrases surfaced by the model or scan
        indicators: Named boolean signals (e.g. fast_speech)
        summary: Short human-readable explanation
        fallback_reason: Why the AI path was not used
    """

    modality: Modality
    stress_score: float
    confidence: float
    source: AnalysisSource
    sentiment_polarity: float = 0.0
    emotional_intensity: float = 0.0
    keywords: list[str] = field(default_factory=list)
    mood: Optional[MoodType] = None
    intent: Optional[IntentType] = None
    emotions: list[str] = field(default_factory=list)
    crisis_markers: list[str] = field(default_factory=list)
    indicators: dict[str, bool] = field(default_factory=dict)
    summary: str = ""
    fallback_reason: str = ""

    def __post_init__(self) -> None:
        self.stress_score = clamp_stress(self.stress_score)
        self.confidence = clamp_confidence(self.confidence)
        self.sentiment_polarity = max(-1.0, min(1.0, self.sentiment_polarity))
        self.emotional_intensity = max(0.0, min(1.0, self.emotional_intensity))

    @property
    def used_fallback(self) -> bool:
        return self.source != AnalysisSource.AI

    @property
    def is_informative(self) -> bool:
        """Default placeholders carry no signal and are not fused."""
        return self.source != AnalysisSource.DEFAULT


@dataclass(frozen=True)
class CrisisVerdict:
    """
    Deterministic crisis decision computed before fusion.

    Attributes:
        is_crisis: Whether the crisis constraint applies
        sources: Which checks fired (keyword_gate, linguistic, model)
        indicators: Matched phrases or markers
        severity: Linguistic severity score
    """

    is_crisis: bool
    sources: tuple[str, ...] = ()
    indicators: tuple[str, ...] = ()
    severity: int = 0

    @classmethod
    def none(cls) -> "CrisisVerdict":
        return cls(is_crisis=False)


@dataclass(frozen=True)
class HybridScoreBreakdown:
    """How the final stress level was reached."""

    modality_scores: dict[Modality, float]
    weights: dict[Modality, float]
    blended_score: float
    baseline: Optional[float]
    baseline_adjusted_score: float
    crisis_floor_applied: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "modality_scores": {m.value: round(s, 2) for m, s in self.modality_scores.items()},
            "weights": {m.value: round(w, 3) for m, w in self.weights.items()},
            "blended_score": round(self.blended_score, 2),
            "baseline": self.baseline,
            "baseline_adjusted_score": round(self.baseline_adjusted_score, 2),
            "crisis_floor_applied": self.crisis_floor_applied,
        }


@dataclass(frozen=True)
class HybridAnalysis:
    """
    Calibrated combined analysis of one message.

    Immutable once built by the combiner.

    Attributes:
        request_id: Source AnalysisRequest id
        user_id: Author identifier
        stress_level: Clamped to [0, 10], one decimal
        mood_type: Dominant mood
        intent_type: Communicative intent
        confidence: 0-100
        crisis_indicators: Crisis constraint applied
        support_level: Recommended support
        conversation_tone: Recommended reply tone
        detected_patterns: Recurring or notable patterns
        emotions: Emotion labels across modalities
        keywords: Emotional keywords across modalities
        breakdown: Score fusion details
        sources: Result source per modality
        summary: Short explanation
        suggested_action: Coaching suggestion for the user
        suggested_reply: Conversation-coach opener for a peer replying
        timestamp: When the analysis was produced
    """

    request_id: str
    user_id: str
    stress_level: float
    mood_type: MoodType
    intent_type: IntentType
    confidence: float
    crisis_indicators: bool
    support_level: SupportLevel
    conversation_tone: ConversationTone
    detected_patterns: tuple[str, ...] = ()
    emotions: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    breakdown: Optional[HybridScoreBreakdown] = None
    sources: dict[Modality, AnalysisSource] = field(default_factory=dict)
    summary: str = ""
    suggested_action: str = ""
    suggested_reply: str = ""
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        object.__setattr__(self, "stress_level", round(clamp_stress(self.stress_level), 1))
        object.__setattr__(self, "confidence", round(clamp_confidence(self.confidence), 1))

        if self.crisis_indicators and self.stress_level < CRISIS_STRESS_FLOOR:
            raise ValueError(
                f"Crisis analysis must have stress_level >= {CRISIS_STRESS_FLOOR}, "
                f"got {self.stress_level}"
            )

    @property
    def used_fallback(self) -> bool:
        """True when any informative modality came from a heuristic."""
        return any(source == AnalysisSource.HEURISTIC for source in self.sources.values())

    @property
    def risk_level(self) -> RiskLevel:
        return RiskLevel.from_score(self.stress_level)

    @property
    def stress_tier(self) -> StressTier:
        return StressTier.from_score(self.stress_level)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses and logging (no raw text)."""
        return {
            "request_id": self.request_id,
            "user_id": self.user_id,
            "stress_level": self.stress_level,
            "mood_type": self.mood_type.value,
            "intent_type": self.intent_type.value,
            "confidence": self.confidence,
            "crisis_indicators": self.crisis_indicators,
            "support_level": self.support_level.value,
            "conversation_tone": self.conversation_tone.value,
            "risk_level": self.risk_level.value,
            "detected_patterns": list(self.detected_patterns),
            "emotions": list(self.emotions),
            "keywords": list(self.keywords),
            "breakdown": self.breakdown.to_dict() if self.breakdown else None,
            "sources": {m.value: s.value for m, s in self.sources.items()},
            "summary": self.summary,
            "suggested_action": self.suggested_action,
            "suggested_reply": self.suggested_reply,
            "timestamp": self.timestamp.isoformat(),
        }
