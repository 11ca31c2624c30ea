"""
Stress Analysis Enumerations

Classification vocabularies shared by the analyzers, the combiner,
the tracker and the notification dispatcher.

CLINICAL_REVIEW_REQUIRED: Tier boundaries are empirically chosen
defaults and should be reviewed by wellbeing professionals.
"""

from enum import StrEnum


class MoodType(StrEnum):
    """
    Dominant mood detected in a message.

    Values use display casing because they are shown to users
    and exchanged with the generative-AI backend verbatim.
    """

    CALM = "Calm"
    """Relaxed, settled."""

    HAPPY = "Happy"
    """Positive, content."""

    MOTIVATED = "Motivated"
    """Energised, goal-directed."""

    NEUTRAL = "Neutral"
    """No dominant mood."""

    STRESSED = "Stressed"
    """Under pressure."""

    ANXIOUS = "Anxious"
    """Worried or nervous."""

    FRUSTRATED = "Frustrated"
    """Blocked, irritated."""

    ANGRY = "Angry"
    """Hostile or furious."""

    SAD = "Sad"
    """Low, down."""

    LONELY = "Lonely"
    """Isolated, disconnected."""

    OVERWHELMED = "Overwhelmed"
    """Unable to cope with the load."""

    @property
    def is_positive(self) -> bool:
        """True for moods that never warrant intervention."""
        return self in {MoodType.CALM, MoodType.HAPPY, MoodType.MOTIVATED}

    @classmethod
    def parse(cls, value: str) -> "MoodType":
        """Case-insensitive lookup; unknown values map to NEUTRAL."""
        lowered = value.strip().lower()
        for member in cls:
            if member.value.lower() == lowered:
                return member
        return cls.NEUTRAL


class IntentType(StrEnum):
    """Communicative intent of a message."""

    VENTING = "Venting"
    SEEKING_HELP = "Seeking Help"
    SHARING_INFORMATION = "Sharing Information"
    ASKING_FOR_ADVICE = "Asking for Advice"
    CASUAL_CHAT = "Casual Chat"
    CRISIS = "Crisis"
    """Forced by a positive crisis verdict."""

    @classmethod
    def parse(cls, value: str) -> "IntentType":
        """Case-insensitive lookup; unknown values map to CASUAL_CHAT."""
        lowered = value.strip().lower()
        for member in cls:
            if member.value.lower() == lowered:
                return member
        return cls.CASUAL_CHAT


class SupportLevel(StrEnum):
    """
    Level of support the message suggests.

    SAFETY_NOTE: EMERGENCY is forced whenever crisis indicators are set.
    """

    NONE = "none"
    """No support needed."""

    PEER = "peer"
    """Peers in the group can help."""

    PROFESSIONAL = "professional"
    """Counselling or professional help recommended."""

    EMERGENCY = "emergency"
    """Immediate crisis resources required."""

    @classmethod
    def from_score(cls, stress_level: float) -> "SupportLevel":
        if stress_level >= 8:
            return cls.EMERGENCY
        if stress_level >= 6:
            return cls.PROFESSIONAL
        if stress_level >= 4:
            return cls.PEER
        return cls.NONE


class ConversationTone(StrEnum):
    """Tone recommended for replies in the conversation."""

    SUPPORTIVE = "supportive"
    NEUTRAL = "neutral"
    CONCERNED = "concerned"
    URGENT = "urgent"


class UrgencyLevel(StrEnum):
    """
    Notification priority bucket.

    Derived from stress level and crisis status by the dispatcher.
    """

    NORMAL = "normal"
    """In-app notification only."""

    ATTENTION = "attention"
    """Highlighted in the feed."""

    URGENT = "urgent"
    """
    Out-of-band alert requested.

    SAFETY_NOTE: Always used when crisis indicators are set.
    """


class StressTier(StrEnum):
    """Coarse stress band stored on notifications."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    SEVERE = "severe"

    @classmethod
    def from_score(cls, stress_level: float) -> "StressTier":
        if stress_level >= 8:
            return cls.SEVERE
        if stress_level >= 6:
            return cls.HIGH
        if stress_level >= 4:
            return cls.MODERATE
        return cls.LOW


class RiskLevel(StrEnum):
    """Overall risk derived from a combined stress level."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def from_score(cls, stress_level: float) -> "RiskLevel":
        if stress_level >= 8:
            return cls.CRITICAL
        if stress_level >= 6:
            return cls.HIGH
        if stress_level >= 4:
            return cls.MEDIUM
        return cls.LOW


class GateRiskLevel(StrEnum):
    """
    Result of the synchronous keyword gate.

    SAFETY_NOTE: CRITICAL blocks message transmission until the
    user acknowledges the safety prompt.
    """

    NONE = "none"
    """No crisis phrasing detected."""

    URGENT = "urgent"
    """Desperation phrasing; message is sent, analysis continues."""

    CRITICAL = "critical"
    """Self-harm or suicide phrasing."""


class Modality(StrEnum):
    """Analyzed input channel."""

    TEXT = "text"
    AUDIO = "audio"
    VISUAL = "visual"


class AnalysisSource(StrEnum):
    """Where a sub-analysis result came from."""

    AI = "ai"
    """Validated generative-AI reply."""

    HEURISTIC = "heuristic"
    """Deterministic fallback scan."""

    DEFAULT = "default"
    """Non-informative placeholder; excluded from fusion."""


class TrendDirection(StrEnum):
    """Coarse stress trend over a time window."""

    IMPROVING = "improving"
    STABLE = "stable"
    CONCERNING = "concerning"


class PipelineState(StrEnum):
    """Per-message processing state."""

    QUEUED = "queued"
    ANALYZING = "analyzing"
    SUCCEEDED = "succeeded"
    FALLBACK_USED = "fallback_used"
    FAILED = "failed"
    NOTIFICATION_CREATED = "notification_created"


class NotificationKind(StrEnum):
    """Origin of a notification."""

    STRESS = "stress"
    """Single-message stress notification."""

    PATTERN = "pattern"
    """Trend-based alert over several recent messages."""
