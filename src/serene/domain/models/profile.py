"""
User Emotional Profile Domain Model

Persistent per-user calibration: baseline stress, personalized
fusion weights, trigger words, calming factors and feedback history.

The profile is changed only by explicit user feedback or edits,
never by analysis alone.

PRIVACY: Trigger words and feedback are sensitive personal data.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from serene.domain.enums import Modality

FEEDBACK_HISTORY_LIMIT = 50


@dataclass
class UserFeedback:
    """
    Explicit user feedback on one analysis.

    Attributes:
        request_id: Analysed request
        reported_stress: Stress the user says they felt (0-10)
        predicted_stress: Stress level the system reported
        modality_scores: Per-modality scores behind the prediction
        was_helpful: Whether the suggestions helped
        comment: Optional free-text comment
        timestamp: When feedback was given
    """

    request_id: str
    reported_stress: float
    predicted_stress: float
    modality_scores: dict[Modality, float] = field(default_factory=dict)
    was_helpful: Optional[bool] = None
    comment: str = ""
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        if not 0.0 <= self.reported_stress <= 10.0:
            raise ValueError(f"reported_stress must be 0-10, got {self.reported_stress}")

    @property
    def error(self) -> float:
        return self.reported_stress - self.predicted_stress

    def to_dict(self) -> dict[str, Any]:
        return {
            "request_id": self.request_id,
            "reported_stress": self.reported_stress,
            "predicted_stress": self.predicted_stress,
            "modality_scores": {m.value: s for m, s in self.modality_scores.items()},
            "was_helpful": self.was_helpful,
            "comment": self.comment,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserFeedback":
        return cls(
            request_id=data["request_id"],
            reported_stress=float(data["reported_stress"]),
            predicted_stress=float(data["predicted_stress"]),
            modality_scores={Modality(m): float(s) for m, s in data.get("modality_scores", {}).items()},
            was_helpful=data.get("was_helpful"),
            comment=data.get("comment", ""),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


@dataclass
class UserEmotionalProfile:
    """
    Per-user calibration data.

    Attributes:
        user_id: Owner
        baseline_stress: Typical stress level (0-10)
        personalized_weights: Fusion weight overrides, None for defaults
        trigger_words: Words that reliably precede stress for this user
        calming_factors: Activities the user reports as calming
        feedback_history: Most recent feedback, oldest first
        preferred_communication_style: Free-form preference label
        response_accuracy: Rolling accuracy of past predictions (0-1)
        updated_at: Last explicit change
    """

    user_id: str
    baseline_stress: float = 5.0
    personalized_weights: Optional[dict[Modality, float]] = None
    trigger_words: list[str] = field(default_factory=list)
    calming_factors: list[str] = field(default_factory=list)
    feedback_history: list[UserFeedback] = field(default_factory=list)
    preferred_communication_style: str = "supportive"
    response_accuracy: float = 0.5
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        if not 0.0 <= self.baseline_stress <= 10.0:
            raise ValueError(f"baseline_stress must be 0-10, got {self.baseline_stress}")

    def append_feedback(self, feedback: UserFeedback) -> None:
        self.feedback_history.append(feedback)
        if len(self.feedback_history) > FEEDBACK_HISTORY_LIMIT:
            self.feedback_history = self.feedback_history[-FEEDBACK_HISTORY_LIMIT:]
        self.updated_at = datetime.utcnow()

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "baseline_stress": round(self.baseline_stress, 2),
            "personalized_weights": (
                {m.value: w for m, w in self.personalized_weights.items()}
                if self.personalized_weights
                else None
            ),
            "trigger_words": list(self.trigger_words),
            "calming_factors": list(self.calming_factors),
            "feedback_history": [f.to_dict() for f in self.feedback_history],
            "preferred_communication_style": self.preferred_communication_style,
            "response_accuracy": round(self.response_accuracy, 3),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserEmotionalProfile":
        weights = data.get("personalized_weights")
        return cls(
            user_id=data["user_id"],
            baseline_stress=float(data.get("baseline_stress", 5.0)),
            personalized_weights=(
                {Modality(m): float(w) for m, w in weights.items()} if weights else None
            ),
            trigger_words=list(data.get("trigger_words", [])),
            calming_factors=list(data.get("calming_factors", [])),
            feedback_history=[UserFeedback.from_dict(f) for f in data.get("feedback_history", [])],
            preferred_communication_style=data.get("preferred_communication_style", "supportive"),
            response_accuracy=float(data.get("response_accuracy", 0.5)),
            updated_at=(
                datetime.fromisoformat(data["updated_at"]) if data.get("updated_at") else datetime.utcnow()
            ),
        )
