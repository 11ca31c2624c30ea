"""
Notification Domain Model

Persisted alert produced by the dispatcher. Lives until the user
deletes it.

The notification id is the idempotency key: the source request id
for stress notifications and "<request id>:pattern" for pattern
alerts, scoped per user, so a request yields at most one notification
of each kind per user.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from serene.domain.enums import NotificationKind, StressTier, UrgencyLevel

HIGH_PRIORITY_SCORE = 7.0


def notification_key(request_id: str, kind: NotificationKind = NotificationKind.STRESS) -> str:
    """Idempotency key for a request and notification kind."""
    if kind == NotificationKind.STRESS:
        return request_id
    return f"{request_id}:{kind.value}"


@dataclass
class Notification:
    """
    A user-facing stress or pattern notification.

    Attributes:
        id: Idempotency key (see notification_key)
        request_id: Source AnalysisRequest id
        user_id: Recipient
        message: Severity-tiered message text
        stress_score: Stress level that triggered it
        stress_tier: Coarse band of stress_score
        urgency: normal / attention / urgent
        kind: stress or pattern
        remedies: Ordered suggestions
        original_message: Message excerpt the user wrote
        emotions: Detected emotions
        group_id: Conversation the message belongs to
        timestamp: Creation time
        is_read: Read flag
    """

    id: str
    request_id: str
    user_id: str
    message: str
    stress_score: float
    stress_tier: StressTier
    urgency: UrgencyLevel
    kind: NotificationKind = NotificationKind.STRESS
    remedies: list[str] = field(default_factory=list)
    original_message: str = ""
    emotions: list[str] = field(default_factory=list)
    group_id: str = ""
    timestamp: datetime = field(default_factory=datetime.utcnow)
    is_read: bool = False

    @property
    def is_high_priority(self) -> bool:
        """Unread and either urgent or scored at 7 or above."""
        return not self.is_read and (
            self.urgency == UrgencyLevel.URGENT or self.stress_score >= HIGH_PRIORITY_SCORE
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "request_id": self.request_id,
            "user_id": self.user_id,
            "message": self.message,
            "stress_score": self.stress_score,
            "stress_tier": self.stress_tier.value,
            "urgency": self.urgency.value,
            "kind": self.kind.value,
            "remedies": list(self.remedies),
            "original_message": self.original_message,
            "emotions": list(self.emotions),
            "group_id": self.group_id,
            "timestamp": self.timestamp.isoformat(),
            "is_read": self.is_read,
        }
