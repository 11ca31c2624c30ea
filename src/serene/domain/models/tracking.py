"""
Stress History and Trend Models

History entries are the per-user record the tracker reads and
appends. PatternReport is the tracker's answer for one new analysis;
StressTrendSummary is the longer-range view exposed to the UI.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from serene.domain.enums import MoodType, TrendDirection


@dataclass
class StressHistoryEntry:
    """One combined analysis as remembered for trend tracking."""

    request_id: str
    user_id: str
    stress_level: float
    mood_type: MoodType = MoodType.NEUTRAL
    emotions: list[str] = field(default_factory=list)
    crisis_indicators: bool = False
    timestamp: datetime = field(default_factory=datetime.utcnow)


@dataclass(frozen=True)
class PatternReport:
    """
    Tracker output for one recorded analysis.

    Attributes:
        user_id: Tracked user
        window: Rolling window of stress levels, oldest first
        pattern_active: Whether the window is in the alert state
        pattern_alert: True only on the transition into the alert state
        trend: Coarse direction over the time window
        high_count: Values at or above the threshold in the lookback
    """

    user_id: str
    window: tuple[float, ...]
    pattern_active: bool
    pattern_alert: bool
    trend: TrendDirection
    high_count: int = 0


@dataclass(frozen=True)
class DailyStress:
    day: date
    average_stress: float
    message_count: int


@dataclass(frozen=True)
class StressTrendSummary:
    """
    Aggregated stress view for a user over a number of days.

    Attributes:
        user_id: Tracked user
        days: Window length
        total_messages: Analyses in the window
        average_stress: Mean stress level
        high_stress_count: Analyses at 7 or above
        top_emotions: Most frequent emotions, at most five
        daily: Per-day averages, oldest first
        trend: Coarse direction over the window
    """

    user_id: str
    days: int
    total_messages: int
    average_stress: float
    high_stress_count: int
    top_emotions: tuple[str, ...]
    daily: tuple[DailyStress, ...]
    trend: TrendDirection

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "days": self.days,
            "total_messages": self.total_messages,
            "average_stress": self.average_stress,
            "high_stress_count": self.high_stress_count,
            "top_emotions": list(self.top_emotions),
            "daily": [
                {
                    "date": d.day.isoformat(),
                    "average_stress": d.average_stress,
                    "message_count": d.message_count,
                }
                for d in self.daily
            ],
            "trend": self.trend.value,
        }
