"""Domain models package."""

from serene.domain.models.analysis_request import AnalysisRequest, AudioSignal, ImageSignal
from serene.domain.models.analysis_result import (
    CRISIS_STRESS_FLOOR,
    CrisisVerdict,
    HybridAnalysis,
    HybridScoreBreakdown,
    SubAnalysisResult,
    clamp_stress,
)
from serene.domain.models.notification import Notification, notification_key
from serene.domain.models.profile import UserEmotionalProfile, UserFeedback
from serene.domain.models.tracking import (
    DailyStress,
    PatternReport,
    StressHistoryEntry,
    StressTrendSummary,
)

__all__ = [
    # Requests
    "AnalysisRequest",
    "AudioSignal",
    "ImageSignal",
    # Results
    "CRISIS_STRESS_FLOOR",
    "CrisisVerdict",
    "HybridAnalysis",
    "HybridScoreBreakdown",
    "SubAnalysisResult",
    "clamp_stress",
    # Notifications
    "Notification",
    "notification_key",
    # Profiles
    "UserEmotionalProfile",
    "UserFeedback",
    # Tracking
    "DailyStress",
    "PatternReport",
    "StressHistoryEntry",
    "StressTrendSummary",
]
