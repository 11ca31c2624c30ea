"""Domain enums package."""

from serene.domain.enums.stress_enums import (
    AnalysisSource,
    ConversationTone,
    GateRiskLevel,
    IntentType,
    Modality,
    MoodType,
    NotificationKind,
    PipelineState,
    RiskLevel,
    StressTier,
    SupportLevel,
    TrendDirection,
    UrgencyLevel,
)

__all__ = [
    "AnalysisSource",
    "ConversationTone",
    "GateRiskLevel",
    "IntentType",
    "Modality",
    "MoodType",
    "NotificationKind",
    "PipelineState",
    "RiskLevel",
    "StressTier",
    "SupportLevel",
    "TrendDirection",
    "UrgencyLevel",
]
