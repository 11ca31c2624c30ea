"""Pipeline orchestration: per-request pipeline, intake and service wiring."""

from serene.services.orchestration.intake import IntakeResult, MessageIntake
from serene.services.orchestration.pipeline import PipelineOutcome, StressAnalysisPipeline
from serene.services.orchestration.service import StressAnalysisService

__all__ = [
    "IntakeResult",
    "MessageIntake",
    "PipelineOutcome",
    "StressAnalysisPipeline",
    "StressAnalysisService",
]
