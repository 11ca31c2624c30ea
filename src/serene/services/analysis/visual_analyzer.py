"""
Visual Sub-Analyzer

Facial expression and posture cues from an attached image. There is
no offline image heuristic, so the fallback is a default placeholder
that fusion ignores.
"""

from typing import Optional

from serene.domain.enums import AnalysisSource, Modality
from serene.domain.models import AnalysisRequest, SubAnalysisResult, UserEmotionalProfile
from serene.services.analysis.base import SubAnalyzer
from serene.services.analysis.response_parser import VisualAnalysisPayload
from serene.services.prompt import BuiltPrompt


class VisualSubAnalyzer(SubAnalyzer):
    """Analyzes the image channel."""

    modality = Modality.VISUAL
    schema = VisualAnalysisPayload

    def build_prompt(
        self,
        request: AnalysisRequest,
        profile: Optional[UserEmotionalProfile] = None,
    ) -> BuiltPrompt:
        return self._prompts.build_visual_prompt(request)

    def from_payload(self, request: AnalysisRequest, payload: VisualAnalysisPayload) -> SubAnalysisResult:
        emotions = [
            f.emotion.lower()
            for f in sorted(payload.facial_emotions, key=lambda f: f.intensity, reverse=True)
        ]
        intensity = max((f.intensity for f in payload.facial_emotions), default=0.0)
        return SubAnalysisResult(
            modality=self.modality,
            stress_score=payload.stress_score,
            confidence=payload.confidence,
            source=AnalysisSource.AI,
            emotional_intensity=intensity,
            emotions=emotions,
            keywords=[b.lower() for b in payload.body_language],
            summary=payload.summary,
        )

    def fallback(self, request: AnalysisRequest) -> SubAnalysisResult:
        return SubAnalysisResult(
            modality=self.modality,
            stress_score=5.0,
            confidence=15.0,
            source=AnalysisSource.DEFAULT,
            summary="Image analysis unavailable",
        )
