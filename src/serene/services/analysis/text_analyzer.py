"""
Text Sub-Analyzer

Semantic stress analysis of the message text (plus any voice
transcript), with the keyword-tier heuristic as fallback.
"""

from typing import Optional

from serene.domain.enums import AnalysisSource, IntentType, Modality, MoodType
from serene.domain.models import AnalysisRequest, SubAnalysisResult, UserEmotionalProfile
from serene.services.analysis.base import SubAnalyzer
from serene.services.analysis.heuristics import StressHeuristics
from serene.services.analysis.response_parser import TextAnalysisPayload
from serene.services.prompt import BuiltPrompt


class TextSubAnalyzer(SubAnalyzer):
    """Analyzes the text channel."""

    modality = Modality.TEXT
    schema = TextAnalysisPayload

    def __init__(self, *args, heuristics: Optional[StressHeuristics] = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._heuristics = heuristics or StressHeuristics()

    def build_prompt(
        self,
        request: AnalysisRequest,
        profile: Optional[UserEmotionalProfile] = None,
    ) -> BuiltPrompt:
        return self._prompts.build_text_prompt(request, profile)

    def from_payload(self, request: AnalysisRequest, payload: TextAnalysisPayload) -> SubAnalysisResult:
        return SubAnalysisResult(
            modality=self.modality,
            stress_score=payload.stress_score,
            confidence=payload.confidence,
            source=AnalysisSource.AI,
            sentiment_polarity=payload.sentiment_polarity,
            emotional_intensity=payload.emotional_intensity,
            keywords=[k.lower() for k in payload.keywords],
            mood=MoodType.parse(payload.mood) if payload.mood else None,
            intent=IntentType.parse(payload.intent) if payload.intent else None,
            emotions=[e.lower() for e in payload.emotions],
            crisis_markers=list(payload.crisis_indicators),
            summary=payload.summary,
        )

    def fallback(self, request: AnalysisRequest) -> SubAnalysisResult:
        scan = self._heuristics.scan(request.analysis_text)
        return SubAnalysisResult(
            modality=self.modality,
            stress_score=scan.stress_score,
            confidence=scan.confidence,
            source=AnalysisSource.HEURISTIC,
            sentiment_polarity=scan.sentiment_polarity,
            emotional_intensity=min(1.0, scan.stress_score / 10.0),
            keywords=scan.keywords,
            mood=scan.mood,
            intent=scan.intent,
            emotions=scan.emotions,
            crisis_markers=list(scan.severe_matches),
            summary=f"Keyword scan ({scan.tier} tier)",
        )
