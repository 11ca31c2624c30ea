"""
Audio Sub-Analyzer

Vocal stress analysis from acoustic features and the transcript.

The fallback combines the transcript keyword scan with simple
acoustic thresholds. With neither features nor a transcript the
result is a default placeholder that fusion ignores.

CLINICAL_REVIEW_REQUIRED: Acoustic thresholds are empirically chosen.
"""

from typing import Optional

from serene.domain.enums import AnalysisSource, Modality
from serene.domain.models import AnalysisRequest, SubAnalysisResult, UserEmotionalProfile
from serene.services.analysis.base import SubAnalyzer
from serene.services.analysis.heuristics import StressHeuristics
from serene.services.analysis.response_parser import AudioAnalysisPayload
from serene.services.prompt import BuiltPrompt


class AudioSubAnalyzer(SubAnalyzer):
    """Analyzes the voice channel."""

    modality = Modality.AUDIO
    schema = AudioAnalysisPayload

    FAST_SPEECH_WPM = 180.0
    HIGH_PITCH_VARIATION = 0.6
    LONG_PAUSE_SECONDS = 2.0
    LOW_ENERGY = 0.3

    # indicator -> score adjustment
    ACOUSTIC_WEIGHTS: dict[str, float] = {
        "fast_speech": 1.0,
        "high_pitch_variation": 1.0,
        "long_pauses": 0.8,
        "low_energy": 0.5,
    }

    NEUTRAL_SCORE = 3.0

    def __init__(self, *args, heuristics: Optional[StressHeuristics] = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._heuristics = heuristics or StressHeuristics()

    def build_prompt(
        self,
        request: AnalysisRequest,
        profile: Optional[UserEmotionalProfile] = None,
    ) -> BuiltPrompt:
        return self._prompts.build_audio_prompt(request)

    def from_payload(self, request: AnalysisRequest, payload: AudioAnalysisPayload) -> SubAnalysisResult:
        indicators = self.acoustic_indicators(request)
        indicators.update(payload.indicators)
        score = payload.stress_score
        if payload.voice_stress is not None:
            score = (payload.stress_score + payload.voice_stress) / 2
        return SubAnalysisResult(
            modality=self.modality,
            stress_score=score,
            confidence=payload.confidence,
            source=AnalysisSource.AI,
            emotions=[e.lower() for e in payload.emotions],
            crisis_markers=list(payload.crisis_indicators),
            indicators=indicators,
            summary=payload.summary,
        )

    def acoustic_indicators(self, request: AnalysisRequest) -> dict[str, bool]:
        """Threshold checks over the supplied features."""
        audio = request.audio
        if audio is None:
            return {}
        indicators: dict[str, bool] = {}
        if audio.speech_rate_wpm is not None:
            indicators["fast_speech"] = audio.speech_rate_wpm > self.FAST_SPEECH_WPM
        if audio.pitch_variation is not None:
            indicators["high_pitch_variation"] = audio.pitch_variation > self.HIGH_PITCH_VARIATION
        if audio.pause_durations:
            indicators["long_pauses"] = max(audio.pause_durations) > self.LONG_PAUSE_SECONDS
        if audio.energy_level is not None:
            indicators["low_energy"] = audio.energy_level < self.LOW_ENERGY
        return indicators

    def fallback(self, request: AnalysisRequest) -> SubAnalysisResult:
        audio = request.audio
        if audio is None or (not audio.has_features and not audio.transcript):
            return SubAnalysisResult(
                modality=self.modality,
                stress_score=5.0,
                confidence=10.0,
                source=AnalysisSource.DEFAULT,
                summary="No usable voice features",
            )

        indicators = self.acoustic_indicators(request)
        score = self.NEUTRAL_SCORE
        emotions: list[str] = []
        crisis_markers: list[str] = []
        confidence = 20.0

        if audio.transcript:
            scan = self._heuristics.scan(audio.transcript)
            score = scan.stress_score
            emotions = scan.emotions
            crisis_markers = list(scan.severe_matches)
            confidence = scan.confidence

        boost = sum(self.ACOUSTIC_WEIGHTS[name] for name, fired in indicators.items() if fired)
        if audio.has_features:
            confidence = max(confidence, 30.0)

        return SubAnalysisResult(
            modality=self.modality,
            stress_score=score + boost,
            confidence=confidence,
            source=AnalysisSource.HEURISTIC,
            emotions=emotions,
            crisis_markers=crisis_markers,
            indicators=indicators,
            summary="Acoustic thresholds" + (" and transcript scan" if audio.transcript else ""),
        )
