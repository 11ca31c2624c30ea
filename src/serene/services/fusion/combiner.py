"""
Hybrid Score Combiner

Fuses per-modality sub-analyses into one calibrated HybridAnalysis.

Steps:
1. Weighted blend of informative modality scores (default
   placeholders are ignored), weights renormalized over the present
   modalities, per-user weights overriding defaults.
2. Baseline pull toward the user's typical stress when a profile
   exists.
3. Crisis constraint: a positive CrisisVerdict raises the score to the
   crisis floor and forces intent Crisis, emergency support and an
   urgent tone. Applied once, here, and nowhere else.

SAFETY_CRITICAL: The crisis constraint is an input to fusion, so the
combined result is built already satisfying it.
"""

import re
from typing import Iterable, Optional, Sequence

from serene.config.logging_config import get_logger
from serene.domain.enums import (
    AnalysisSource,
    ConversationTone,
    IntentType,
    Modality,
    MoodType,
    SupportLevel,
)
from serene.domain.models import (
    CrisisVerdict,
    HybridAnalysis,
    HybridScoreBreakdown,
    SubAnalysisResult,
    UserEmotionalProfile,
    clamp_stress,
)
from serene.infrastructure.metrics import STRESS_LEVELS
from serene.services.fusion.coaching import coach_reply, suggested_action
from serene.services.fusion.policy import FusionPolicy

logger = get_logger(__name__)


class HybridScoreCombiner:
    """
    Combines sub-analysis results under a FusionPolicy.

    Usage:
        combiner = HybridScoreCombiner(FusionPolicy())
        analysis = combiner.combine(request.id, request.user_id, results, verdict)
    """

    NEUTRAL_SCORE = 5.0
    HEURISTIC_CONFIDENCE_CAP = 40.0

    SUSTAINED_WINDOW = 5
    SUSTAINED_MEAN = 6.0
    ELEVATED_LEVEL = 5.0
    ELEVATED_MIN_POINTS = 3

    ABSOLUTE_PATTERN = re.compile(r"\b(always|never)\b")
    STRESS_WORD_PATTERN = re.compile(r"\b(stress\w*|worr\w*|anx\w*|panic\w*)\b")

    def __init__(self, policy: Optional[FusionPolicy] = None) -> None:
        self._policy = policy or FusionPolicy()

    @property
    def policy(self) -> FusionPolicy:
        return self._policy

    def combine(
        self,
        request_id: str,
        user_id: str,
        results: Sequence[SubAnalysisResult],
        verdict: CrisisVerdict,
        profile: Optional[UserEmotionalProfile] = None,
        recent_levels: Sequence[float] = (),
        conversation_context: Sequence[str] = (),
        text: str = "",
    ) -> HybridAnalysis:
        """
        Build the combined analysis.

        Args:
            request_id: Source request id
            user_id: Author identifier
            results: One result per analyzed modality
            verdict: Crisis decision computed before fusion
            profile: Optional calibration profile
            recent_levels: Prior stress levels for this user, oldest first
            conversation_context: Recent messages
            text: Message text, for pattern checks

        Returns:
            HybridAnalysis satisfying the crisis constraint
        """
        informative = [r for r in results if r.is_informative]
        weights = self._policy.normalized_weights(
            (r.modality for r in informative),
            profile.personalized_weights if profile else None,
        )

        baseline = profile.baseline_stress if profile else None
        if informative:
            blended = sum(weights[r.modality] * r.stress_score for r in informative)
        else:
            blended = baseline if baseline is not None else self.NEUTRAL_SCORE

        adjusted = clamp_stress(self._policy.apply_baseline(blended, baseline))
        stress_level = adjusted
        floor_applied = False
        if verdict.is_crisis and adjusted < self._policy.crisis_floor:
            stress_level = self._policy.crisis_floor
            floor_applied = True

        mood = self._mood(informative, stress_level)
        intent = self._intent(informative, stress_level, verdict)
        confidence = self._confidence(
            informative, weights, stress_level, recent_levels, conversation_context, text
        )

        breakdown = HybridScoreBreakdown(
            modality_scores={r.modality: r.stress_score for r in informative},
            weights=weights,
            blended_score=blended,
            baseline=baseline,
            baseline_adjusted_score=adjusted,
            crisis_floor_applied=floor_applied,
        )

        analysis = HybridAnalysis(
            request_id=request_id,
            user_id=user_id,
            stress_level=stress_level,
            mood_type=mood,
            intent_type=intent,
            confidence=confidence,
            crisis_indicators=verdict.is_crisis,
            support_level=self._support(stress_level, verdict),
            conversation_tone=self._tone(stress_level, mood, verdict),
            detected_patterns=tuple(self._patterns(text, recent_levels, profile, verdict)),
            emotions=tuple(self._merge(r.emotions for r in self._by_confidence(informative))),
            keywords=tuple(self._merge(r.keywords for r in self._by_confidence(informative))),
            breakdown=breakdown,
            sources={r.modality: r.source for r in results},
            summary=self._summary(informative, verdict),
            suggested_action=suggested_action(mood, verdict.is_crisis),
            suggested_reply=coach_reply(mood, verdict.is_crisis),
        )

        STRESS_LEVELS.observe(analysis.stress_level)
        logger.info(
            "Hybrid analysis combined",
            request_id=request_id,
            stress_level=analysis.stress_level,
            confidence=analysis.confidence,
            modalities=[m.value for m in weights],
            crisis=verdict.is_crisis,
            floor_applied=floor_applied,
        )
        return analysis

    @staticmethod
    def _by_confidence(results: Iterable[SubAnalysisResult]) -> list[SubAnalysisResult]:
        return sorted(results, key=lambda r: r.confidence, reverse=True)

    @staticmethod
    def _merge(groups: Iterable[list[str]]) -> list[str]:
        return list(dict.fromkeys(item for group in groups for item in group if item))

    def _mood(self, results: list[SubAnalysisResult], stress_level: float) -> MoodType:
        text_result = next((r for r in results if r.modality == Modality.TEXT and r.mood), None)
        if text_result is not None:
            mood = text_result.mood
        else:
            with_mood = [r for r in self._by_confidence(results) if r.mood]
            mood = with_mood[0].mood if with_mood else self._mood_from_score(stress_level)

        if stress_level >= 6 and mood.is_positive:
            return MoodType.STRESSED
        return mood

    @staticmethod
    def _mood_from_score(stress_level: float) -> MoodType:
        if stress_level >= 8:
            return MoodType.OVERWHELMED
        if stress_level >= 6:
            return MoodType.STRESSED
        if stress_level < 3:
            return MoodType.CALM
        return MoodType.NEUTRAL

    def _intent(
        self,
        results: list[SubAnalysisResult],
        stress_level: float,
        verdict: CrisisVerdict,
    ) -> IntentType:
        if verdict.is_crisis:
            return IntentType.CRISIS

        text_result = next((r for r in results if r.modality == Modality.TEXT and r.intent), None)
        if text_result is not None:
            # Crisis intent only ever comes from a positive verdict
            if text_result.intent == IntentType.CRISIS:
                return IntentType.SEEKING_HELP
            return text_result.intent
        return IntentType.VENTING if stress_level >= 4 else IntentType.CASUAL_CHAT

    def _confidence(
        self,
        results: list[SubAnalysisResult],
        weights: dict[Modality, float],
        stress_level: float,
        recent_levels: Sequence[float],
        conversation_context: Sequence[str],
        text: str,
    ) -> float:
        if not results:
            return 0.0

        confidence = sum(weights[r.modality] * r.confidence for r in results)

        if len(results) > 1:
            scores = [r.stress_score for r in results]
            agreement = 1.0 - (max(scores) - min(scores)) / 10.0
            confidence += (agreement - 0.5) * 20.0

        if recent_levels:
            confidence += 10.0
        if conversation_context:
            confidence += 5.0
        if len(text) > 50:
            confidence += 5.0
        if round(stress_level, 1) == self.NEUTRAL_SCORE:
            confidence -= 10.0

        if all(r.source == AnalysisSource.HEURISTIC for r in results):
            confidence = min(confidence, self.HEURISTIC_CONFIDENCE_CAP)

        return max(0.0, min(100.0, confidence))

    @staticmethod
    def _support(stress_level: float, verdict: CrisisVerdict) -> SupportLevel:
        if verdict.is_crisis:
            return SupportLevel.EMERGENCY
        level = SupportLevel.from_score(stress_level)
        # Emergency support is reserved for a positive crisis verdict
        if level == SupportLevel.EMERGENCY:
            return SupportLevel.PROFESSIONAL
        return level

    @staticmethod
    def _tone(stress_level: float, mood: MoodType, verdict: CrisisVerdict) -> ConversationTone:
        if verdict.is_crisis:
            return ConversationTone.URGENT
        if stress_level >= 6:
            return ConversationTone.CONCERNED
        if not mood.is_positive and mood != MoodType.NEUTRAL:
            return ConversationTone.SUPPORTIVE
        return ConversationTone.NEUTRAL

    def _patterns(
        self,
        text: str,
        recent_levels: Sequence[float],
        profile: Optional[UserEmotionalProfile],
        verdict: CrisisVerdict,
    ) -> list[str]:
        patterns: list[str] = []

        if recent_levels:
            window = list(recent_levels)[-self.SUSTAINED_WINDOW:]
            if sum(window) / len(window) > self.SUSTAINED_MEAN:
                patterns.append("Sustained high stress levels")
            if len(window) >= self.ELEVATED_MIN_POINTS and all(v > self.ELEVATED_LEVEL for v in window):
                patterns.append("Consistently elevated stress")

        lowered = text.lower()
        if self.ABSOLUTE_PATTERN.search(lowered) and self.STRESS_WORD_PATTERN.search(lowered):
            patterns.append("Absolute thinking about stress")

        if profile is not None:
            for word in profile.trigger_words:
                if word and re.search(r"\b" + re.escape(word.lower()) + r"\b", lowered):
                    patterns.append(f"Known trigger: {word}")

        if verdict.is_crisis:
            patterns.append("Crisis language detected")

        return patterns

    @staticmethod
    def _summary(results: list[SubAnalysisResult], verdict: CrisisVerdict) -> str:
        parts = [r.summary for r in results if r.summary]
        if verdict.is_crisis:
            parts.append("Crisis indicators present.")
        if any(r.used_fallback for r in results):
            parts.append("Heuristic analysis (AI unavailable).")
        return " ".join(parts)
