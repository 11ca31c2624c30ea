"""
Unit Tests for Hybrid Score Combiner

Weighted fusion, baseline calibration, the crisis constraint and the
derived classifications.
"""

from typing import Optional

import pytest

from serene.domain.enums import (
    AnalysisSource,
    ConversationTone,
    IntentType,
    Modality,
    MoodType,
    SupportLevel,
)
from serene.domain.models import CrisisVerdict, HybridAnalysis, SubAnalysisResult, UserEmotionalProfile
from serene.services.fusion import FusionPolicy, HybridScoreCombiner, coach_reply, suggested_action


def _result(
    modality: Modality,
    score: float,
    source: AnalysisSource = AnalysisSource.AI,
    confidence: float = 80.0,
    mood: Optional[MoodType] = None,
    intent: Optional[IntentType] = None,
    emotions: Optional[list[str]] = None,
) -> SubAnalysisResult:
    return SubAnalysisResult(
        modality=modality,
        stress_score=score,
        confidence=confidence,
        source=source,
        mood=mood,
        intent=intent,
        emotions=emotions or [],
    )


CRISIS = CrisisVerdict(is_crisis=True, sources=("keyword_gate",), indicators=("want to die",))
NO_CRISIS = CrisisVerdict.none()


class TestFusionPolicy:
    """Test suite for FusionPolicy."""

    def test_weights_renormalized_over_present_modalities(self) -> None:
        weights = FusionPolicy().normalized_weights([Modality.TEXT, Modality.AUDIO])
        assert weights[Modality.TEXT] == pytest.approx(0.625)
        assert weights[Modality.AUDIO] == pytest.approx(0.375)

    def test_override_replaces_default(self) -> None:
        weights = FusionPolicy().normalized_weights(
            [Modality.TEXT, Modality.AUDIO], {Modality.AUDIO: 0.5}
        )
        assert weights[Modality.TEXT] == pytest.approx(0.5)
        assert weights[Modality.AUDIO] == pytest.approx(0.5)

    def test_zero_weights_share_equally(self) -> None:
        policy = FusionPolicy(weights={Modality.TEXT: 0.0, Modality.AUDIO: 0.0})
        weights = policy.normalized_weights([Modality.TEXT, Modality.AUDIO])
        assert weights == {Modality.TEXT: 0.5, Modality.AUDIO: 0.5}

    def test_no_modalities(self) -> None:
        assert FusionPolicy().normalized_weights([]) == {}

    def test_apply_baseline(self) -> None:
        assert FusionPolicy(baseline_blend=0.2).apply_baseline(6.0, 2.0) == pytest.approx(5.2)
        assert FusionPolicy().apply_baseline(6.0, None) == 6.0

    def test_invalid_blend_rejected(self) -> None:
        with pytest.raises(ValueError):
            FusionPolicy(baseline_blend=1.5)

    def test_floor_below_eight_rejected(self) -> None:
        with pytest.raises(ValueError):
            FusionPolicy(crisis_floor=6.0)


class TestHybridScoreCombiner:
    """Test suite for HybridScoreCombiner."""

    @pytest.fixture
    def combiner(self) -> HybridScoreCombiner:
        return HybridScoreCombiner()

    def test_text_only(self, combiner: HybridScoreCombiner) -> None:
        analysis = combiner.combine(
            "r1", "u1", [_result(Modality.TEXT, 6.0, mood=MoodType.ANXIOUS)], NO_CRISIS
        )
        assert analysis.stress_level == 6.0
        assert analysis.mood_type == MoodType.ANXIOUS
        assert not analysis.crisis_indicators
        assert analysis.breakdown is not None
        assert analysis.breakdown.weights == {Modality.TEXT: 1.0}

    def test_weighted_blend(self, combiner: HybridScoreCombiner) -> None:
        analysis = combiner.combine(
            "r1", "u1", [_result(Modality.TEXT, 4.0), _result(Modality.AUDIO, 8.0)], NO_CRISIS
        )
        # 0.625 * 4 + 0.375 * 8
        assert analysis.stress_level == 5.5

    def test_default_placeholders_ignored(self, combiner: HybridScoreCombiner) -> None:
        analysis = combiner.combine(
            "r1",
            "u1",
            [
                _result(Modality.TEXT, 7.0),
                _result(Modality.VISUAL, 5.0, source=AnalysisSource.DEFAULT, confidence=15.0),
            ],
            NO_CRISIS,
        )
        assert analysis.stress_level == 7.0
        assert Modality.VISUAL not in analysis.breakdown.weights
        assert analysis.sources[Modality.VISUAL] == AnalysisSource.DEFAULT

    def test_baseline_pull(self, combiner: HybridScoreCombiner) -> None:
        profile = UserEmotionalProfile(user_id="u1", baseline_stress=2.0)
        analysis = combiner.combine("r1", "u1", [_result(Modality.TEXT, 6.0)], NO_CRISIS, profile=profile)
        assert analysis.stress_level == 5.2
        assert analysis.breakdown.baseline == 2.0

    def test_personalized_weights(self, combiner: HybridScoreCombiner) -> None:
        profile = UserEmotionalProfile(
            user_id="u1",
            baseline_stress=5.0,
            personalized_weights={Modality.TEXT: 0.2, Modality.AUDIO: 0.8},
        )
        analysis = combiner.combine(
            "r1",
            "u1",
            [_result(Modality.TEXT, 2.0), _result(Modality.AUDIO, 7.0)],
            NO_CRISIS,
            profile=profile,
        )
        # blend 0.2*2 + 0.8*7 = 6.0, then 0.8*6 + 0.2*5
        assert analysis.stress_level == 5.8

    def test_crisis_floor(self, combiner: HybridScoreCombiner) -> None:
        analysis = combiner.combine("r1", "u1", [_result(Modality.TEXT, 3.0)], CRISIS)

        assert analysis.crisis_indicators
        assert analysis.stress_level == 8.0
        assert analysis.breakdown.crisis_floor_applied
        assert analysis.intent_type == IntentType.CRISIS
        assert analysis.support_level == SupportLevel.EMERGENCY
        assert analysis.conversation_tone == ConversationTone.URGENT
        assert "Crisis language detected" in analysis.detected_patterns

    def test_crisis_above_floor_unchanged(self, combiner: HybridScoreCombiner) -> None:
        analysis = combiner.combine("r1", "u1", [_result(Modality.TEXT, 9.4)], CRISIS)
        assert analysis.stress_level == 9.4
        assert not analysis.breakdown.crisis_floor_applied

    def test_emergency_support_reserved_for_crisis(self, combiner: HybridScoreCombiner) -> None:
        analysis = combiner.combine("r1", "u1", [_result(Modality.TEXT, 9.0)], NO_CRISIS)
        assert analysis.support_level == SupportLevel.PROFESSIONAL

    def test_model_crisis_intent_without_verdict(self, combiner: HybridScoreCombiner) -> None:
        analysis = combiner.combine(
            "r1", "u1", [_result(Modality.TEXT, 6.0, intent=IntentType.CRISIS)], NO_CRISIS
        )
        assert analysis.intent_type == IntentType.SEEKING_HELP

    def test_positive_mood_overridden_at_high_stress(self, combiner: HybridScoreCombiner) -> None:
        analysis = combiner.combine(
            "r1", "u1", [_result(Modality.TEXT, 7.0, mood=MoodType.HAPPY)], NO_CRISIS
        )
        assert analysis.mood_type == MoodType.STRESSED

    def test_mood_from_score_without_text_mood(self, combiner: HybridScoreCombiner) -> None:
        analysis = combiner.combine("r1", "u1", [_result(Modality.AUDIO, 2.0)], NO_CRISIS)
        assert analysis.mood_type == MoodType.CALM
        assert analysis.intent_type == IntentType.CASUAL_CHAT

    def test_no_informative_results_uses_neutral(self, combiner: HybridScoreCombiner) -> None:
        analysis = combiner.combine(
            "r1",
            "u1",
            [_result(Modality.VISUAL, 9.0, source=AnalysisSource.DEFAULT)],
            NO_CRISIS,
        )
        assert analysis.stress_level == 5.0
        assert analysis.confidence == 0.0

    def test_heuristic_confidence_capped(self, combiner: HybridScoreCombiner) -> None:
        analysis = combiner.combine(
            "r1",
            "u1",
            [_result(Modality.TEXT, 6.0, source=AnalysisSource.HEURISTIC, confidence=40.0)],
            NO_CRISIS,
            recent_levels=[5.0, 6.0],
            conversation_context=["earlier"],
        )
        assert analysis.confidence <= 40.0
        assert analysis.used_fallback
        assert "Heuristic analysis (AI unavailable)." in analysis.summary

    def test_confidence_adjustments(self, combiner: HybridScoreCombiner) -> None:
        base = combiner.combine("r1", "u1", [_result(Modality.TEXT, 6.0, confidence=70.0)], NO_CRISIS)
        enriched = combiner.combine(
            "r2",
            "u1",
            [_result(Modality.TEXT, 6.0, confidence=70.0)],
            NO_CRISIS,
            recent_levels=[4.0],
            conversation_context=["earlier message"],
            text="x" * 60,
        )
        assert base.confidence == 70.0
        assert enriched.confidence == 90.0

    def test_disagreement_lowers_confidence(self, combiner: HybridScoreCombiner) -> None:
        agree = combiner.combine(
            "r1", "u1", [_result(Modality.TEXT, 6.0), _result(Modality.AUDIO, 6.0)], NO_CRISIS
        )
        disagree = combiner.combine(
            "r2", "u1", [_result(Modality.TEXT, 1.0), _result(Modality.AUDIO, 9.0)], NO_CRISIS
        )
        assert disagree.confidence < agree.confidence

    def test_history_patterns(self, combiner: HybridScoreCombiner) -> None:
        analysis = combiner.combine(
            "r1", "u1", [_result(Modality.TEXT, 7.0)], NO_CRISIS, recent_levels=[7.0, 6.5, 7.5]
        )
        assert "Sustained high stress levels" in analysis.detected_patterns
        assert "Consistently elevated stress" in analysis.detected_patterns

    def test_absolute_thinking_pattern(self, combiner: HybridScoreCombiner) -> None:
        analysis = combiner.combine(
            "r1",
            "u1",
            [_result(Modality.TEXT, 6.0)],
            NO_CRISIS,
            text="I always get stressed before presentations",
        )
        assert "Absolute thinking about stress" in analysis.detected_patterns

    def test_known_trigger_pattern(self, combiner: HybridScoreCombiner) -> None:
        profile = UserEmotionalProfile(user_id="u1", trigger_words=["presentations"])
        analysis = combiner.combine(
            "r1",
            "u1",
            [_result(Modality.TEXT, 6.0)],
            NO_CRISIS,
            profile=profile,
            text="Two presentations this week",
        )
        assert "Known trigger: presentations" in analysis.detected_patterns

    def test_emotions_merged_by_confidence(self, combiner: HybridScoreCombiner) -> None:
        analysis = combiner.combine(
            "r1",
            "u1",
            [
                _result(Modality.TEXT, 6.0, confidence=70.0, emotions=["worry", "fear"]),
                _result(Modality.AUDIO, 6.0, confidence=90.0, emotions=["fear", "tension"]),
            ],
            NO_CRISIS,
        )
        assert analysis.emotions == ("fear", "tension", "worry")

    def test_coaching_attached(self, combiner: HybridScoreCombiner) -> None:
        analysis = combiner.combine(
            "r1", "u1", [_result(Modality.TEXT, 6.0, mood=MoodType.ANXIOUS)], NO_CRISIS
        )
        assert analysis.suggested_action == suggested_action(MoodType.ANXIOUS)
        assert analysis.suggested_reply == coach_reply(MoodType.ANXIOUS)

    def test_crisis_coaching_points_to_hotline(self, combiner: HybridScoreCombiner) -> None:
        analysis = combiner.combine("r1", "u1", [_result(Modality.TEXT, 9.0)], CRISIS)
        assert "988" in analysis.suggested_action


class TestHybridAnalysisInvariant:
    """The crisis floor holds for every constructed analysis."""

    def test_crisis_below_floor_rejected(self) -> None:
        with pytest.raises(ValueError):
            HybridAnalysis(
                request_id="r1",
                user_id="u1",
                stress_level=5.0,
                mood_type=MoodType.SAD,
                intent_type=IntentType.CRISIS,
                confidence=50.0,
                crisis_indicators=True,
                support_level=SupportLevel.EMERGENCY,
                conversation_tone=ConversationTone.URGENT,
            )

    def test_values_clamped_and_rounded(self) -> None:
        analysis = HybridAnalysis(
            request_id="r1",
            user_id="u1",
            stress_level=11.37,
            mood_type=MoodType.OVERWHELMED,
            intent_type=IntentType.VENTING,
            confidence=140.0,
            crisis_indicators=False,
            support_level=SupportLevel.PROFESSIONAL,
            conversation_tone=ConversationTone.CONCERNED,
        )
        assert analysis.stress_level == 10.0
        assert analysis.confidence == 100.0
