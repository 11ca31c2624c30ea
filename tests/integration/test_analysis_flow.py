"""
Integration tests for the full analysis flow.

Message intake → queue → sub-analyzers → combiner → tracker →
dispatcher, wired by StressAnalysisService with in-memory storage.
"""

import pytest

from serene.config import Settings
from serene.domain.enums import (
    AnalysisSource,
    GateRiskLevel,
    Modality,
    MoodType,
    NotificationKind,
    PipelineState,
    SupportLevel,
    UrgencyLevel,
)
from serene.domain.models import AnalysisRequest, ImageSignal, UserFeedback
from serene.infrastructure.database.connection import DatabaseManager
from serene.infrastructure.database.repositories import (
    SQLHistoryRepository,
    SQLNotificationRepository,
    SQLProfileRepository,
)
from serene.services.notifications import templates
from serene.services.orchestration import StressAnalysisService
from tests.fakes import RecordingNotifier, ScriptedProvider, provider_error

EXAM_MESSAGE = "I have exams tomorrow and a lot to finish, pretty stressed"


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
async def service(test_settings: Settings, notifier: RecordingNotifier):
    svc = StressAnalysisService(test_settings, provider=None, notifier=notifier)
    await svc.initialize()
    yield svc
    await svc.shutdown()


class TestReferenceScenarios:
    """End-to-end behaviour for representative messages."""

    async def test_exam_stress_without_ai(self, service: StressAnalysisService, make_request) -> None:
        request = make_request(EXAM_MESSAGE)

        result = service.submit(request)
        await service.queue.join()

        assert result.allowed
        assert result.decision.risk_level == GateRiskLevel.NONE

        notifications = await service.feed.list_notifications("user-1")
        assert len(notifications) == 1
        assert 4.0 <= notifications[0].stress_score <= 6.0
        assert notifications[0].urgency == UrgencyLevel.NORMAL

        outcome = await service.pipeline.process(make_request(EXAM_MESSAGE))
        assert 4.0 <= outcome.analysis.stress_level <= 6.0
        assert not outcome.analysis.crisis_indicators
        assert outcome.state == PipelineState.FALLBACK_USED
        assert outcome.analysis.sources[Modality.TEXT] == AnalysisSource.HEURISTIC

    async def test_positive_message(self, service: StressAnalysisService, make_request) -> None:
        outcome = await service.pipeline.process(make_request("Feeling great today!"))

        assert 1.0 <= outcome.analysis.stress_level <= 3.0
        assert outcome.analysis.mood_type.is_positive
        assert outcome.notifications == ()
        assert outcome.states == [PipelineState.FALLBACK_USED]

    async def test_crisis_message(
        self, service: StressAnalysisService, notifier: RecordingNotifier, make_request
    ) -> None:
        request = make_request("I want to kill myself")

        result = service.submit(request)
        assert not result.allowed
        assert result.decision.scan.is_critical

        await service.queue.join()

        notification = (await service.feed.list_notifications("user-1"))[0]
        assert notification.stress_score >= 8.0
        assert notification.urgency == UrgencyLevel.URGENT
        assert notification.message == templates.CRISIS_MESSAGE
        assert len(notifier.alerts) == 1


class TestCrisisConstraint:
    """A positive crisis verdict overrides low fused scores."""

    async def test_floor_applied_over_calm_model_reply(self, test_settings: Settings, make_request) -> None:
        provider = ScriptedProvider({"stress_score": 2, "mood": "calm", "confidence": 90})
        service = StressAnalysisService(test_settings, provider=provider)

        outcome = await service.pipeline.process(make_request("honestly I want to die"))

        assert outcome.analysis.crisis_indicators
        assert outcome.analysis.stress_level == 8.0
        assert outcome.analysis.support_level == SupportLevel.EMERGENCY
        assert outcome.analysis.breakdown.crisis_floor_applied
        assert "keyword_gate" in outcome.verdict.sources

    async def test_model_flag_alone_triggers_constraint(self, test_settings: Settings, make_request) -> None:
        provider = ScriptedProvider({"stress_score": 6, "crisis_indicators": True})
        service = StressAnalysisService(test_settings, provider=provider)

        outcome = await service.pipeline.process(make_request("I don't know anymore"))

        assert outcome.verdict.sources == ("model",)
        assert outcome.analysis.stress_level >= 8.0

    async def test_high_score_without_crisis_is_not_emergency(
        self, test_settings: Settings, make_request
    ) -> None:
        provider = ScriptedProvider({"stress_score": 9.5, "mood": "overwhelmed"})
        service = StressAnalysisService(test_settings, provider=provider)

        outcome = await service.pipeline.process(make_request("Everything is piling up at once"))

        assert not outcome.analysis.crisis_indicators
        assert outcome.analysis.support_level == SupportLevel.PROFESSIONAL
        assert outcome.notifications[0].urgency == UrgencyLevel.URGENT


class TestFallbackAndModalities:
    async def test_provider_failure_uses_fallback(self, test_settings: Settings, make_request) -> None:
        service = StressAnalysisService(test_settings, provider=ScriptedProvider(provider_error()))

        outcome = await service.pipeline.process(make_request(EXAM_MESSAGE))

        assert outcome.state == PipelineState.FALLBACK_USED
        assert outcome.sub_results[0].fallback_reason == "provider_error"

    async def test_ai_path_succeeds(self, test_settings: Settings, make_request) -> None:
        service = StressAnalysisService(
            test_settings, provider=ScriptedProvider({"stress_score": 4, "mood": "neutral"})
        )
        outcome = await service.pipeline.process(make_request("A normal Tuesday"))

        assert outcome.state == PipelineState.SUCCEEDED
        assert outcome.analysis.stress_level == 4.0

    async def test_default_visual_result_not_fused(self, service: StressAnalysisService, make_request) -> None:
        text_only = await service.pipeline.process(make_request(EXAM_MESSAGE))
        with_image = await service.pipeline.process(
            make_request(EXAM_MESSAGE, image=ImageSignal(data=b"\xff\xd8\xff"))
        )

        assert with_image.analysis.sources[Modality.VISUAL] == AnalysisSource.DEFAULT
        assert with_image.analysis.stress_level == text_only.analysis.stress_level


class TestPatternAlerts:
    async def test_repeated_high_stress_raises_pattern_alert(self, test_settings: Settings) -> None:
        provider = ScriptedProvider({"stress_score": 7.5, "mood": "stressed"})
        service = StressAnalysisService(test_settings, provider=provider)
        await service.initialize()

        for text in ("Deadlines everywhere", "Still buried in work", "No end in sight"):
            service.submit(AnalysisRequest(text=text, user_id="user-1"))
        await service.queue.join()

        notifications = await service.feed.list_notifications("user-1")
        kinds = [n.kind for n in notifications]
        assert kinds.count(NotificationKind.STRESS) == 3
        assert kinds.count(NotificationKind.PATTERN) == 1
        assert service.queue.processed_count == 3

        await service.shutdown()


class TestProfileCalibration:
    async def test_feedback_shifts_later_scores(self, service: StressAnalysisService, make_request) -> None:
        before = await service.pipeline.process(make_request(EXAM_MESSAGE))
        await service.profile_service.record_feedback(
            "user-1",
            UserFeedback(request_id=before.request_id, reported_stress=9.0, predicted_stress=5.2),
        )

        after = await service.pipeline.process(make_request(EXAM_MESSAGE))

        assert after.analysis.breakdown.baseline == pytest.approx(5.8)
        assert after.analysis.stress_level > before.analysis.stress_level

    async def test_trigger_words_surface_as_patterns(self, service: StressAnalysisService, make_request) -> None:
        await service.profile_service.add_trigger_words("user-1", ["exams"])
        outcome = await service.pipeline.process(make_request(EXAM_MESSAGE))
        assert "Known trigger: exams" in outcome.analysis.detected_patterns


class TestSQLBackedService:
    async def test_flow_with_sqlite(self, test_settings: Settings, make_request) -> None:
        db = DatabaseManager(url="sqlite+aiosqlite:///:memory:")
        service = StressAnalysisService(
            test_settings,
            provider=None,
            notifications=SQLNotificationRepository(db),
            profiles=SQLProfileRepository(db),
            history=SQLHistoryRepository(db),
            db=db,
        )
        await service.initialize()
        try:
            request = make_request(EXAM_MESSAGE)
            service.submit(request)
            await service.queue.join()

            stored = await service.feed.list_notifications("user-1")
            assert [n.id for n in stored] == [request.id]
            assert (await service.health_check())["database"] is True
            assert (await service.trends("user-1")).total_messages == 1
        finally:
            await service.shutdown()
