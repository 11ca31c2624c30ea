"""Unit tests for the gate-then-enqueue intake path."""

import pytest

from serene.domain.enums import GateRiskLevel
from serene.domain.errors import QueueClosedError
from serene.domain.models import AnalysisRequest, AudioSignal
from serene.services.orchestration.intake import MessageIntake
from serene.services.queue import AnalysisQueue
from serene.services.safety import SendGate


class RefusingOnceQueue:
    """Queue that is closed for the first enqueue only."""

    def __init__(self) -> None:
        self.accepted: list[str] = []
        self._refused = False

    def enqueue(self, request: AnalysisRequest) -> None:
        if not self._refused:
            self._refused = True
            raise QueueClosedError("stopped")
        self.accepted.append(request.id)


class TestMessageIntake:
    """Test suite for MessageIntake."""

    @pytest.fixture
    def processed(self) -> list[str]:
        return []

    @pytest.fixture
    def queue(self, processed: list[str]) -> AnalysisQueue:
        async def processor(request):
            processed.append(request.id)

        return AnalysisQueue(processor, inter_item_delay=0)

    @pytest.fixture
    def intake(self, queue: AnalysisQueue) -> MessageIntake:
        return MessageIntake(SendGate(), queue)

    async def test_ordinary_message_allowed_and_enqueued(
        self, intake: MessageIntake, queue: AnalysisQueue, processed: list[str], make_request
    ) -> None:
        request = make_request("Long day but fine")
        result = intake.submit(request)

        assert result.allowed
        assert result.enqueued
        assert result.decision.safety_prompt is None

        await queue.join()
        assert processed == [request.id]

    async def test_critical_message_blocked_but_still_analysed(
        self, intake: MessageIntake, queue: AnalysisQueue, processed: list[str], make_request
    ) -> None:
        request = make_request("I want to die")
        result = intake.submit(request)

        assert not result.allowed
        assert result.decision.requires_acknowledgement
        assert result.decision.risk_level == GateRiskLevel.CRITICAL
        assert "988" in result.decision.safety_prompt
        assert result.enqueued

        await queue.join()
        assert processed == [request.id]

    async def test_acknowledged_resubmission_not_enqueued_twice(
        self, intake: MessageIntake, queue: AnalysisQueue, processed: list[str], make_request
    ) -> None:
        request = make_request("I want to die")
        intake.submit(request)
        result = intake.submit(request, safety_acknowledged=True)

        assert result.allowed
        assert not result.enqueued
        assert result.decision.safety_prompt is not None

        await queue.join()
        assert processed == [request.id]

    async def test_urgent_keywords_do_not_block(self, intake: MessageIntake, make_request) -> None:
        result = intake.submit(make_request("I'm so desperate, help me"))
        assert result.allowed
        assert result.decision.risk_level == GateRiskLevel.URGENT

    async def test_transcript_is_gated(self, intake: MessageIntake, make_request) -> None:
        request = make_request("voice note", audio=AudioSignal(transcript="I want to end my life"))
        assert not intake.submit(request).allowed

    async def test_result_serializes(self, intake: MessageIntake, make_request) -> None:
        request = make_request("hello")
        data = intake.submit(request).to_dict()
        assert data["request_id"] == request.id
        assert data["allowed"] is True
        assert data["risk_level"] == GateRiskLevel.NONE.value

    async def test_seen_ids_bounded(self, queue: AnalysisQueue, make_request) -> None:
        intake = MessageIntake(SendGate(), queue, seen_limit=2)
        first = make_request("a")
        intake.submit(first)
        intake.submit(make_request("b"))
        intake.submit(make_request("c"))

        assert intake.submit(first).enqueued
        await queue.join()

    async def test_same_request_id_from_two_users_both_enqueued(
        self, intake: MessageIntake, queue: AnalysisQueue, processed: list[str], make_request
    ) -> None:
        first = intake.submit(make_request("hello", user_id="alice", id="shared"))
        second = intake.submit(make_request("hello", user_id="bob", id="shared"))

        assert first.enqueued
        assert second.enqueued
        await queue.join()
        assert processed == ["shared", "shared"]

    def test_refused_request_enqueued_on_resubmission(self, make_request) -> None:
        queue = RefusingOnceQueue()
        intake = MessageIntake(SendGate(), queue)
        request = make_request("hello")

        with pytest.raises(QueueClosedError):
            intake.submit(request)
        result = intake.submit(request)

        assert result.enqueued
        assert queue.accepted == [request.id]
