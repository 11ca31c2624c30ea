"""
Message Intake

Transport contract for the message-send path:
1. Consult the crisis send gate synchronously.
2. Enqueue the request for deferred analysis, whatever the gate said.

A blocked message is resubmitted with the same request id once the user
acknowledges the safety prompt. The request is enqueued only on its
first successful submission; request ids are tracked per user.
"""

from collections import OrderedDict
from dataclasses import dataclass

from serene.config.logging_config import get_logger
from serene.domain.models import AnalysisRequest
from serene.services.queue import AnalysisQueue
from serene.services.safety import SendDecision, SendGate

logger = get_logger(__name__)


@dataclass(frozen=True)
class IntakeResult:
    """Gate decision plus whether this call enqueued the request."""

    request_id: str
    decision: SendDecision
    enqueued: bool

    @property
    def allowed(self) -> bool:
        return self.decision.allowed

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "enqueued": self.enqueued,
            **self.decision.to_dict(),
        }


class MessageIntake:
    """
    Gate-then-enqueue entry point.

    Usage:
        intake = MessageIntake(SendGate(CrisisKeywordDetector()), queue)
        result = intake.submit(request)
        if not result.allowed:
            show(result.decision.safety_prompt)
    """

    def __init__(self, gate: SendGate, queue: AnalysisQueue, seen_limit: int = 10_000) -> None:
        self._gate = gate
        self._queue = queue
        self._seen: OrderedDict[tuple[str, str], None] = OrderedDict()
        self._seen_limit = seen_limit

    def _remember(self, key: tuple[str, str]) -> None:
        self._seen[key] = None
        while len(self._seen) > self._seen_limit:
            self._seen.popitem(last=False)

    def submit(self, request: AnalysisRequest, safety_acknowledged: bool = False) -> IntakeResult:
        """
        Gate and enqueue a message. Never waits for analysis.

        Args:
            request: Message being sent
            safety_acknowledged: User confirmed the safety prompt

        Returns:
            IntakeResult; decision.allowed False means the message must
            not be transmitted yet

        Raises:
            QueueClosedError: If the queue is stopped; the request id is
                not recorded, so a later resubmission is enqueued
        """
        decision = self._gate.check(request.analysis_text, acknowledged=safety_acknowledged)

        key = (request.user_id, request.id)
        enqueued = key not in self._seen
        if enqueued:
            self._queue.enqueue(request)
            self._remember(key)

        if not decision.allowed:
            logger.info("Message held pending safety acknowledgement", request_id=request.id)

        return IntakeResult(request_id=request.id, decision=decision, enqueued=enqueued)
