"""
Send Gate

The synchronous consult the chat transport makes before transmitting
a message. Wraps the crisis keyword detector and decides whether the
message may be sent now.

SAFETY-CRITICAL: A critical scan blocks sending until the user has
acknowledged the safety prompt. Nothing else in the pipeline may
block sending.
"""

from dataclasses import dataclass, field
from typing import Optional

from serene.config.logging_config import get_logger
from serene.domain.enums import GateRiskLevel
from serene.infrastructure.metrics import track_gate_check
from serene.infrastructure.monitoring import capture_safety_event
from serene.services.safety.crisis_keyword_detector import (
    CrisisKeywordDetector,
    KeywordScanResult,
    build_safety_prompt,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class SendDecision:
    """
    Outcome of a send-gate check.

    Attributes:
        allowed: Whether the message may be transmitted now
        requires_acknowledgement: Blocked pending safety prompt
        scan: Underlying keyword scan
        safety_prompt: Text to show when a prompt applies
    """

    allowed: bool
    requires_acknowledgement: bool
    scan: KeywordScanResult
    safety_prompt: Optional[str] = None

    @property
    def risk_level(self) -> GateRiskLevel:
        return self.scan.risk_level

    @property
    def matched_keywords(self) -> tuple[str, ...]:
        return self.scan.matched_keywords

    def to_dict(self) -> dict:
        return {
            "allowed": self.allowed,
            "requires_acknowledgement": self.requires_acknowledgement,
            "risk_level": self.risk_level.value,
            "matched_keywords": list(self.matched_keywords),
            "safety_prompt": self.safety_prompt,
        }


@dataclass
class SendGate:
    """Blocks critical messages until the safety prompt is acknowledged."""

    detector: CrisisKeywordDetector = field(default_factory=CrisisKeywordDetector)

    def check(self, text: str, acknowledged: bool = False) -> SendDecision:
        scan = self.detector.detect(text)

        if not scan.is_critical:
            decision = SendDecision(allowed=True, requires_acknowledgement=False, scan=scan)
        elif acknowledged:
            # Prompt still returned so the UI can keep resources visible
            decision = SendDecision(
                allowed=True,
                requires_acknowledgement=False,
                scan=scan,
                safety_prompt=build_safety_prompt(),
            )
        else:
            decision = SendDecision(
                allowed=False,
                requires_acknowledgement=True,
                scan=scan,
                safety_prompt=build_safety_prompt(),
            )
            logger.warning("Message blocked pending safety acknowledgement")
            capture_safety_event(
                "Crisis gate blocked message",
                extra={"risk_level": scan.risk_level.value, "match_count": len(scan.matched_keywords)},
            )

        track_gate_check(decision.risk_level.value, decision.allowed)
        return decision
