"""
Crisis Keyword Detector

Synchronous, pure text scan run in the message-send path.

SAFETY-CRITICAL: A critical match blocks transmission until the user
acknowledges the safety prompt. This is the only synchronous gate in
the pipeline. False negatives here are partially covered by the
independent crisis verdict computed during hybrid analysis.

CLINICAL_VALIDATION_REQUIRED: Keyword tiers are hard-coded and have
not been validated against false positive/negative rates.
"""

from dataclasses import dataclass

from serene.config.logging_config import get_logger
from serene.domain.enums import GateRiskLevel

logger = get_logger(__name__)

# Typographic apostrophes and quotes normalised before matching
_APOSTROPHES = str.maketrans({"’": "'", "‘": "'", "ʼ": "'"})


@dataclass(frozen=True)
class KeywordScanResult:
    """
    Result of one keyword scan.

    Attributes:
        risk_level: none / urgent / critical
        critical_matches: Matched critical-tier keywords, tier order
        urgent_matches: Matched urgent-tier keywords, tier order
    """

    risk_level: GateRiskLevel
    critical_matches: tuple[str, ...] = ()
    urgent_matches: tuple[str, ...] = ()

    @property
    def matched_keywords(self) -> tuple[str, ...]:
        """Union of both tiers without duplicates, critical first."""
        seen: dict[str, None] = {}
        for keyword in (*self.critical_matches, *self.urgent_matches):
            seen.setdefault(keyword, None)
        return tuple(seen)

    @property
    def is_critical(self) -> bool:
        return self.risk_level == GateRiskLevel.CRITICAL

    @property
    def is_urgent(self) -> bool:
        return self.risk_level == GateRiskLevel.URGENT

    def to_dict(self) -> dict:
        return {
            "risk_level": self.risk_level.value,
            "matched_keywords": list(self.matched_keywords),
        }


class CrisisKeywordDetector:
    """
    Two-tier case-insensitive substring scan.

    Critical tier: self-harm and suicide phrasing.
    Urgent tier: crisis and desperation phrasing.

    Tiers are ordered; matches are reported in tier order.
    """

    CRITICAL_KEYWORDS: tuple[str, ...] = (
        "kill myself",
        "end my life",
        "want to die",
        "suicide",
        "kill me",
        "end it all",
        "better off dead",
        "not worth living",
        "take my life",
        "can't go on",
        "give up",
        "hopeless",
        "no point",
        "nothing matters",
        "everyone would be better without me",
        "tired of living",
    )

    URGENT_KEYWORDS: tuple[str, ...] = (
        "crisis",
        "emergency",
        "help me",
        "desperate",
        "breaking down",
        "can't cope",
        "losing it",
        "falling apart",
    )

    def __init__(
        self,
        critical_keywords: tuple[str, ...] | None = None,
        urgent_keywords: tuple[str, ...] | None = None,
    ) -> None:
        self._critical = tuple(
            k.lower() for k in (critical_keywords or self.CRITICAL_KEYWORDS)
        )
        self._urgent = tuple(
            k.lower() for k in (urgent_keywords or self.URGENT_KEYWORDS)
        )

    @staticmethod
    def normalize(text: str) -> str:
        return text.translate(_APOSTROPHES).lower()

    def detect(self, text: str) -> KeywordScanResult:
        """
        Scan text for crisis keywords.

        Args:
            text: Raw message text

        Returns:
            KeywordScanResult; critical wins over urgent
        """
        if not text:
            return KeywordScanResult(risk_level=GateRiskLevel.NONE)

        normalized = self.normalize(text)
        critical = tuple(k for k in self._critical if k in normalized)
        urgent = tuple(k for k in self._urgent if k in normalized and k not in critical)

        if critical:
            risk = GateRiskLevel.CRITICAL
        elif urgent:
            risk = GateRiskLevel.URGENT
        else:
            risk = GateRiskLevel.NONE

        if risk != GateRiskLevel.NONE:
            # Keywords only; never the message itself
            logger.info(
                "Crisis keywords matched",
                risk_level=risk.value,
                match_count=len(critical) + len(urgent),
            )

        return KeywordScanResult(
            risk_level=risk,
            critical_matches=critical,
            urgent_matches=urgent,
        )


CRISIS_HOTLINE = "988"
EMERGENCY_NUMBER = "911"


def build_safety_prompt() -> str:
    """
    Safety prompt shown before a critical message may be sent.

    SAFETY_NOTE: Resource numbers are US defaults.
    """
    lines = [
        "It sounds like you might be going through something really painful right now.",
        "You don't have to face this alone. Support is available 24/7:",
        f"- Call or text {CRISIS_HOTLINE} (Suicide & Crisis Lifeline)",
        "- Contact your campus counseling center",
        f"- If you are in immediate danger, call {EMERGENCY_NUMBER}",
        "Please confirm you have seen these resources to send your message.",
    ]
    return "\n".join(lines)
