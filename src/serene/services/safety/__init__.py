"""
Safety services package.

Synchronous crisis keyword gate and the crisis verdict used as the
fusion constraint.
"""

from serene.services.safety.crisis_keyword_detector import (
    CrisisKeywordDetector,
    KeywordScanResult,
    build_safety_prompt,
)
from serene.services.safety.crisis_verdict import CrisisVerdictBuilder
from serene.services.safety.send_gate import SendDecision, SendGate

__all__ = [
    "CrisisKeywordDetector",
    "KeywordScanResult",
    "build_safety_prompt",
    "CrisisVerdictBuilder",
    "SendDecision",
    "SendGate",
]
