"""
Crisis Verdict

Deterministic crisis decision computed before score fusion. The
combiner receives the verdict as a hard constraint.

Three independent checks, any one of which is sufficient:
- keyword_gate: the synchronous keyword scan reached critical
- linguistic: weighted crisis phrase patterns reach the threshold
- model: an AI sub-analysis surfaced crisis markers or classified the
  intent as crisis

SAFETY-CRITICAL: This check runs even when the send gate was
acknowledged or missed, so a gate false negative can still raise an
urgent notification after the fact.

CLINICAL_VALIDATION_REQUIRED: Pattern weights and the threshold are
empirically chosen.
"""

import re
from typing import Iterable

from serene.config.logging_config import get_logger
from serene.domain.enums import AnalysisSource, IntentType
from serene.domain.models import CrisisVerdict, SubAnalysisResult
from serene.infrastructure.metrics import track_crisis_verdict
from serene.infrastructure.monitoring import capture_safety_event
from serene.services.safety.crisis_keyword_detector import KeywordScanResult

logger = get_logger(__name__)


class CrisisVerdictBuilder:
    """
    Builds a CrisisVerdict from the keyword scan, the message text
    and the sub-analysis results.

    Urgent-tier keywords alone never produce a positive verdict.
    """

    # (name, pattern, weight)
    CRITICAL_PATTERNS: list[tuple[str, re.Pattern, int]] = [
        (
            "death_wish",
            re.compile(r"\b(want to die|wanna die|wish i (was|were) dead)\b", re.IGNORECASE),
            10,
        ),
        (
            "self_harm_intent",
            re.compile(r"\b(kill myself|end my life|suicid(e|al))\b", re.IGNORECASE),
            10,
        ),
        (
            "worthlessness_of_life",
            re.compile(r"\b(better off dead|not worth living)\b", re.IGNORECASE),
            10,
        ),
        (
            "ending",
            re.compile(r"\b(end it all|can'?t go on)\b", re.IGNORECASE),
            10,
        ),
    ]

    HIGH_RISK_PATTERNS: list[tuple[str, re.Pattern, int]] = [
        (
            "hopelessness",
            re.compile(r"\b(completely hopeless|no way out|nothing left)\b", re.IGNORECASE),
            5,
        ),
        (
            "isolation",
            re.compile(r"\b(everyone hates me|nobody cares|alone forever)\b", re.IGNORECASE),
            5,
        ),
        (
            "collapse",
            re.compile(r"\b(can'?t take it anymore|breaking down completely)\b", re.IGNORECASE),
            5,
        ),
    ]

    SEVERITY_THRESHOLD = 5

    def linguistic_severity(self, text: str) -> tuple[int, list[str]]:
        """
        Weighted pattern score for a text.

        Returns:
            (severity, names of matched patterns)
        """
        normalized = text.replace("’", "'")
        severity = 0
        matched: list[str] = []
        for name, pattern, weight in (*self.CRITICAL_PATTERNS, *self.HIGH_RISK_PATTERNS):
            if pattern.search(normalized):
                severity += weight
                matched.append(name)
        return severity, matched

    def derive(
        self,
        text: str,
        keyword_scan: KeywordScanResult,
        sub_results: Iterable[SubAnalysisResult] = (),
    ) -> CrisisVerdict:
        sources: list[str] = []
        indicators: list[str] = []

        if keyword_scan.is_critical:
            sources.append("keyword_gate")
            indicators.extend(keyword_scan.critical_matches)

        severity, patterns = self.linguistic_severity(text)
        if severity >= self.SEVERITY_THRESHOLD:
            sources.append("linguistic")
            indicators.extend(patterns)

        ai_results = [r for r in sub_results if r.source == AnalysisSource.AI]
        model_markers = [marker for result in ai_results for marker in result.crisis_markers]
        if any(result.intent == IntentType.CRISIS for result in ai_results):
            model_markers.append("model_crisis_intent")
        if model_markers:
            sources.append("model")
            indicators.extend(model_markers)

        if not sources:
            return CrisisVerdict.none()

        unique_indicators = tuple(dict.fromkeys(i.lower() for i in indicators))
        verdict = CrisisVerdict(
            is_crisis=True,
            sources=tuple(sources),
            indicators=unique_indicators,
            severity=severity,
        )

        logger.warning(
            "Positive crisis verdict",
            sources=list(verdict.sources),
            severity=severity,
        )
        track_crisis_verdict(verdict.sources)
        capture_safety_event(
            "Positive crisis verdict",
            extra={"sources": list(verdict.sources), "severity": severity},
        )
        return verdict
