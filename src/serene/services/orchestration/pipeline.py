"""
Stress Analysis Pipeline

Processes one queued AnalysisRequest:

    keyword scan → sub-analyzers (concurrent) → crisis verdict
    → combiner → tracker → dispatcher

ARCHITECTURE: The pipeline holds no global state. Collaborators are
injected so tests can run it with scripted providers and in-memory
repositories.

Storage problems while loading the profile/history or recording the
tracker entry are logged and the run continues without them. Any other
error propagates to the queue, which isolates the item.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional, Sequence

from serene.config.logging_config import get_logger
from serene.domain.enums import PipelineState
from serene.domain.errors import StorageError
from serene.domain.models import (
    AnalysisRequest,
    CrisisVerdict,
    HybridAnalysis,
    Notification,
    PatternReport,
    SubAnalysisResult,
    UserEmotionalProfile,
)
from serene.infrastructure.storage import ProfileRepository
from serene.services.analysis import SubAnalyzer
from serene.services.fusion import HybridScoreCombiner
from serene.services.notifications import NotificationDispatcher
from serene.services.safety import CrisisKeywordDetector, CrisisVerdictBuilder
from serene.services.tracking import PatternTracker

logger = get_logger(__name__)


@dataclass
class PipelineOutcome:
    """
    Result of processing one request.

    Attributes:
        request_id: Processed request
        state: succeeded, or fallback_used when any modality fell back
        analysis: Combined analysis
        verdict: Crisis decision used as the fusion constraint
        sub_results: Per-modality results
        pattern: Tracker report, None if history was unavailable
        notifications: Notifications created by this run
    """

    request_id: str
    state: PipelineState
    analysis: HybridAnalysis
    verdict: CrisisVerdict
    sub_results: tuple[SubAnalysisResult, ...] = ()
    pattern: Optional[PatternReport] = None
    notifications: tuple[Notification, ...] = ()

    @property
    def notification_created(self) -> bool:
        return bool(self.notifications)

    @property
    def states(self) -> list[PipelineState]:
        """State path after the queue: analysis outcome, then notification."""
        path = [self.state]
        if self.notification_created:
            path.append(PipelineState.NOTIFICATION_CREATED)
        return path

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "state": self.state.value,
            "analysis": self.analysis.to_dict(),
            "crisis_sources": list(self.verdict.sources),
            "pattern_alert": bool(self.pattern and self.pattern.pattern_alert),
            "notifications": [n.id for n in self.notifications],
        }


class StressAnalysisPipeline:
    """
    Sub-Analyzers → Combiner → Tracker → Dispatcher for one request.

    Usage:
        pipeline = StressAnalysisPipeline(
            analyzers=[text, audio, visual],
            combiner=HybridScoreCombiner(policy),
            tracker=tracker,
            dispatcher=dispatcher,
            profiles=profile_repo,
        )
        outcome = await pipeline.process(request)
    """

    def __init__(
        self,
        analyzers: Sequence[SubAnalyzer],
        combiner: HybridScoreCombiner,
        tracker: PatternTracker,
        dispatcher: NotificationDispatcher,
        profiles: Optional[ProfileRepository] = None,
        detector: Optional[CrisisKeywordDetector] = None,
        verdict_builder: Optional[CrisisVerdictBuilder] = None,
    ) -> None:
        self._analyzers = {analyzer.modality: analyzer for analyzer in analyzers}
        self._combiner = combiner
        self._tracker = tracker
        self._dispatcher = dispatcher
        self._profiles = profiles
        self._detector = detector or CrisisKeywordDetector()
        self._verdicts = verdict_builder or CrisisVerdictBuilder()

    async def _load_profile(self, user_id: str) -> Optional[UserEmotionalProfile]:
        if self._profiles is None:
            return None
        try:
            return await self._profiles.get(user_id)
        except StorageError as e:
            logger.warning("Profile unavailable, analyzing without calibration", user_id=user_id, error=str(e))
            return None

    async def _load_recent_levels(self, user_id: str) -> list[float]:
        try:
            return await self._tracker.recent_levels(user_id)
        except StorageError as e:
            logger.warning("History unavailable, analyzing without it", user_id=user_id, error=str(e))
            return []

    async def _record(self, request: AnalysisRequest, analysis: HybridAnalysis) -> Optional[PatternReport]:
        try:
            return await self._tracker.record(request, analysis)
        except StorageError as e:
            logger.error("Stress history not recorded", request_id=request.id, error=str(e))
            return None

    async def process(self, request: AnalysisRequest) -> PipelineOutcome:
        """
        Analyze one request end to end.

        Args:
            request: Queued message

        Returns:
            PipelineOutcome with the combined analysis
        """
        logger.info(
            "Analyzing request",
            request_id=request.id,
            user_id=request.user_id,
            modalities=[m.value for m in request.modalities],
            text_length=len(request.text),
        )

        scan = self._detector.detect(request.analysis_text)
        profile = await self._load_profile(request.user_id)
        recent_levels = await self._load_recent_levels(request.user_id)

        analyzers = [self._analyzers[m] for m in request.modalities if m in self._analyzers]
        results = tuple(
            await asyncio.gather(*(analyzer.analyze(request, profile) for analyzer in analyzers))
        )

        verdict = self._verdicts.derive(request.analysis_text, scan, results)
        analysis = self._combiner.combine(
            request.id,
            request.user_id,
            results,
            verdict,
            profile=profile,
            recent_levels=recent_levels,
            conversation_context=request.conversation_context,
            text=request.analysis_text,
        )

        state = PipelineState.FALLBACK_USED if analysis.used_fallback else PipelineState.SUCCEEDED
        pattern = await self._record(request, analysis)

        notifications: list[Notification] = []
        created = await self._dispatcher.dispatch(request, analysis, profile)
        if created is not None:
            notifications.append(created)
        if pattern is not None and pattern.pattern_alert:
            alert = await self._dispatcher.dispatch_pattern_alert(request, pattern, analysis, profile)
            if alert is not None:
                notifications.append(alert)

        outcome = PipelineOutcome(
            request_id=request.id,
            state=state,
            analysis=analysis,
            verdict=verdict,
            sub_results=results,
            pattern=pattern,
            notifications=tuple(notifications),
        )

        logger.info(
            "Request analyzed",
            request_id=request.id,
            states=[s.value for s in outcome.states],
            stress_level=analysis.stress_level,
            crisis=analysis.crisis_indicators,
        )
        return outcome
