"""
Stress Analysis Service

Composition root: builds the pipeline, queue and intake from settings
and owns their lifecycle.

Storage backend:
- SERENE_DB_ENABLED=true: SQLAlchemy repositories
- otherwise: in-memory repositories (development and tests)
"""

from typing import Any, Optional

from serene.config import Settings, get_settings
from serene.config.logging_config import get_logger
from serene.domain.models import AnalysisRequest, StressTrendSummary
from serene.infrastructure.database import DatabaseManager
from serene.infrastructure.database.repositories import (
    SQLHistoryRepository,
    SQLNotificationRepository,
    SQLProfileRepository,
)
from serene.infrastructure.llm import get_llm_provider
from serene.infrastructure.llm.provider import LLMProvider
from serene.infrastructure.notifier import LogNotifier, Notifier, WebhookNotifier
from serene.infrastructure.storage import (
    HistoryRepository,
    InMemoryHistoryRepository,
    InMemoryNotificationRepository,
    InMemoryProfileRepository,
    NotificationRepository,
    ProfileRepository,
)
from serene.services.analysis import (
    AudioSubAnalyzer,
    ModelResponseParser,
    TextSubAnalyzer,
    VisualSubAnalyzer,
)
from serene.services.fusion import FusionPolicy, HybridScoreCombiner
from serene.services.notifications import NotificationDispatcher, NotificationFeed
from serene.services.orchestration.intake import IntakeResult, MessageIntake
from serene.services.orchestration.pipeline import StressAnalysisPipeline
from serene.services.profile import ProfileService
from serene.services.prompt import PromptBuilder
from serene.services.queue import AnalysisQueue
from serene.services.safety import CrisisKeywordDetector, SendGate
from serene.services.tracking import PatternTracker

logger = get_logger(__name__)


class StressAnalysisService:
    """
    Wires every component of the analysis pipeline.

    Usage:
        service = StressAnalysisService.from_settings()
        await service.initialize()
        result = service.submit(request)
        ...
        await service.shutdown()
    """

    def __init__(
        self,
        settings: Settings,
        *,
        provider: Optional[LLMProvider] = None,
        notifications: Optional[NotificationRepository] = None,
        profiles: Optional[ProfileRepository] = None,
        history: Optional[HistoryRepository] = None,
        notifier: Optional[Notifier] = None,
        db: Optional[DatabaseManager] = None,
    ) -> None:
        self.settings = settings
        self._db = db
        self._provider = provider

        self.notifications = notifications or InMemoryNotificationRepository()
        self.profiles = profiles or InMemoryProfileRepository()
        self.history = history or InMemoryHistoryRepository(settings.tracking.history_limit)
        self.notifier = notifier or LogNotifier()

        analysis = settings.analysis
        prompt_builder = PromptBuilder()
        parser = ModelResponseParser()
        analyzer_options = {
            "prompt_builder": prompt_builder,
            "parser": parser,
            "timeout_seconds": analysis.ai_timeout_seconds,
            "ai_min_confidence": analysis.ai_min_confidence,
            "fallback_max_confidence": analysis.fallback_max_confidence,
        }
        analyzers = [
            TextSubAnalyzer(provider, **analyzer_options),
            AudioSubAnalyzer(provider, **analyzer_options),
            VisualSubAnalyzer(provider, **analyzer_options),
        ]

        policy = FusionPolicy.from_settings(settings.fusion)
        self.detector = CrisisKeywordDetector()
        self.tracker = PatternTracker(self.history, settings.tracking)
        self.dispatcher = NotificationDispatcher(self.notifications, settings.notifications, self.notifier)
        self.feed = NotificationFeed(self.notifications)
        self.profile_service = ProfileService(self.profiles, policy)

        self.pipeline = StressAnalysisPipeline(
            analyzers=analyzers,
            combiner=HybridScoreCombiner(policy),
            tracker=self.tracker,
            dispatcher=self.dispatcher,
            profiles=self.profiles,
            detector=self.detector,
        )
        self.queue = AnalysisQueue(self.pipeline.process, analysis.queue_inter_item_delay_seconds)
        self.intake = MessageIntake(SendGate(self.detector), self.queue)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "StressAnalysisService":
        """Build with the configured provider, storage and notifier."""
        settings = settings or get_settings()

        db: Optional[DatabaseManager] = None
        repositories: dict[str, Any] = {}
        if settings.database.enabled:
            db = DatabaseManager(settings.database)
            repositories = {
                "notifications": SQLNotificationRepository(db),
                "profiles": SQLProfileRepository(db),
                "history": SQLHistoryRepository(db, settings.tracking.history_limit),
            }

        notifier: Notifier = LogNotifier()
        if settings.notifications.webhook_url:
            notifier = WebhookNotifier(
                settings.notifications.webhook_url,
                timeout_seconds=settings.notifications.webhook_timeout_seconds,
            )

        return cls(
            settings,
            provider=get_llm_provider(),
            notifier=notifier,
            db=db,
            **repositories,
        )

    async def initialize(self) -> None:
        if self._db is not None:
            await self._db.initialize()
        logger.info(
            "Stress analysis service initialized",
            storage="sql" if self._db is not None else "memory",
            ai_configured=self.ai_configured,
            notifier=self.notifier.name,
        )

    async def shutdown(self) -> None:
        """Stop the worker after its current item, then release resources."""
        await self.queue.stop()
        await self.notifier.close()
        if self._db is not None:
            await self._db.close()
        logger.info("Stress analysis service stopped")

    @property
    def ai_configured(self) -> bool:
        return self._provider is not None and self._provider.is_configured()

    def submit(self, request: AnalysisRequest, safety_acknowledged: bool = False) -> IntakeResult:
        return self.intake.submit(request, safety_acknowledged)

    async def trends(self, user_id: str, days: Optional[int] = None) -> StressTrendSummary:
        return await self.tracker.summarize_trends(user_id, days)

    async def health_check(self) -> dict[str, Any]:
        database: Optional[bool] = None
        if self._db is not None:
            database = await self._db.health_check()
        return {
            "database": database,
            "ai_configured": self.ai_configured,
            "queue_depth": self.queue.pending_count,
            "queue_draining": self.queue.is_draining,
            "queue_failed": self.queue.failed_count,
        }
