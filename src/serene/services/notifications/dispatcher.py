"""
Notification Dispatcher

Turns a combined analysis into at most one persisted notification per
request and kind.

Rules:
- Only stress strictly above the threshold (default 5) notifies.
- Urgency: urgent at 8+ or under a crisis verdict, attention at 6+,
  normal otherwise.
- Persistence is keyed by user and request id (put_if_absent), so a
  replayed request never creates a duplicate.
- A StorageError is retried once; a second failure is logged and
  dropped (soft failure).
- Newly created urgent notifications request an out-of-band alert.
  Notifier failures are logged and never propagate.

PRIVACY: Logs carry ids and scores only. The original message excerpt
is stored on the notification for the owner and never logged.
"""

from typing import Optional

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from serene.config.logging_config import get_logger
from serene.config.settings import NotificationSettings
from serene.domain.enums import NotificationKind, StressTier, UrgencyLevel
from serene.domain.errors import ExternalServiceError, StorageError
from serene.domain.models import (
    AnalysisRequest,
    HybridAnalysis,
    Notification,
    PatternReport,
    UserEmotionalProfile,
    notification_key,
)
from serene.infrastructure.metrics import NOTIFIER_FAILURES_TOTAL, track_notification
from serene.infrastructure.notifier import Notifier
from serene.infrastructure.storage import NotificationRepository
from serene.services.notifications import templates
from serene.services.notifications.remedies import RemedySelector

logger = get_logger(__name__)

ORIGINAL_MESSAGE_LIMIT = 200


class NotificationDispatcher:
    """
    Creates stress and pattern notifications.

    Usage:
        dispatcher = NotificationDispatcher(repository, settings.notifications, notifier)
        notification = await dispatcher.dispatch(request, analysis, profile)
    """

    def __init__(
        self,
        repository: NotificationRepository,
        settings: Optional[NotificationSettings] = None,
        notifier: Optional[Notifier] = None,
        remedy_selector: Optional[RemedySelector] = None,
        retry_wait_seconds: float = 0.1,
    ) -> None:
        self._repository = repository
        self._settings = settings or NotificationSettings()
        self._notifier = notifier
        self._remedies = remedy_selector or RemedySelector()
        self._retry_wait = retry_wait_seconds

    def urgency_for(self, analysis: HybridAnalysis) -> UrgencyLevel:
        if analysis.crisis_indicators or analysis.stress_level >= self._settings.urgent_threshold:
            return UrgencyLevel.URGENT
        if analysis.stress_level >= self._settings.attention_threshold:
            return UrgencyLevel.ATTENTION
        return UrgencyLevel.NORMAL

    def should_notify(self, analysis: HybridAnalysis) -> bool:
        return analysis.stress_level > self._settings.stress_threshold

    async def dispatch(
        self,
        request: AnalysisRequest,
        analysis: HybridAnalysis,
        profile: Optional[UserEmotionalProfile] = None,
    ) -> Optional[Notification]:
        """
        Create the stress notification for an analysis, if warranted.

        Returns:
            The newly created notification, or None when stress is at or
            below the threshold, the notification already exists, or
            storage failed twice.
        """
        if not self.should_notify(analysis):
            return None

        urgency = self.urgency_for(analysis)
        notification = Notification(
            id=notification_key(request.id, NotificationKind.STRESS),
            request_id=request.id,
            user_id=request.user_id,
            message=templates.stress_message(analysis.stress_level, analysis.crisis_indicators),
            stress_score=analysis.stress_level,
            stress_tier=StressTier.from_score(analysis.stress_level),
            urgency=urgency,
            kind=NotificationKind.STRESS,
            remedies=self._remedies.select(analysis, profile, limit=self._settings.max_remedies),
            original_message=request.text[:ORIGINAL_MESSAGE_LIMIT],
            emotions=list(analysis.emotions),
            group_id=request.group_id,
        )

        if not await self._store(notification):
            return None

        if urgency == UrgencyLevel.URGENT:
            await self._alert(notification, templates.URGENT_ALERT_TITLE)
        return notification

    async def dispatch_pattern_alert(
        self,
        request: AnalysisRequest,
        report: PatternReport,
        analysis: HybridAnalysis,
        profile: Optional[UserEmotionalProfile] = None,
    ) -> Optional[Notification]:
        """
        Create the pattern notification for a report that just alerted.

        Returns:
            The newly created notification, or None
        """
        if not report.pattern_alert:
            return None

        notification = Notification(
            id=notification_key(request.id, NotificationKind.PATTERN),
            request_id=request.id,
            user_id=request.user_id,
            message=templates.PATTERN_MESSAGE,
            stress_score=analysis.stress_level,
            stress_tier=StressTier.from_score(max(report.window)),
            urgency=UrgencyLevel.ATTENTION,
            kind=NotificationKind.PATTERN,
            remedies=self._remedies.select(analysis, profile, limit=self._settings.max_remedies),
            emotions=list(analysis.emotions),
            group_id=request.group_id,
        )

        if not await self._store(notification):
            return None
        return notification

    async def _store(self, notification: Notification) -> bool:
        """Idempotent write with one retry. True if newly created."""
        kind = notification.kind.value
        urgency = notification.urgency.value

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._settings.store_attempts),
                wait=wait_fixed(self._retry_wait),
                retry=retry_if_exception_type(StorageError),
                reraise=True,
            ):
                with attempt:
                    created = await self._repository.put_if_absent(notification)
        except StorageError as e:
            logger.error(
                "Notification could not be stored",
                notification_id=notification.id,
                kind=kind,
                error=str(e),
            )
            track_notification(kind, urgency, "store_failed")
            return False

        if not created:
            logger.info("Duplicate notification ignored", notification_id=notification.id, kind=kind)
            track_notification(kind, urgency, "duplicate")
            return False

        logger.info(
            "Notification created",
            notification_id=notification.id,
            user_id=notification.user_id,
            kind=kind,
            urgency=urgency,
            stress_score=notification.stress_score,
        )
        track_notification(kind, urgency, "created")
        return True

    async def _alert(self, notification: Notification, title: str) -> None:
        if self._notifier is None:
            return
        try:
            await self._notifier.show_alert(
                notification.user_id,
                title,
                notification.message,
                data={"notification_id": notification.id, "urgency": notification.urgency.value},
            )
        except ExternalServiceError as e:
            NOTIFIER_FAILURES_TOTAL.labels(notifier=self._notifier.name).inc()
            logger.warning(
                "Out-of-band alert failed",
                notification_id=notification.id,
                notifier=self._notifier.name,
                error=str(e),
            )
        except Exception as e:
            NOTIFIER_FAILURES_TOTAL.labels(notifier=self._notifier.name).inc()
            logger.error(
                "Unexpected notifier failure",
                notification_id=notification.id,
                notifier=self._notifier.name,
                error_type=type(e).__name__,
            )
