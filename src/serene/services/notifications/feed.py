"""
Notification Feed

Read/unread/delete view over a user's stored notifications.
"""

from serene.config.logging_config import get_logger
from serene.domain.models import Notification
from serene.infrastructure.storage import NotificationRepository

logger = get_logger(__name__)


class NotificationFeed:
    """User-facing notification operations. mark_read is idempotent."""

    def __init__(self, repository: NotificationRepository) -> None:
        self._repository = repository

    async def list_notifications(self, user_id: str, unread_only: bool = False) -> list[Notification]:
        """Notifications newest first."""
        notifications = await self._repository.list_for_user(user_id)
        if unread_only:
            return [n for n in notifications if not n.is_read]
        return notifications

    async def unread_count(self, user_id: str) -> int:
        return len(await self.list_notifications(user_id, unread_only=True))

    async def high_priority(self, user_id: str) -> list[Notification]:
        """Unread notifications that are urgent or scored 7 or above."""
        return [n for n in await self.list_notifications(user_id) if n.is_high_priority]

    async def mark_read(self, user_id: str, notification_id: str) -> bool:
        """
        Mark one notification read.

        Returns:
            False if the notification does not exist for this user
        """
        found = await self._repository.mark_read(user_id, notification_id)
        if not found:
            logger.debug("mark_read on unknown notification", notification_id=notification_id)
        return found

    async def mark_all_read(self, user_id: str) -> int:
        changed = await self._repository.mark_all_read(user_id)
        logger.info("Notifications marked read", user_id=user_id, count=changed)
        return changed

    async def delete(self, user_id: str, notification_id: str) -> bool:
        deleted = await self._repository.delete(user_id, notification_id)
        if deleted:
            logger.info("Notification deleted", user_id=user_id, notification_id=notification_id)
        return deleted
