"""
Notification Repository (SQL)

Idempotent insert keyed by the notification id.
"""

from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError

from serene.domain.enums import NotificationKind, StressTier, UrgencyLevel
from serene.domain.errors import StorageError
from serene.domain.models import Notification
from serene.infrastructure.database.models import NotificationModel
from serene.infrastructure.database.repositories.base import BaseSQLRepository
from serene.infrastructure.storage.repositories import NotificationRepository


def _to_domain(row: NotificationModel) -> Notification:
    return Notification(
        id=row.id,
        request_id=row.request_id,
        user_id=row.user_id,
        message=row.message,
        stress_score=row.stress_score,
        stress_tier=StressTier(row.stress_tier),
        urgency=UrgencyLevel(row.urgency),
        kind=NotificationKind(row.kind),
        remedies=list(row.remedies or []),
        original_message=row.original_message or "",
        emotions=list(row.emotions or []),
        group_id=row.group_id or "",
        timestamp=row.created_at,
        is_read=row.is_read,
    )


def _to_row(notification: Notification) -> NotificationModel:
    return NotificationModel(
        id=notification.id,
        request_id=notification.request_id,
        user_id=notification.user_id,
        group_id=notification.group_id,
        kind=notification.kind.value,
        message=notification.message,
        stress_score=notification.stress_score,
        stress_tier=notification.stress_tier.value,
        urgency=notification.urgency.value,
        remedies=list(notification.remedies),
        emotions=list(notification.emotions),
        original_message=notification.original_message,
        is_read=notification.is_read,
        created_at=notification.timestamp,
    )


class SQLNotificationRepository(BaseSQLRepository[NotificationModel], NotificationRepository):
    model = NotificationModel

    async def put_if_absent(self, notification: Notification) -> bool:
        try:
            async with self._session("put_if_absent") as session:
                existing = await session.get(NotificationModel, (notification.user_id, notification.id))
                if existing is not None:
                    return False
                session.add(_to_row(notification))
                await session.flush()
            return True
        except StorageError as e:
            if isinstance(e.original_error, IntegrityError):
                # Concurrent insert of the same key
                return False
            raise

    async def get(self, user_id: str, notification_id: str) -> Optional[Notification]:
        async with self._session("get") as session:
            row = await session.get(NotificationModel, (user_id, notification_id))
            if row is None:
                return None
            return _to_domain(row)

    async def list_for_user(self, user_id: str) -> list[Notification]:
        async with self._session("list_for_user") as session:
            result = await session.execute(
                select(NotificationModel)
                .where(NotificationModel.user_id == user_id)
                .order_by(NotificationModel.created_at.desc())
            )
            return [_to_domain(row) for row in result.scalars().all()]

    async def mark_read(self, user_id: str, notification_id: str) -> bool:
        async with self._session("mark_read") as session:
            row = await session.get(NotificationModel, (user_id, notification_id))
            if row is None:
                return False
            row.is_read = True
            return True

    async def mark_all_read(self, user_id: str) -> int:
        async with self._session("mark_all_read") as session:
            result = await session.execute(
                update(NotificationModel)
                .where(NotificationModel.user_id == user_id, NotificationModel.is_read.is_(False))
                .values(is_read=True)
            )
            return result.rowcount or 0

    async def delete(self, user_id: str, notification_id: str) -> bool:
        async with self._session("delete") as session:
            result = await session.execute(
                delete(NotificationModel).where(
                    NotificationModel.id == notification_id,
                    NotificationModel.user_id == user_id,
                )
            )
            return (result.rowcount or 0) > 0
