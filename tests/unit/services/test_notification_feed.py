"""Unit tests for the notification feed."""

from datetime import datetime, timedelta

import pytest

from serene.domain.enums import NotificationKind, StressTier, UrgencyLevel
from serene.domain.models import Notification
from serene.infrastructure.storage import InMemoryNotificationRepository
from serene.services.notifications import NotificationFeed


def _notification(
    notification_id: str,
    score: float,
    urgency: UrgencyLevel = UrgencyLevel.NORMAL,
    user_id: str = "user-1",
    age_minutes: int = 0,
) -> Notification:
    return Notification(
        id=notification_id,
        request_id=notification_id,
        user_id=user_id,
        message="msg",
        stress_score=score,
        stress_tier=StressTier.from_score(score),
        urgency=urgency,
        kind=NotificationKind.STRESS,
        timestamp=datetime.utcnow() - timedelta(minutes=age_minutes),
    )


class TestNotificationFeed:
    """Test suite for NotificationFeed."""

    @pytest.fixture
    async def feed(self, notification_repo: InMemoryNotificationRepository) -> NotificationFeed:
        await notification_repo.put_if_absent(_notification("old", 5.5, age_minutes=30))
        await notification_repo.put_if_absent(_notification("mid", 7.5, UrgencyLevel.ATTENTION, age_minutes=10))
        await notification_repo.put_if_absent(_notification("new", 8.5, UrgencyLevel.URGENT))
        await notification_repo.put_if_absent(_notification("other", 9.0, UrgencyLevel.URGENT, user_id="user-2"))
        return NotificationFeed(notification_repo)

    async def test_newest_first_and_scoped_to_user(self, feed: NotificationFeed) -> None:
        notifications = await feed.list_notifications("user-1")
        assert [n.id for n in notifications] == ["new", "mid", "old"]

    async def test_mark_read_is_idempotent(self, feed: NotificationFeed) -> None:
        assert await feed.mark_read("user-1", "old")
        assert await feed.mark_read("user-1", "old")
        assert await feed.unread_count("user-1") == 2

    async def test_mark_read_unknown(self, feed: NotificationFeed) -> None:
        assert not await feed.mark_read("user-1", "missing")
        assert not await feed.mark_read("user-1", "other")

    async def test_unread_only(self, feed: NotificationFeed) -> None:
        await feed.mark_read("user-1", "new")
        unread = await feed.list_notifications("user-1", unread_only=True)
        assert [n.id for n in unread] == ["mid", "old"]

    async def test_high_priority(self, feed: NotificationFeed) -> None:
        assert [n.id for n in await feed.high_priority("user-1")] == ["new", "mid"]

        await feed.mark_read("user-1", "new")
        assert [n.id for n in await feed.high_priority("user-1")] == ["mid"]

    async def test_mark_all_read(self, feed: NotificationFeed) -> None:
        await feed.mark_read("user-1", "old")
        assert await feed.mark_all_read("user-1") == 2
        assert await feed.unread_count("user-1") == 0
        assert await feed.unread_count("user-2") == 1

    async def test_delete(self, feed: NotificationFeed) -> None:
        assert await feed.delete("user-1", "mid")
        assert not await feed.delete("user-1", "mid")
        assert not await feed.delete("user-1", "other")
        assert [n.id for n in await feed.list_notifications("user-1")] == ["new", "old"]
