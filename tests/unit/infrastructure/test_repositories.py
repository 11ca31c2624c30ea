"""
Repository contract tests.

Every test runs against the in-memory implementation and the SQL
implementation on an in-memory SQLite database.
"""

from datetime import datetime, timedelta

import pytest

from serene.domain.enums import Modality, MoodType, NotificationKind, StressTier, UrgencyLevel
from serene.domain.errors import StorageError
from serene.domain.models import Notification, StressHistoryEntry, UserEmotionalProfile, UserFeedback
from serene.infrastructure.database.connection import DatabaseManager
from serene.infrastructure.database.repositories import (
    SQLHistoryRepository,
    SQLNotificationRepository,
    SQLProfileRepository,
)
from serene.infrastructure.storage import (
    InMemoryHistoryRepository,
    InMemoryNotificationRepository,
    InMemoryProfileRepository,
)

SQLITE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def db():
    manager = DatabaseManager(url=SQLITE_URL)
    await manager.initialize()
    yield manager
    await manager.close()


@pytest.fixture(params=["memory", "sql"])
def notifications(request, db):
    if request.param == "memory":
        return InMemoryNotificationRepository()
    return SQLNotificationRepository(db)


@pytest.fixture(params=["memory", "sql"])
def profiles(request, db):
    if request.param == "memory":
        return InMemoryProfileRepository()
    return SQLProfileRepository(db)


@pytest.fixture(params=["memory", "sql"])
def history(request, db):
    if request.param == "memory":
        return InMemoryHistoryRepository(max_entries_per_user=5)
    return SQLHistoryRepository(db, max_entries_per_user=5)


def _notification(notification_id: str, user_id: str = "user-1", age_minutes: int = 0) -> Notification:
    return Notification(
        id=notification_id,
        request_id=notification_id.split(":")[0],
        user_id=user_id,
        message="We detected some stress indicators in your message.",
        stress_score=6.5,
        stress_tier=StressTier.HIGH,
        urgency=UrgencyLevel.ATTENTION,
        kind=NotificationKind.PATTERN if ":" in notification_id else NotificationKind.STRESS,
        remedies=["Take a short walk outside"],
        original_message="so much to do",
        emotions=["worry"],
        group_id="group-1",
        timestamp=datetime.utcnow() - timedelta(minutes=age_minutes),
    )


class TestNotificationRepository:
    """Contract for NotificationRepository implementations."""

    async def test_put_if_absent_is_idempotent(self, notifications) -> None:
        assert await notifications.put_if_absent(_notification("req-1"))
        assert not await notifications.put_if_absent(_notification("req-1"))
        assert len(await notifications.list_for_user("user-1")) == 1

    async def test_stress_and_pattern_coexist(self, notifications) -> None:
        assert await notifications.put_if_absent(_notification("req-1"))
        assert await notifications.put_if_absent(_notification("req-1:pattern"))
        assert len(await notifications.list_for_user("user-1")) == 2

    async def test_round_trip_fields(self, notifications) -> None:
        original = _notification("req-1")
        await notifications.put_if_absent(original)

        stored = await notifications.get("user-1", "req-1")

        assert stored.kind == NotificationKind.STRESS
        assert stored.stress_tier == StressTier.HIGH
        assert stored.urgency == UrgencyLevel.ATTENTION
        assert stored.remedies == ["Take a short walk outside"]
        assert stored.emotions == ["worry"]
        assert stored.original_message == "so much to do"
        assert stored.group_id == "group-1"
        assert not stored.is_read

    async def test_get_scoped_to_owner(self, notifications) -> None:
        await notifications.put_if_absent(_notification("req-1"))
        assert await notifications.get("user-2", "req-1") is None
        assert await notifications.get("user-1", "missing") is None

    async def test_same_id_for_two_users(self, notifications) -> None:
        assert await notifications.put_if_absent(_notification("req-1", user_id="user-1"))
        assert await notifications.put_if_absent(_notification("req-1", user_id="user-2"))

        assert len(await notifications.list_for_user("user-1")) == 1
        assert len(await notifications.list_for_user("user-2")) == 1

        assert await notifications.delete("user-2", "req-1")
        assert await notifications.get("user-1", "req-1") is not None

    async def test_list_newest_first(self, notifications) -> None:
        await notifications.put_if_absent(_notification("old", age_minutes=20))
        await notifications.put_if_absent(_notification("new"))
        await notifications.put_if_absent(_notification("mid", age_minutes=10))
        await notifications.put_if_absent(_notification("theirs", user_id="user-2"))

        assert [n.id for n in await notifications.list_for_user("user-1")] == ["new", "mid", "old"]

    async def test_mark_read(self, notifications) -> None:
        await notifications.put_if_absent(_notification("req-1"))

        assert await notifications.mark_read("user-1", "req-1")
        assert await notifications.mark_read("user-1", "req-1")
        assert not await notifications.mark_read("user-2", "req-1")
        assert (await notifications.get("user-1", "req-1")).is_read

    async def test_mark_all_read_counts_changes(self, notifications) -> None:
        for nid in ("a", "b", "c"):
            await notifications.put_if_absent(_notification(nid))
        await notifications.mark_read("user-1", "a")

        assert await notifications.mark_all_read("user-1") == 2
        assert await notifications.mark_all_read("user-1") == 0

    async def test_delete(self, notifications) -> None:
        await notifications.put_if_absent(_notification("req-1"))

        assert not await notifications.delete("user-2", "req-1")
        assert await notifications.delete("user-1", "req-1")
        assert not await notifications.delete("user-1", "req-1")
        assert await notifications.get("user-1", "req-1") is None


class TestProfileRepository:
    """Contract for ProfileRepository implementations."""

    async def test_missing_profile(self, profiles) -> None:
        assert await profiles.get("nobody") is None

    async def test_put_and_get(self, profiles) -> None:
        profile = UserEmotionalProfile(
            user_id="user-1",
            baseline_stress=6.2,
            personalized_weights={Modality.TEXT: 0.7, Modality.AUDIO: 0.3},
            trigger_words=["exams"],
            calming_factors=["music"],
            feedback_history=[
                UserFeedback(
                    request_id="req-1",
                    reported_stress=8.0,
                    predicted_stress=6.0,
                    modality_scores={Modality.TEXT: 6.0},
                    was_helpful=True,
                )
            ],
        )
        await profiles.put(profile)

        stored = await profiles.get("user-1")

        assert stored.baseline_stress == pytest.approx(6.2)
        assert stored.personalized_weights == {Modality.TEXT: 0.7, Modality.AUDIO: 0.3}
        assert stored.trigger_words == ["exams"]
        assert stored.calming_factors == ["music"]
        assert stored.feedback_history[0].modality_scores == {Modality.TEXT: 6.0}
        assert stored.feedback_history[0].was_helpful is True

    async def test_put_replaces(self, profiles) -> None:
        await profiles.put(UserEmotionalProfile(user_id="user-1", baseline_stress=4.0))
        await profiles.put(UserEmotionalProfile(user_id="user-1", baseline_stress=7.0))
        assert (await profiles.get("user-1")).baseline_stress == pytest.approx(7.0)


class TestHistoryRepository:
    """Contract for HistoryRepository implementations."""

    async def _append(self, history, level: float, age_minutes: int = 0, user_id: str = "user-1") -> None:
        await history.append(
            StressHistoryEntry(
                request_id=f"req-{level}-{age_minutes}",
                user_id=user_id,
                stress_level=level,
                mood_type=MoodType.STRESSED,
                emotions=["worry"],
                timestamp=datetime.utcnow() - timedelta(minutes=age_minutes),
            )
        )

    async def test_list_recent_oldest_first(self, history) -> None:
        for age, level in ((30, 3.0), (20, 5.0), (10, 7.0)):
            await self._append(history, level, age)

        recent = await history.list_recent("user-1", 2)

        assert [e.stress_level for e in recent] == [5.0, 7.0]
        assert recent[0].mood_type == MoodType.STRESSED
        assert recent[0].emotions == ["worry"]

    async def test_history_trimmed(self, history) -> None:
        for i in range(8):
            await self._append(history, float(i), age_minutes=100 - i)

        recent = await history.list_recent("user-1", 10)
        assert [e.stress_level for e in recent] == [3.0, 4.0, 5.0, 6.0, 7.0]

    async def test_list_since(self, history) -> None:
        await self._append(history, 2.0, age_minutes=60 * 24 * 10)
        await self._append(history, 6.0, age_minutes=5)
        await self._append(history, 9.0, age_minutes=5, user_id="user-2")

        entries = await history.list_since("user-1", datetime.utcnow() - timedelta(days=7))
        assert [e.stress_level for e in entries] == [6.0]

    async def test_zero_limit(self, history) -> None:
        await self._append(history, 5.0)
        assert await history.list_recent("user-1", 0) == []


class TestSQLErrorMapping:
    """SQL backend failure modes."""

    async def test_closed_database_refuses_sessions(self) -> None:
        manager = DatabaseManager(url=SQLITE_URL)
        await manager.initialize()
        await manager.close()

        with pytest.raises(RuntimeError):
            await SQLProfileRepository(manager).get("user-1")

    async def test_missing_table_raises_storage_error(self) -> None:
        manager = DatabaseManager(url=SQLITE_URL)
        await manager.initialize(create_schema=False)
        try:
            with pytest.raises(StorageError):
                await SQLProfileRepository(manager).get("user-1")
        finally:
            await manager.close()

    async def test_health_check(self, db: DatabaseManager) -> None:
        assert await db.health_check()
