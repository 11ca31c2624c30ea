"""
In-Memory Repositories

Process-local implementations of the repository interfaces. Used in
development, tests, and when no database is configured.

Each repository serializes mutations with an asyncio.Lock.
"""

import asyncio
import copy
from collections import defaultdict, deque
from datetime import datetime
from typing import Optional

from serene.domain.models import Notification, StressHistoryEntry, UserEmotionalProfile
from serene.infrastructure.storage.repositories import (
    HistoryRepository,
    NotificationRepository,
    ProfileRepository,
)


class InMemoryNotificationRepository(NotificationRepository):
    def __init__(self) -> None:
        # user_id -> notification id -> notification
        self._by_user: defaultdict[str, dict[str, Notification]] = defaultdict(dict)
        self._lock = asyncio.Lock()

    async def put_if_absent(self, notification: Notification) -> bool:
        async with self._lock:
            owned = self._by_user[notification.user_id]
            if notification.id in owned:
                return False
            owned[notification.id] = copy.deepcopy(notification)
            return True

    async def get(self, user_id: str, notification_id: str) -> Optional[Notification]:
        notification = self._by_user.get(user_id, {}).get(notification_id)
        return copy.deepcopy(notification) if notification else None

    async def list_for_user(self, user_id: str) -> list[Notification]:
        owned = [copy.deepcopy(n) for n in self._by_user.get(user_id, {}).values()]
        owned.sort(key=lambda n: n.timestamp, reverse=True)
        return owned

    async def mark_read(self, user_id: str, notification_id: str) -> bool:
        async with self._lock:
            notification = self._by_user.get(user_id, {}).get(notification_id)
            if notification is None:
                return False
            notification.is_read = True
            return True

    async def mark_all_read(self, user_id: str) -> int:
        async with self._lock:
            changed = 0
            for notification in self._by_user.get(user_id, {}).values():
                if not notification.is_read:
                    notification.is_read = True
                    changed += 1
            return changed

    async def delete(self, user_id: str, notification_id: str) -> bool:
        async with self._lock:
            return self._by_user.get(user_id, {}).pop(notification_id, None) is not None


class InMemoryProfileRepository(ProfileRepository):
    def __init__(self) -> None:
        self._profiles: dict[str, UserEmotionalProfile] = {}
        self._lock = asyncio.Lock()

    async def get(self, user_id: str) -> Optional[UserEmotionalProfile]:
        profile = self._profiles.get(user_id)
        return copy.deepcopy(profile) if profile else None

    async def put(self, profile: UserEmotionalProfile) -> None:
        async with self._lock:
            self._profiles[profile.user_id] = copy.deepcopy(profile)


class InMemoryHistoryRepository(HistoryRepository):
    def __init__(self, max_entries_per_user: int = 100) -> None:
        self._entries: dict[str, deque[StressHistoryEntry]] = defaultdict(
            lambda: deque(maxlen=max_entries_per_user)
        )
        self._lock = asyncio.Lock()

    async def append(self, entry: StressHistoryEntry) -> None:
        async with self._lock:
            self._entries[entry.user_id].append(entry)

    async def list_recent(self, user_id: str, limit: int) -> list[StressHistoryEntry]:
        entries = list(self._entries.get(user_id, ()))
        return entries[-limit:] if limit > 0 else []

    async def list_since(self, user_id: str, since: datetime) -> list[StressHistoryEntry]:
        return [e for e in self._entries.get(user_id, ()) if e.timestamp >= since]
