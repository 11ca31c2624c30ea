"""
Repository Interfaces

Keyed storage contracts for notifications, emotional profiles and
stress history, all keyed by user id. Services depend on these
interfaces only; in-memory and SQL implementations are swapped by
configuration.

Implementations raise StorageError on any backend failure.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from serene.domain.models import Notification, StressHistoryEntry, UserEmotionalProfile


class NotificationRepository(ABC):
    """Notification persistence keyed by (user_id, idempotency key)."""

    @abstractmethod
    async def put_if_absent(self, notification: Notification) -> bool:
        """
        Store a notification unless the user already has one with that id.

        Returns:
            True if stored, False if the user already has that id
        """

    @abstractmethod
    async def get(self, user_id: str, notification_id: str) -> Optional[Notification]:
        """Get one notification owned by user_id."""

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[Notification]:
        """All notifications for a user, newest first."""

    @abstractmethod
    async def mark_read(self, user_id: str, notification_id: str) -> bool:
        """
        Mark one notification read. Idempotent.

        Returns:
            True if the notification exists
        """

    @abstractmethod
    async def mark_all_read(self, user_id: str) -> int:
        """Mark all of a user's notifications read; returns how many changed."""

    @abstractmethod
    async def delete(self, user_id: str, notification_id: str) -> bool:
        """Delete one notification; returns whether it existed."""


class ProfileRepository(ABC):
    """User emotional profile persistence."""

    @abstractmethod
    async def get(self, user_id: str) -> Optional[UserEmotionalProfile]:
        """Get a profile, or None if the user has none."""

    @abstractmethod
    async def put(self, profile: UserEmotionalProfile) -> None:
        """Insert or replace a profile."""


class HistoryRepository(ABC):
    """Per-user stress history used for pattern and trend tracking."""

    @abstractmethod
    async def append(self, entry: StressHistoryEntry) -> None:
        """Append an entry, trimming the user's history to its limit."""

    @abstractmethod
    async def list_recent(self, user_id: str, limit: int) -> list[StressHistoryEntry]:
        """Most recent entries, oldest first."""

    @abstractmethod
    async def list_since(self, user_id: str, since: datetime) -> list[StressHistoryEntry]:
        """Entries at or after since, oldest first."""
