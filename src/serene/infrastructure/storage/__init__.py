"""Storage interfaces and in-memory implementations."""

from serene.infrastructure.storage.memory import (
    InMemoryHistoryRepository,
    InMemoryNotificationRepository,
    InMemoryProfileRepository,
)
from serene.infrastructure.storage.repositories import (
    HistoryRepository,
    NotificationRepository,
    ProfileRepository,
)

__all__ = [
    "HistoryRepository",
    "NotificationRepository",
    "ProfileRepository",
    "InMemoryHistoryRepository",
    "InMemoryNotificationRepository",
    "InMemoryProfileRepository",
]
