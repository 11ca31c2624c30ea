"""
SQL repository implementations package.
"""

from serene.infrastructure.database.repositories.base import BaseSQLRepository
from serene.infrastructure.database.repositories.history_repository import SQLHistoryRepository
from serene.infrastructure.database.repositories.notification_repository import (
    SQLNotificationRepository,
)
from serene.infrastructure.database.repositories.profile_repository import SQLProfileRepository

__all__ = [
    "BaseSQLRepository",
    "SQLHistoryRepository",
    "SQLNotificationRepository",
    "SQLProfileRepository",
]
