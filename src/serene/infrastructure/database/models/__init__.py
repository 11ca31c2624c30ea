"""
Database ORM models package.
"""

from serene.infrastructure.database.models.history_model import StressHistoryModel
from serene.infrastructure.database.models.notification_model import NotificationModel
from serene.infrastructure.database.models.profile_model import EmotionalProfileModel

__all__ = [
    "EmotionalProfileModel",
    "NotificationModel",
    "StressHistoryModel",
]
