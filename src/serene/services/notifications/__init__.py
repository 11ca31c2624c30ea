"""Stress and pattern notifications: dispatch, remedies and the user feed."""

from serene.services.notifications.dispatcher import NotificationDispatcher
from serene.services.notifications.feed import NotificationFeed
from serene.services.notifications.remedies import RemedyRule, RemedySelector

__all__ = [
    "NotificationDispatcher",
    "NotificationFeed",
    "RemedyRule",
    "RemedySelector",
]
