"""
Notification Database Model

The primary key is (user_id, id), the per-user idempotency key, so a
second insert for the same user and analysis request violates the key.

PRIVACY: original_message holds a truncated excerpt only.
"""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from serene.infrastructure.database.connection import Base


class NotificationModel(Base):
    """
    Notification table ORM model.

    Table: notifications
    """

    __tablename__ = "notifications"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    id: Mapped[str] = mapped_column(
        String(128),
        primary_key=True,
        doc="Idempotency key derived from the analysis request id"
    )
    request_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    group_id: Mapped[str] = mapped_column(String(64), default="")

    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    stress_score: Mapped[float] = mapped_column(Float, nullable=False)
    stress_tier: Mapped[str] = mapped_column(String(20), nullable=False)
    urgency: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    remedies: Mapped[list] = mapped_column(JSON, default=list)
    emotions: Mapped[list] = mapped_column(JSON, default=list)
    original_message: Mapped[str] = mapped_column(Text, default="")

    is_read: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<NotificationModel(id={self.id}, urgency={self.urgency}, is_read={self.is_read})>"
