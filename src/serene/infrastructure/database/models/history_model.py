"""
Stress History Database Model

Derived scores only. Message text is never stored here.
"""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from serene.infrastructure.database.connection import Base


class StressHistoryModel(Base):
    """
    Stress history table ORM model.

    Table: stress_history
    """

    __tablename__ = "stress_history"
    __table_args__ = (
        Index("ix_stress_history_user_created", "user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    request_id: Mapped[str] = mapped_column(String(64), nullable=False)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    stress_level: Mapped[float] = mapped_column(Float, nullable=False)
    mood_type: Mapped[str] = mapped_column(String(32), nullable=False)
    emotions: Mapped[list] = mapped_column(JSON, default=list)
    crisis_indicators: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
