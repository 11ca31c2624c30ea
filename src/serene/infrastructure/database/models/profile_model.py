"""
Emotional Profile Database Model

One row per user. List and mapping fields are stored as JSON.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from serene.infrastructure.database.connection import Base


class EmotionalProfileModel(Base):
    """
    Emotional profile table ORM model.

    Table: emotional_profiles
    """

    __tablename__ = "emotional_profiles"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    baseline_stress: Mapped[float] = mapped_column(Float, default=5.0)
    personalized_weights: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    trigger_words: Mapped[list] = mapped_column(JSON, default=list)
    calming_factors: Mapped[list] = mapped_column(JSON, default=list)
    feedback_history: Mapped[list] = mapped_column(JSON, default=list)
    preferred_communication_style: Mapped[str] = mapped_column(String(32), default="supportive")
    response_accuracy: Mapped[float] = mapped_column(Float, default=0.5)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
