"""Tests configuration and fixtures."""

from typing import Any, Callable, Optional

import pytest

from serene.config import Settings
from serene.config.settings import AnalysisSettings
from serene.domain.models import AnalysisRequest, AudioSignal, ImageSignal
from serene.infrastructure.storage import (
    InMemoryHistoryRepository,
    InMemoryNotificationRepository,
    InMemoryProfileRepository,
)


@pytest.fixture
def test_settings() -> Settings:
    """Settings with no queue delay and in-memory storage."""
    return Settings(
        env="development",
        debug=True,
        analysis=AnalysisSettings(queue_inter_item_delay_seconds=0.0, ai_timeout_seconds=1.0),
    )


@pytest.fixture
def make_request() -> Callable[..., AnalysisRequest]:
    """Factory for analysis requests."""

    def _make(
        text: str = "Just checking in",
        user_id: str = "user-1",
        group_id: str = "group-1",
        audio: Optional[AudioSignal] = None,
        image: Optional[ImageSignal] = None,
        **kwargs: Any,
    ) -> AnalysisRequest:
        return AnalysisRequest(
            text=text,
            user_id=user_id,
            group_id=group_id,
            audio=audio,
            image=image,
            **kwargs,
        )

    return _make


@pytest.fixture
def notification_repo() -> InMemoryNotificationRepository:
    return InMemoryNotificationRepository()


@pytest.fixture
def profile_repo() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def history_repo() -> InMemoryHistoryRepository:
    return InMemoryHistoryRepository()
