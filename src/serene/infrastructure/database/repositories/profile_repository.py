"""
Emotional Profile Repository (SQL)
"""

from typing import Optional

from serene.domain.enums import Modality
from serene.domain.models import UserEmotionalProfile, UserFeedback
from serene.infrastructure.database.models import EmotionalProfileModel
from serene.infrastructure.database.repositories.base import BaseSQLRepository
from serene.infrastructure.storage.repositories import ProfileRepository


class SQLProfileRepository(BaseSQLRepository[EmotionalProfileModel], ProfileRepository):
    model = EmotionalProfileModel

    async def get(self, user_id: str) -> Optional[UserEmotionalProfile]:
        async with self._session("get") as session:
            row = await session.get(EmotionalProfileModel, user_id)
            if row is None:
                return None
            return UserEmotionalProfile(
                user_id=row.user_id,
                baseline_stress=row.baseline_stress,
                personalized_weights=(
                    {Modality(m): float(w) for m, w in row.personalized_weights.items()}
                    if row.personalized_weights
                    else None
                ),
                trigger_words=list(row.trigger_words or []),
                calming_factors=list(row.calming_factors or []),
                feedback_history=[UserFeedback.from_dict(f) for f in row.feedback_history or []],
                preferred_communication_style=row.preferred_communication_style,
                response_accuracy=row.response_accuracy,
                updated_at=row.updated_at,
            )

    async def put(self, profile: UserEmotionalProfile) -> None:
        data = profile.to_dict()
        async with self._session("put") as session:
            await session.merge(
                EmotionalProfileModel(
                    user_id=profile.user_id,
                    baseline_stress=profile.baseline_stress,
                    personalized_weights=data["personalized_weights"],
                    trigger_words=data["trigger_words"],
                    calming_factors=data["calming_factors"],
                    feedback_history=data["feedback_history"],
                    preferred_communication_style=profile.preferred_communication_style,
                    response_accuracy=profile.response_accuracy,
                    updated_at=profile.updated_at,
                )
            )
