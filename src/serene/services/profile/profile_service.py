"""
Profile Service

Explicit changes to a user's emotional profile. Analysis never writes
the profile; only feedback and user edits do.

Feedback learning:
- baseline_stress moves toward the reported stress (exponential moving
  average, alpha 0.2)
- personalized weights shift toward the modality whose score was
  closest to the reported stress (learning rate 0.05, floor 0.05)
- response_accuracy tracks 1 - |error| / 10
"""

import asyncio
from collections import defaultdict
from datetime import datetime
from typing import Iterable, Optional

from serene.config.logging_config import get_logger
from serene.domain.enums import Modality
from serene.domain.models import UserEmotionalProfile, UserFeedback
from serene.infrastructure.storage import ProfileRepository
from serene.services.fusion import FusionPolicy

logger = get_logger(__name__)


class ProfileService:
    """Per-user profile read-modify-write, serialized per user."""

    BASELINE_ALPHA = 0.2
    ACCURACY_ALPHA = 0.2
    WEIGHT_LEARNING_RATE = 0.05
    MIN_WEIGHT = 0.05
    MAX_LIST_ITEMS = 50

    def __init__(self, repository: ProfileRepository, policy: Optional[FusionPolicy] = None) -> None:
        self._repository = repository
        self._policy = policy or FusionPolicy()
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def get_or_create(self, user_id: str) -> UserEmotionalProfile:
        """Stored profile, or a default one (not persisted)."""
        profile = await self._repository.get(user_id)
        return profile or UserEmotionalProfile(user_id=user_id)

    def _shift_weights(
        self,
        current: Optional[dict[Modality, float]],
        feedback: UserFeedback,
    ) -> Optional[dict[Modality, float]]:
        scores = feedback.modality_scores
        if len(scores) < 2:
            return current

        full = dict(self._policy.weights)
        full.update(current or {})
        # Shift happens inside the share held by the rated modalities, so
        # modalities absent from the feedback keep their weight.
        present_mass = sum(max(0.0, full.get(m, 0.0)) for m in scores) or 1.0

        weights = self._policy.normalized_weights(scores.keys(), current)
        errors = {m: abs(score - feedback.reported_stress) for m, score in scores.items()}
        best = min(errors, key=errors.get)
        others = len(weights) - 1

        shifted = {
            m: max(
                self.MIN_WEIGHT,
                w + self.WEIGHT_LEARNING_RATE if m == best else w - self.WEIGHT_LEARNING_RATE / others,
            )
            for m, w in weights.items()
        }
        total = sum(shifted.values())
        full.update({m: round(present_mass * w / total, 4) for m, w in shifted.items()})
        return full

    async def record_feedback(self, user_id: str, feedback: UserFeedback) -> UserEmotionalProfile:
        """
        Apply explicit feedback to the profile and persist it.

        Raises:
            StorageError: If the profile cannot be read or written
        """
        async with self._locks[user_id]:
            profile = await self.get_or_create(user_id)

            profile.baseline_stress = round(
                (1 - self.BASELINE_ALPHA) * profile.baseline_stress
                + self.BASELINE_ALPHA * feedback.reported_stress,
                3,
            )
            profile.personalized_weights = self._shift_weights(profile.personalized_weights, feedback)

            accuracy = max(0.0, 1.0 - abs(feedback.error) / 10.0)
            profile.response_accuracy = (
                (1 - self.ACCURACY_ALPHA) * profile.response_accuracy + self.ACCURACY_ALPHA * accuracy
            )
            profile.append_feedback(feedback)
            profile.updated_at = datetime.utcnow()

            await self._repository.put(profile)

        logger.info(
            "Feedback recorded",
            user_id=user_id,
            request_id=feedback.request_id,
            error=round(feedback.error, 2),
            baseline=profile.baseline_stress,
        )
        return profile

    async def _extend(self, user_id: str, attribute: str, items: Iterable[str]) -> UserEmotionalProfile:
        async with self._locks[user_id]:
            profile = await self.get_or_create(user_id)
            existing: list[str] = getattr(profile, attribute)
            known = {item.lower() for item in existing}
            for item in items:
                cleaned = item.strip()
                if cleaned and cleaned.lower() not in known:
                    existing.append(cleaned)
                    known.add(cleaned.lower())
            setattr(profile, attribute, existing[-self.MAX_LIST_ITEMS:])
            profile.updated_at = datetime.utcnow()
            await self._repository.put(profile)

        logger.info("Profile updated", user_id=user_id, field=attribute, count=len(existing))
        return profile

    async def add_trigger_words(self, user_id: str, words: Iterable[str]) -> UserEmotionalProfile:
        return await self._extend(user_id, "trigger_words", words)

    async def add_calming_factors(self, user_id: str, factors: Iterable[str]) -> UserEmotionalProfile:
        return await self._extend(user_id, "calming_factors", factors)
