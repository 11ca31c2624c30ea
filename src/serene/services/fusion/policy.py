"""
Fusion Policy

Named configuration for score fusion: default modality weights, the
baseline blend factor and the crisis floor.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from serene.config.settings import FusionSettings
from serene.domain.enums import Modality
from serene.domain.models import CRISIS_STRESS_FLOOR


def _default_weights() -> dict[Modality, float]:
    return {Modality.TEXT: 0.5, Modality.AUDIO: 0.3, Modality.VISUAL: 0.2}


@dataclass(frozen=True)
class FusionPolicy:
    """
    Score fusion parameters.

    Attributes:
        weights: Default weight per modality
        baseline_blend: Share of the user's baseline in the final score
        crisis_floor: Minimum stress level under a positive crisis verdict
    """

    weights: dict[Modality, float] = field(default_factory=_default_weights)
    baseline_blend: float = 0.2
    crisis_floor: float = CRISIS_STRESS_FLOOR

    def __post_init__(self) -> None:
        if not 0.0 <= self.baseline_blend <= 1.0:
            raise ValueError(f"baseline_blend must be 0-1, got {self.baseline_blend}")
        if self.crisis_floor < CRISIS_STRESS_FLOOR:
            raise ValueError(f"crisis_floor cannot be below {CRISIS_STRESS_FLOOR}")

    @classmethod
    def from_settings(cls, settings: FusionSettings) -> "FusionPolicy":
        return cls(
            weights={
                Modality.TEXT: settings.text_weight,
                Modality.AUDIO: settings.audio_weight,
                Modality.VISUAL: settings.visual_weight,
            },
            baseline_blend=settings.baseline_blend,
            crisis_floor=settings.crisis_floor,
        )

    def normalized_weights(
        self,
        modalities: Iterable[Modality],
        override: Optional[dict[Modality, float]] = None,
    ) -> dict[Modality, float]:
        """
        Weights for the present modalities, summing to 1.

        Per-user overrides replace defaults modality by modality. When
        every present weight is zero the modalities share equally.
        """
        present = list(dict.fromkeys(modalities))
        if not present:
            return {}

        source = dict(self.weights)
        if override:
            source.update(override)

        raw = {m: max(0.0, source.get(m, 0.0)) for m in present}
        total = sum(raw.values())
        if total <= 0.0:
            return {m: 1.0 / len(present) for m in present}
        return {m: w / total for m, w in raw.items()}

    def apply_baseline(self, score: float, baseline: Optional[float]) -> float:
        if baseline is None:
            return score
        return (1.0 - self.baseline_blend) * score + self.baseline_blend * baseline
