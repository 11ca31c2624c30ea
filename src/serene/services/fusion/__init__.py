"""Score fusion: policy, combiner and coaching text."""

from serene.services.fusion.coaching import coach_reply, suggested_action
from serene.services.fusion.combiner import HybridScoreCombiner
from serene.services.fusion.policy import FusionPolicy

__all__ = [
    "coach_reply",
    "suggested_action",
    "HybridScoreCombiner",
    "FusionPolicy",
]
