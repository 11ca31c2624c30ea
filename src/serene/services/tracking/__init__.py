"""Per-user stress pattern and trend tracking."""

from serene.services.tracking.pattern_tracker import PatternTracker

__all__ = ["PatternTracker"]
