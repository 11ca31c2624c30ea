"""Deferred analysis queue."""

from serene.services.queue.analysis_queue import AnalysisQueue

__all__ = ["AnalysisQueue"]
