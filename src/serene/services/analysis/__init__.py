"""
Per-modality stress analysis.

Each sub-analyzer calls the generative-AI backend under a timeout and
falls back to a deterministic heuristic when the call fails.
"""

from serene.services.analysis.audio_analyzer import AudioSubAnalyzer
from serene.services.analysis.base import SubAnalyzer
from serene.services.analysis.heuristics import HeuristicScan, StressHeuristics
from serene.services.analysis.response_parser import (
    AudioAnalysisPayload,
    ModelResponseParser,
    Parsed,
    ParseFailure,
    TextAnalysisPayload,
    VisualAnalysisPayload,
    extract_json_object,
)
from serene.services.analysis.text_analyzer import TextSubAnalyzer
from serene.services.analysis.visual_analyzer import VisualSubAnalyzer

__all__ = [
    "AudioSubAnalyzer",
    "SubAnalyzer",
    "HeuristicScan",
    "StressHeuristics",
    "AudioAnalysisPayload",
    "ModelResponseParser",
    "Parsed",
    "ParseFailure",
    "TextAnalysisPayload",
    "VisualAnalysisPayload",
    "extract_json_object",
    "TextSubAnalyzer",
    "VisualSubAnalyzer",
]
