"""Transcript analysis engine and score aggregation."""

from .engine import (
    TranscriptAnalyzer,
    analyze_transcript,
    empty_result,
    quality_for,
)
from .aggregator import ScoreAggregator

__all__ = [
    "TranscriptAnalyzer",
    "analyze_transcript",
    "empty_result",
    "quality_for",
    "ScoreAggregator",
]
