"""Data models for the Rehearse application."""

from .capture import (
    CaptureState,
    DeviceConstraints,
    MediaChunk,
    CaptureArtifact,
    CaptureStats,
)
from .analysis import (
    SpeechQuality,
    TranscriptInput,
    PacingMetrics,
    VocabularyMetrics,
    SentimentMetrics,
    StructureMetrics,
    AnalysisResult,
    VisualSignals,
    InterviewScore,
)
from .events import CaptureEvent
from .session import SessionRecord

__all__ = [
    "CaptureState",
    "DeviceConstraints",
    "MediaChunk",
    "CaptureArtifact",
    "CaptureStats",
    # Analysis models
    "SpeechQuality",
    "TranscriptInput",
    "PacingMetrics",
    "VocabularyMetrics",
    "SentimentMetrics",
    "StructureMetrics",
    "AnalysisResult",
    "VisualSignals",
    "InterviewScore",
    "CaptureEvent",
    "SessionRecord",
]
