"""Transcript analysis data models."""

from dataclasses import dataclass
from enum import Enum


class SpeechQuality(Enum):
    """Overall verdict derived from the confidence score."""
    POOR = "poor"
    FAIR = "fair"
    GOOD = "good"
    EXCELLENT = "excellent"


@dataclass(frozen=True)
class TranscriptInput:
    """Everything the analysis engine needs about one answer."""
    text: str
    duration_seconds: float = 0.0
    audio_size_bytes: int = 0


@dataclass(frozen=True)
class PacingMetrics:
    words_per_minute: float = 0.0
    pause_frequency: float = 0.0
    pace_consistency: float = 0.0
    score: float = 0.0


@dataclass(frozen=True)
class VocabularyMetrics:
    diversity: float = 0.0
    complexity: float = 0.0
    domain_specificity: float = 0.0
    score: float = 0.0


@dataclass(frozen=True)
class SentimentMetrics:
    positivity: float = 0.0
    enthusiasm: float = 0.0
    confidence: float = 0.0
    score: float = 0.0


@dataclass(frozen=True)
class StructureMetrics:
    organization: float = 0.0
    coherence: float = 0.0
    completeness: float = 0.0
    score: float = 0.0


@dataclass(frozen=True)
class AnalysisResult:
    """Metric bundle and quality verdict for one transcript."""
    has_spoken_content: bool = False
    word_count: int = 0
    filler_word_count: int = 0
    content_density: float = 0.0
    confidence_score: float = 0.0
    speech_quality: SpeechQuality = SpeechQuality.POOR
    pacing: PacingMetrics = PacingMetrics()
    vocabulary: VocabularyMetrics = VocabularyMetrics()
    sentiment: SentimentMetrics = SentimentMetrics()
    structure: StructureMetrics = StructureMetrics()


@dataclass(frozen=True)
class VisualSignals:
    """Non-transcript signals from a visual signal source."""
    eye_contact_score: float = 0.0
    posture: str = "good"  # "good" | "slouching" | "tooClose" | "tooFar"
    facial_expression: str = "neutral"  # "positive" | "neutral" | "negative"
    grammar_issues: int = 0


@dataclass(frozen=True)
class InterviewScore:
    """Aggregated presentation scores, each in [0, 100]."""
    overall: float
    verbal: float
    non_verbal: float
    content: float
    engagement: float
