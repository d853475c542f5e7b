"""Persisted session record: capture metadata merged with analysis results."""

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Dict, Any, Optional

from .analysis import (
    AnalysisResult,
    InterviewScore,
    PacingMetrics,
    SentimentMetrics,
    SpeechQuality,
    StructureMetrics,
    VocabularyMetrics,
)

# Nested AnalysisResult groups and the prefixes they are flattened under
_METRIC_GROUPS = {
    "pacing": PacingMetrics,
    "vocabulary": VocabularyMetrics,
    "sentiment": SentimentMetrics,
    "structure": StructureMetrics,
}


@dataclass
class SessionRecord:
    """Everything stored for one recorded or uploaded answer."""
    session_id: str
    timestamp: datetime
    mime_type: str
    size_bytes: int
    duration_seconds: float
    analysis: AnalysisResult
    transcript: str = ""
    audio_file: Optional[str] = None
    score: Optional[InterviewScore] = None

    def to_dict(self) -> Dict[str, Any]:
        """Flatten into a JSON-serializable dict."""
        data: Dict[str, Any] = {
            "session_id": self.session_id,
            "timestamp": self.timestamp.isoformat(),
            "mime_type": self.mime_type,
            "size_bytes": self.size_bytes,
            "duration_seconds": self.duration_seconds,
            "audio_file": self.audio_file,
            "transcript": self.transcript,
            "has_spoken_content": self.analysis.has_spoken_content,
            "word_count": self.analysis.word_count,
            "filler_word_count": self.analysis.filler_word_count,
            "content_density": self.analysis.content_density,
            "confidence_score": self.analysis.confidence_score,
            "speech_quality": self.analysis.speech_quality.value,
        }
        for group in _METRIC_GROUPS:
            metrics = getattr(self.analysis, group)
            for f in fields(metrics):
                data[f"{group}_{f.name}"] = getattr(metrics, f.name)
        if self.score is not None:
            for f in fields(self.score):
                data[f"score_{f.name}"] = getattr(self.score, f.name)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionRecord":
        """Rebuild a record from the output of to_dict()."""
        groups = {}
        for group, metrics_cls in _METRIC_GROUPS.items():
            groups[group] = metrics_cls(**{
                f.name: data[f"{group}_{f.name}"] for f in fields(metrics_cls)
            })
        analysis = AnalysisResult(
            has_spoken_content=data["has_spoken_content"],
            word_count=data["word_count"],
            filler_word_count=data["filler_word_count"],
            content_density=data["content_density"],
            confidence_score=data["confidence_score"],
            speech_quality=SpeechQuality(data["speech_quality"]),
            **groups,
        )
        score = None
        if "score_overall" in data:
            score = InterviewScore(**{
                f.name: data[f"score_{f.name}"] for f in fields(InterviewScore)
            })
        return cls(
            session_id=data["session_id"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            mime_type=data["mime_type"],
            size_bytes=data["size_bytes"],
            duration_seconds=data["duration_seconds"],
            analysis=analysis,
            transcript=data.get("transcript", ""),
            audio_file=data.get("audio_file"),
            score=score,
        )
