"""Services layer for Rehearse application logic."""

from .transcription_service import TranscriptionService
from .interview_service import InterviewService

__all__ = [
    "TranscriptionService",
    "InterviewService",
]
