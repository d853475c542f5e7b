"""Speech-to-text backends."""

from .base import AbstractTranscriptionBackend
from .google_backend import GoogleSpeechBackend

__all__ = [
    "AbstractTranscriptionBackend",
    "GoogleSpeechBackend",
]
