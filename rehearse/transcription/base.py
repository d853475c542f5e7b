"""Abstract base class for transcription backends."""

from abc import ABC, abstractmethod
import logging

from ..models.capture import CaptureArtifact

logger = logging.getLogger(__name__)


class AbstractTranscriptionBackend(ABC):
    """Abstract base class for transcription backends."""

    def __init__(self, language: str = "en-US"):
        """Initialize backend with language preference."""
        self.language = language

    @abstractmethod
    def initialize(self) -> bool:
        """Initialize backend resources and verify configuration.

        Returns:
            True if initialization successful, False otherwise
        """
        pass

    @abstractmethod
    def transcribe(self, artifact: CaptureArtifact) -> str:
        """Transcribe a finished recording.

        Args:
            artifact: Recorded or uploaded media

        Returns:
            Transcript text, empty if no speech was detected
        """
        pass

    @abstractmethod
    def cleanup(self) -> None:
        """Clean up backend resources."""
        pass
