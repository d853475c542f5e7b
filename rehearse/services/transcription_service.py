"""Transcription service that owns a lazily initialized backend."""

import logging
import threading
from typing import Callable, Optional

from ..config import RehearseConfig
from ..models.capture import CaptureArtifact
from ..transcription import AbstractTranscriptionBackend, GoogleSpeechBackend

logger = logging.getLogger(__name__)


class TranscriptionService:
    """Explicitly constructed holder for one transcription backend.

    initialize() is idempotent and thread-safe: concurrent callers wait for
    the same in-flight initialization and all receive the same backend.
    """

    def __init__(self, backend_factory: Callable[[], AbstractTranscriptionBackend]):
        """Initialize transcription service.

        Args:
            backend_factory: Builds the (uninitialized) backend on first use
        """
        self.backend_factory = backend_factory
        self._backend: Optional[AbstractTranscriptionBackend] = None
        self._lock = threading.Lock()
        self.initialize_count = 0

    @classmethod
    def from_config(cls, config: RehearseConfig) -> "TranscriptionService":
        """Service backed by Google Speech-to-Text settings from config."""
        def create_google_speech_backend() -> GoogleSpeechBackend:
            credentials_path = config.get_google_credentials_path()
            language = config.get('google_cloud.language', 'en-US')
            use_enhanced = config.get('google_cloud.use_enhanced_model', True)
            enable_punctuation = config.get('google_cloud.enable_automatic_punctuation', True)
            logger.debug(f"Config: language={language}, enhanced={use_enhanced}, "
                         f"punctuation={enable_punctuation}")
            return GoogleSpeechBackend(
                credentials_path=credentials_path,
                sample_rate=config.get('capture.sample_rate', 16000),
                language=language,
                use_enhanced=use_enhanced,
                enable_automatic_punctuation=enable_punctuation,
                request_timeout=config.get('google_cloud.request_timeout_seconds', 30.0),
            )

        return cls(create_google_speech_backend)

    @property
    def ready(self) -> bool:
        return self._backend is not None

    def initialize(self) -> AbstractTranscriptionBackend:
        """Create and initialize the backend once.

        Returns:
            The initialized backend

        Raises:
            RuntimeError: if the backend reports a failed initialization
        """
        with self._lock:
            if self._backend is not None:
                return self._backend

            logger.info("Initializing transcription backend...")
            backend = self.backend_factory()
            self.initialize_count += 1
            if not backend.initialize():
                raise RuntimeError(f"{type(backend).__name__} failed to initialize")

            self._backend = backend
            logger.info(f"{type(backend).__name__} initialized successfully")
            return backend

    def transcribe(self, artifact: CaptureArtifact) -> Optional[str]:
        """Transcribe an artifact.

        Returns:
            Transcript text, or None if initialization or transcription
            failed (callers fall back to an empty analysis)
        """
        try:
            backend = self.initialize()
            return backend.transcribe(artifact)
        except Exception as e:
            logger.error(f"Transcription failed: {e}")
            return None

    def cleanup(self) -> None:
        with self._lock:
            backend, self._backend = self._backend, None
        if backend is not None:
            try:
                backend.cleanup()
            except Exception as e:
                logger.warning(f"Error cleaning up transcription backend: {e}")
