"""Google Speech-to-Text transcription backend."""

import time
import logging
from typing import Optional

from .base import AbstractTranscriptionBackend
from ..models.capture import CaptureArtifact

from google.cloud import speech
from google.api_core import exceptions as gax_exceptions
from google.oauth2 import service_account

logger = logging.getLogger(__name__)

# Synchronous recognize() only accepts up to one minute of audio
SYNC_LIMIT_SECONDS = 60.0

_ENCODINGS = {
    "audio/wav": speech.RecognitionConfig.AudioEncoding.LINEAR16,
    "audio/x-wav": speech.RecognitionConfig.AudioEncoding.LINEAR16,
    "audio/l16": speech.RecognitionConfig.AudioEncoding.LINEAR16,
    "audio/flac": speech.RecognitionConfig.AudioEncoding.FLAC,
    "audio/x-flac": speech.RecognitionConfig.AudioEncoding.FLAC,
    "audio/mpeg": speech.RecognitionConfig.AudioEncoding.MP3,
    "audio/webm": speech.RecognitionConfig.AudioEncoding.WEBM_OPUS,
    "video/webm": speech.RecognitionConfig.AudioEncoding.WEBM_OPUS,
    "audio/ogg": speech.RecognitionConfig.AudioEncoding.OGG_OPUS,
}


def encoding_for(mime_type: str) -> "speech.RecognitionConfig.AudioEncoding":
    """Map a MIME type (parameters ignored) to a recognition encoding."""
    base_type = mime_type.split(";")[0].strip().lower()
    return _ENCODINGS.get(base_type, speech.RecognitionConfig.AudioEncoding.ENCODING_UNSPECIFIED)


class GoogleSpeechBackend(AbstractTranscriptionBackend):
    """Google Speech-to-Text API backend for whole-recording transcription."""

    def __init__(self,
                 credentials_path: Optional[str] = None,
                 sample_rate: int = 16000,
                 language: str = "en-US",
                 use_enhanced: bool = True,
                 enable_automatic_punctuation: bool = True,
                 request_timeout: float = 30.0):
        """Initialize Google Speech backend.

        Args:
            credentials_path: Path to Google Cloud service account JSON file
            sample_rate: Sample rate of raw PCM artifacts
            language: Language code (e.g., 'en-US', 'es-ES')
            use_enhanced: Whether to use enhanced model (costs more but better quality)
            enable_automatic_punctuation: Enable automatic punctuation
            request_timeout: Seconds to wait for a recognition response
        """
        super().__init__(language)
        self.credentials_path = credentials_path
        if not self.credentials_path:
            raise ValueError("Google credentials path is required - cannot initialize without credentials")
        self.sample_rate = sample_rate
        self.use_enhanced = use_enhanced
        self.enable_automatic_punctuation = enable_automatic_punctuation
        self.request_timeout = request_timeout
        self.client = None
        self.project_id = None
        self.service_name = "Google Speech-to-Text"

    def initialize(self) -> bool:
        """Initialize Google Speech client and verify credentials."""
        logger.info(f"Loading Google credentials from: {self.credentials_path}")
        credentials = service_account.Credentials.from_service_account_file(self.credentials_path)

        self.client = speech.SpeechClient(credentials=credentials)
        self.project_id = credentials.project_id
        logger.info(f"Using Google Cloud project: {self.project_id}")

        logger.info("Google Speech-to-Text backend initialized successfully")
        return True

    def build_config(self, artifact: CaptureArtifact) -> speech.RecognitionConfig:
        encoding = encoding_for(artifact.mime_type)
        config = speech.RecognitionConfig(
            encoding=encoding,
            language_code=self.language,
            use_enhanced=self.use_enhanced,
            enable_automatic_punctuation=self.enable_automatic_punctuation,
        )
        # WAV and FLAC carry their sample rate in the header
        if artifact.mime_type.lower().startswith("audio/l16"):
            config.sample_rate_hertz = self.sample_rate
        return config

    def transcribe(self, artifact: CaptureArtifact) -> str:
        """Transcribe a recording using Google Speech-to-Text."""
        if self.client is None:
            raise RuntimeError("Google Speech backend is not initialized")

        start_time = time.time()
        logger.debug(f"Artifact: {artifact.size_bytes} bytes, {artifact.mime_type}, "
                     f"~{artifact.duration_estimate_seconds:.1f}s; Language: {self.language}")

        config = self.build_config(artifact)
        audio = speech.RecognitionAudio(content=artifact.data)
        try:
            if artifact.duration_estimate_seconds > SYNC_LIMIT_SECONDS:
                operation = self.client.long_running_recognize(config=config, audio=audio)
                response = operation.result(timeout=self.request_timeout * 10)
            else:
                response = self.client.recognize(config=config, audio=audio, timeout=self.request_timeout)
        except gax_exceptions.DeadlineExceeded as e:
            logger.error("Google STT recognize deadline exceeded")
            raise RuntimeError(f"Google Speech recognize timeout: {e}") from e
        except gax_exceptions.ServiceUnavailable as e:
            logger.error("Google STT service unavailable")
            raise RuntimeError(f"Google Speech service unavailable: {e}") from e
        except gax_exceptions.GoogleAPICallError as e:
            logger.error(f"Google STT API call error: {e}")
            raise RuntimeError(f"Google Speech API error: {e}") from e
        processing_time = time.time() - start_time

        transcript = " ".join(
            result.alternatives[0].transcript.strip()
            for result in response.results
            if result.alternatives
        ).strip()

        if not transcript:
            logger.debug("--- NO SPEECH DETECTED ---")
        else:
            logger.debug(f"Transcript='{transcript}' ({len(response.results)} results, "
                         f"processing_time: {processing_time:.3f}s)")
        return transcript

    def cleanup(self) -> None:
        """Clean up Google Speech client resources."""
        self.client = None
