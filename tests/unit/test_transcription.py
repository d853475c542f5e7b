"""Unit tests for TranscriptionService and the Google Speech backend."""

import threading
import time
import logging
import pytest
from unittest.mock import MagicMock, Mock, patch

from google.api_core import exceptions as gax_exceptions
from google.cloud import speech

from rehearse.models.capture import CaptureArtifact
from rehearse.services.transcription_service import TranscriptionService
from rehearse.transcription.base import AbstractTranscriptionBackend
from rehearse.transcription.google_backend import GoogleSpeechBackend, encoding_for

logger = logging.getLogger(__name__)

ARTIFACT = CaptureArtifact(data=b"RIFF" + b"\x00" * 100, mime_type="audio/wav;codecs=pcm_s16le",
                           duration_estimate_seconds=5.0)


class MockTranscriptionBackend(AbstractTranscriptionBackend):
    """A mock backend with a slow initialization."""

    def __init__(self, init_time: float = 0.1, text: str = "mock transcript", init_ok: bool = True):
        super().__init__()
        self.init_time = init_time
        self.text = text
        self.init_ok = init_ok
        self.init_calls = 0
        self.cleaned_up = False

    def initialize(self) -> bool:
        self.init_calls += 1
        time.sleep(self.init_time)
        return self.init_ok

    def transcribe(self, artifact: CaptureArtifact) -> str:
        logger.debug(f"MockBackend: transcribing {artifact.size_bytes} bytes")
        return self.text

    def cleanup(self) -> None:
        self.cleaned_up = True


@pytest.mark.unit
class TestTranscriptionService:
    """Test cases for TranscriptionService."""

    def test_not_ready_until_initialized(self):
        service = TranscriptionService(MockTranscriptionBackend)

        assert service.ready is False
        backend = service.initialize()
        assert service.ready is True
        assert service.initialize() is backend

    def test_concurrent_initialize_shares_one_backend(self):
        factory = MagicMock(side_effect=lambda: MockTranscriptionBackend(init_time=0.2))
        service = TranscriptionService(factory)
        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(service.initialize())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5.0)

        assert len(results) == 8
        assert all(r is results[0] for r in results)
        assert factory.call_count == 1
        assert results[0].init_calls == 1
        assert service.initialize_count == 1

    def test_failed_initialize_can_be_retried(self):
        backends = [MockTranscriptionBackend(init_time=0, init_ok=False),
                    MockTranscriptionBackend(init_time=0)]
        service = TranscriptionService(Mock(side_effect=backends))

        with pytest.raises(RuntimeError):
            service.initialize()
        assert service.ready is False

        assert service.initialize() is backends[1]

    def test_transcribe(self):
        service = TranscriptionService(lambda: MockTranscriptionBackend(init_time=0, text="hello"))

        assert service.transcribe(ARTIFACT) == "hello"

    def test_transcribe_returns_none_on_backend_error(self):
        backend = MockTranscriptionBackend(init_time=0)
        backend.transcribe = Mock(side_effect=RuntimeError("Google Speech API error"))
        service = TranscriptionService(lambda: backend)

        assert service.transcribe(ARTIFACT) is None

    def test_transcribe_returns_none_when_factory_fails(self):
        def factory():
            raise FileNotFoundError("Google credentials file not found")

        assert TranscriptionService(factory).transcribe(ARTIFACT) is None

    def test_cleanup(self):
        service = TranscriptionService(lambda: MockTranscriptionBackend(init_time=0))
        backend = service.initialize()

        service.cleanup()

        assert backend.cleaned_up is True
        assert service.ready is False


@pytest.fixture
def google_client():
    with patch('rehearse.transcription.google_backend.service_account.Credentials.from_service_account_file') as creds, \
            patch('rehearse.transcription.google_backend.speech.SpeechClient') as client_class:
        creds.return_value.project_id = "test-project"
        yield client_class.return_value


def recognize_response(*transcripts):
    return Mock(results=[Mock(alternatives=[Mock(transcript=t)]) for t in transcripts])


@pytest.mark.unit
class TestGoogleSpeechBackend:
    """Test cases for GoogleSpeechBackend with a mocked client."""

    def test_requires_credentials(self):
        with pytest.raises(ValueError):
            GoogleSpeechBackend(credentials_path=None)

    def test_initialize(self, google_client):
        backend = GoogleSpeechBackend(credentials_path="/tmp/creds.json")

        assert backend.initialize() is True
        assert backend.client is google_client
        assert backend.project_id == "test-project"

    def test_transcribe_joins_results(self, google_client):
        google_client.recognize.return_value = recognize_response(" I led the team.", "We shipped it. ")
        backend = GoogleSpeechBackend(credentials_path="/tmp/creds.json")
        backend.initialize()

        assert backend.transcribe(ARTIFACT) == "I led the team. We shipped it."
        google_client.long_running_recognize.assert_not_called()

    def test_no_speech(self, google_client):
        google_client.recognize.return_value = recognize_response()
        backend = GoogleSpeechBackend(credentials_path="/tmp/creds.json")
        backend.initialize()

        assert backend.transcribe(ARTIFACT) == ""

    def test_long_recording_uses_long_running(self, google_client):
        google_client.long_running_recognize.return_value.result.return_value = recognize_response("long answer")
        backend = GoogleSpeechBackend(credentials_path="/tmp/creds.json")
        backend.initialize()
        artifact = CaptureArtifact(data=b"\x00" * 10, mime_type="audio/wav", duration_estimate_seconds=90.0)

        assert backend.transcribe(artifact) == "long answer"
        google_client.recognize.assert_not_called()

    def test_api_error_is_wrapped(self, google_client):
        google_client.recognize.side_effect = gax_exceptions.ServiceUnavailable("down")
        backend = GoogleSpeechBackend(credentials_path="/tmp/creds.json")
        backend.initialize()

        with pytest.raises(RuntimeError) as exc_info:
            backend.transcribe(ARTIFACT)
        assert isinstance(exc_info.value.__cause__, gax_exceptions.ServiceUnavailable)

    def test_transcribe_before_initialize(self):
        backend = GoogleSpeechBackend(credentials_path="/tmp/creds.json")

        with pytest.raises(RuntimeError):
            backend.transcribe(ARTIFACT)

    def test_raw_pcm_sets_sample_rate(self):
        backend = GoogleSpeechBackend(credentials_path="/tmp/creds.json", sample_rate=16000)
        artifact = CaptureArtifact(data=b"\x00" * 10, mime_type="audio/L16", duration_estimate_seconds=1.0)

        config = backend.build_config(artifact)

        assert config.sample_rate_hertz == 16000
        assert config.encoding == speech.RecognitionConfig.AudioEncoding.LINEAR16

    @pytest.mark.parametrize("mime_type,encoding", [
        ("audio/wav;codecs=pcm_s16le", speech.RecognitionConfig.AudioEncoding.LINEAR16),
        ("audio/x-wav", speech.RecognitionConfig.AudioEncoding.LINEAR16),
        ("audio/flac", speech.RecognitionConfig.AudioEncoding.FLAC),
        ("audio/webm;codecs=opus", speech.RecognitionConfig.AudioEncoding.WEBM_OPUS),
        ("video/mp4", speech.RecognitionConfig.AudioEncoding.ENCODING_UNSPECIFIED),
    ])
    def test_encoding_for(self, mime_type, encoding):
        assert encoding_for(mime_type) == encoding
