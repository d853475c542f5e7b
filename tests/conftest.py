"""Pytest configuration and fixtures for Rehearse tests."""

import pytest
import tempfile
import threading
import time
import logging
from pathlib import Path
from unittest.mock import Mock, patch
import numpy as np
import wave
from pubsub import pub

from rehearse.capture.device import DeviceStream, MediaDevice, MediaTrack
from rehearse.capture.errors import DeviceError


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_addoption(parser):
    parser.addoption("--hardware", action="store_true", default=False,
                     help="Run tests that need a real microphone")


def pytest_configure(config):
    for marker in ("unit", "integration", "slow", "hardware"):
        config.addinivalue_line("markers", f"{marker}: {marker} tests")


def pytest_collection_modifyitems(config, items):
    if config.getoption("--hardware"):
        return
    skip_hardware = pytest.mark.skip(reason="needs --hardware")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip_hardware)


class FakeTrack(MediaTrack):
    """Track that produces ``payload`` every ``delay`` seconds."""

    def __init__(self, kind="audio", payload=b"\x10\x00" * 512, delay=0.005, fail_after=None):
        self.kind = kind
        self.payload = payload
        self.delay = delay
        self.fail_after = fail_after
        self.reads = 0
        self.stop_calls = 0
        self.stopped = threading.Event()

    def read(self) -> bytes:
        if self.stopped.is_set():
            raise OSError("Stream closed")
        time.sleep(self.delay)
        self.reads += 1
        if self.fail_after is not None and self.reads > self.fail_after:
            raise OSError("Device unplugged")
        return self.payload

    def stop(self) -> None:
        self.stop_calls += 1
        self.stopped.set()


class FakeMediaDevice(MediaDevice):
    """In-memory device that tracks how many of its streams are live at once.

    Args:
        payload: Bytes returned by each audio read (b"" for a silent encoder)
        delay: Seconds per audio read
        error: Raised from open() instead of returning a stream
        gate: If given, open() blocks until it is set
        fail_after: Audio reads before the track raises
    """

    def __init__(self, payload=b"\x10\x00" * 512, delay=0.005, error=None, gate=None, fail_after=None):
        self.payload = payload
        self.delay = delay
        self.error = error
        self.gate = gate
        self.fail_after = fail_after
        self.opening = threading.Event()
        self.streams = []
        self.max_active = 0
        self._lock = threading.Lock()

    @property
    def active_streams(self):
        return [s for s in self.streams if s.active]

    def open(self, constraints) -> DeviceStream:
        self.opening.set()
        if self.gate is not None:
            self.gate.wait(timeout=5.0)
        if self.error is not None:
            raise self.error
        tracks = [FakeTrack("audio", self.payload, self.delay, self.fail_after)]
        if constraints.video:
            tracks.append(FakeTrack("video", b"\xff\xd8jpeg", self.delay))
        stream = DeviceStream(tracks, {"sample_rate": 16000, "channels": 1, "sample_width": 2})
        with self._lock:
            self.streams.append(stream)
            self.max_active = max(self.max_active, len(self.active_streams))
        return stream


class TrackDevice(MediaDevice):
    """Device that opens a fresh stream from ``track_factory()`` each time."""

    def __init__(self, track_factory):
        self.track_factory = track_factory
        self.streams = []

    def open(self, constraints) -> DeviceStream:
        stream = DeviceStream(self.track_factory(), {"sample_rate": 16000, "channels": 1, "sample_width": 2})
        self.streams.append(stream)
        return stream


class EventRecorder:
    """Collects capture events; keeps itself alive for pubsub's weak references."""

    TOPICS = ("started", "chunk", "stopped", "error")

    def __init__(self, prefix="capture"):
        self.prefix = prefix
        self.events = []
        self._lock = threading.Lock()

    def on_event(self, event):
        with self._lock:
            self.events.append(event)

    def types(self):
        with self._lock:
            return [e.event_type for e in self.events]

    def subscribe(self):
        for topic in self.TOPICS:
            pub.subscribe(self.on_event, f"{self.prefix}.{topic}")

    def unsubscribe(self):
        for topic in self.TOPICS:
            pub.unsubscribe(self.on_event, f"{self.prefix}.{topic}")


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def fake_device():
    return FakeMediaDevice()


@pytest.fixture
def silent_device():
    """Device whose encoder only ever flushes zero-byte segments."""
    return FakeMediaDevice(payload=b"")


@pytest.fixture
def event_recorder():
    recorder = EventRecorder()
    recorder.subscribe()
    yield recorder
    recorder.unsubscribe()


@pytest.fixture
def sample_audio_chunk():
    """Generate a sample audio chunk for testing."""
    sample_rate = 16000
    duration = 1024 / sample_rate
    freq = 440

    t = np.linspace(0, duration, 1024, False)
    wave_data = np.sin(2 * np.pi * freq * t)

    audio_data = (wave_data * 32767).astype(np.int16)
    return audio_data.tobytes()


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        mock_stream.read.return_value = b'\x00' * 2048  # Silent audio
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_sample_size.return_value = 2

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def sample_audio_file(temp_data_dir, sample_audio_chunk):
    """Create a sample WAV file (~6.4 seconds) for testing."""
    file_path = Path(temp_data_dir) / "test_audio.wav"

    with wave.open(str(file_path), 'wb') as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(16000)
        for _ in range(100):
            wf.writeframes(sample_audio_chunk)

    return str(file_path)


@pytest.fixture
def device_error():
    return DeviceError("Permission denied")


@pytest.fixture
def make_track():
    """Factory for FakeTrack instances."""
    return FakeTrack


@pytest.fixture
def make_device():
    """Factory for FakeMediaDevice instances."""
    return FakeMediaDevice


@pytest.fixture
def make_track_device():
    """Factory for TrackDevice instances."""
    return TrackDevice
