"""Real hardware tests for microphone capture.

These tests need a working microphone and are skipped unless pytest is run
with --hardware.

Run with: pytest tests/hardware/ -v -s --hardware
"""

import io
import time
import wave
import pytest

from rehearse.capture import CaptureController, CaptureSession, SystemMediaDevice
from rehearse.models.capture import CaptureState, DeviceConstraints
from rehearse.storage import FileManager

AUDIO_ONLY = DeviceConstraints(video=False)


@pytest.fixture
def device():
    return SystemMediaDevice(sample_rate=16000, chunk_size=1024, channels=1)


@pytest.mark.hardware
class TestRealMicrophone:
    """Tests that require real audio hardware to run."""

    def test_three_second_recording(self, device):
        session = CaptureSession(device, flush_interval=0.5)
        session.start(AUDIO_ONLY)
        print(f"\nRecording 3 seconds as {session.mime_type}...")

        start = time.time()
        while time.time() - start < 3.0:
            stats = session.stats()
            assert stats.state is CaptureState.RECORDING
            time.sleep(0.25)

        artifact = session.stop()
        session.teardown()
        print(f"Recorded {artifact.size_bytes:,} bytes in {artifact.chunk_count} chunks, "
              f"~{artifact.duration_estimate_seconds:.2f}s")

        assert session.is_released
        assert artifact.duration_estimate_seconds >= 2.0
        with wave.open(io.BytesIO(artifact.data), 'rb') as wf:
            assert wf.getframerate() == 16000
            assert wf.getnchannels() == 1
            assert wf.getsampwidth() == 2
            assert wf.getnframes() / wf.getframerate() >= 2.0

    def test_controller_recording_is_saved(self, device, temp_data_dir):
        file_manager = FileManager(temp_data_dir)

        with CaptureController(device, constraints=AUDIO_ONLY) as controller:
            controller.start()
            time.sleep(2.0)
            artifact = controller.stop()

        session_id = file_manager.create_session_id()
        path = file_manager.save_artifact(artifact, session_id)

        with wave.open(path, 'rb') as wf:
            assert wf.getnframes() > 0
        print(f"Saved to: {path}")
