"""Unit tests for device streams and the PyAudio-backed system device."""

import sys
import pytest
from unittest.mock import Mock, patch

from rehearse.capture.device import DeviceStream, PyAudioTrack, SystemMediaDevice
from rehearse.capture.errors import DeviceError
from rehearse.models.capture import DeviceConstraints

AUDIO_ONLY = DeviceConstraints(video=False)


@pytest.mark.unit
class TestDeviceStream:
    """Test cases for DeviceStream."""

    def test_stop_releases_each_track_once(self, make_track):
        audio, video = make_track("audio"), make_track("video")
        stream = DeviceStream([audio, video])

        assert stream.stop() is True
        assert stream.stop() is False

        assert audio.stop_calls == 1
        assert video.stop_calls == 1
        assert not stream.active

    def test_track_errors_do_not_block_release(self, make_track):
        broken = make_track("video")
        broken.stop = Mock(side_effect=RuntimeError("camera gone"))
        audio = make_track("audio")
        stream = DeviceStream([broken, audio])

        stream.stop()

        assert audio.stop_calls == 1

    def test_track_lookup(self, make_track):
        stream = DeviceStream([make_track("audio")])

        assert stream.audio_track is not None
        assert stream.video_track is None
        assert stream.latest_frame() is None


@pytest.mark.unit
class TestSystemMediaDevice:
    """Test cases for SystemMediaDevice."""

    def test_open_audio(self, mock_pyaudio):
        device = SystemMediaDevice(sample_rate=16000, chunk_size=512)

        stream = device.open(AUDIO_ONLY)

        mock_pyaudio['instance'].open.assert_called_once()
        kwargs = mock_pyaudio['instance'].open.call_args.kwargs
        assert kwargs['rate'] == 16000
        assert kwargs['frames_per_buffer'] == 512
        assert kwargs['input'] is True
        assert stream.settings['sample_width'] == 2
        assert stream.settings['echo_cancellation'] is True
        assert isinstance(stream.audio_track, PyAudioTrack)
        assert stream.video_track is None

    def test_audio_track_reads_and_releases(self, mock_pyaudio):
        stream = SystemMediaDevice(chunk_size=1024).open(AUDIO_ONLY)

        assert stream.audio_track.read() == b'\x00' * 2048
        mock_pyaudio['stream'].read.assert_called_with(1024, exception_on_overflow=False)

        stream.stop()

        mock_pyaudio['stream'].stop_stream.assert_called_once()
        mock_pyaudio['stream'].close.assert_called_once()
        mock_pyaudio['instance'].terminate.assert_called_once()

    def test_microphone_unavailable(self, mock_pyaudio):
        mock_pyaudio['instance'].open.side_effect = OSError("Invalid input device")

        with pytest.raises(DeviceError) as exc_info:
            SystemMediaDevice().open(AUDIO_ONLY)

        assert isinstance(exc_info.value.cause, OSError)
        mock_pyaudio['instance'].terminate.assert_called_once()

    def test_camera_unavailable_releases_microphone(self, mock_pyaudio):
        fake_cv2 = Mock()
        fake_cv2.VideoCapture.return_value.isOpened.return_value = False

        with patch.dict(sys.modules, {"cv2": fake_cv2}):
            with pytest.raises(DeviceError):
                SystemMediaDevice().open(DeviceConstraints(video=True))

        mock_pyaudio['stream'].close.assert_called_once()
        mock_pyaudio['instance'].terminate.assert_called_once()

    def test_open_with_camera(self, mock_pyaudio):
        fake_cv2 = Mock()
        capture = fake_cv2.VideoCapture.return_value
        capture.isOpened.return_value = True
        capture.read.return_value = (True, "frame")
        fake_cv2.imencode.return_value = (True, Mock(tobytes=Mock(return_value=b"jpeg")))

        with patch.dict(sys.modules, {"cv2": fake_cv2}):
            stream = SystemMediaDevice(camera_index=1).open(DeviceConstraints(video=True))

        fake_cv2.VideoCapture.assert_called_once_with(1)
        assert stream.latest_frame() == b"jpeg"
        stream.stop()
        capture.release.assert_called_once()
