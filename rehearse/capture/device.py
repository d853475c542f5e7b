"""Input devices and the streams a capture session owns."""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import pyaudio

from ..models.capture import DeviceConstraints
from .errors import DeviceError

logger = logging.getLogger(__name__)


class MediaTrack(ABC):
    """One live input (microphone or camera) of a device stream."""

    kind = "unknown"

    @abstractmethod
    def read(self) -> bytes:
        """Block until the next frame is available and return it."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Release the underlying device handle."""
        pass


class DeviceStream:
    """Tracks acquired for one session, shared by live preview and encoder.

    Only the owning session may call stop(); it releases every track once.
    """

    def __init__(self, tracks: List[MediaTrack], settings: Optional[Dict[str, Any]] = None):
        self.tracks = list(tracks)
        self.settings = dict(settings or {})
        self._lock = threading.Lock()
        self._stopped = False

    @property
    def active(self) -> bool:
        return not self._stopped

    @property
    def audio_track(self) -> Optional[MediaTrack]:
        return next((t for t in self.tracks if t.kind == "audio"), None)

    @property
    def video_track(self) -> Optional[MediaTrack]:
        return next((t for t in self.tracks if t.kind == "video"), None)

    def latest_frame(self) -> Optional[bytes]:
        """Grab a preview frame from the video track, if there is one."""
        track = self.video_track
        if track is None or self._stopped:
            return None
        return track.read()

    def stop(self) -> bool:
        """Stop all tracks.

        Returns:
            True if this call released the tracks, False if already released
        """
        with self._lock:
            if self._stopped:
                return False
            self._stopped = True

        for track in self.tracks:
            try:
                track.stop()
                logger.debug(f"Stopped {track.kind} track")
            except Exception as e:
                logger.error(f"Error stopping {track.kind} track: {e}")
        return True


class MediaDevice(ABC):
    """Source of device streams. Implementations raise DeviceError on failure."""

    @abstractmethod
    def open(self, constraints: DeviceConstraints) -> DeviceStream:
        pass


class PyAudioTrack(MediaTrack):
    """Microphone input via PyAudio."""

    kind = "audio"

    def __init__(self, pyaudio_instance: pyaudio.PyAudio, stream: Any, chunk_size: int):
        self.pyaudio_instance = pyaudio_instance
        self.stream = stream
        self.chunk_size = chunk_size

    def read(self) -> bytes:
        return self.stream.read(self.chunk_size, exception_on_overflow=False)

    def stop(self) -> None:
        try:
            self.stream.stop_stream()
            self.stream.close()
        finally:
            self.pyaudio_instance.terminate()


class OpenCVVideoTrack(MediaTrack):
    """Camera input via OpenCV; frames are JPEG-encoded for preview."""

    kind = "video"

    def __init__(self, capture: Any, cv2_module: Any):
        self.capture = capture
        self._cv2 = cv2_module

    def read(self) -> bytes:
        ok, frame = self.capture.read()
        if not ok:
            raise DeviceError("Camera returned no frame")
        ok, encoded = self._cv2.imencode(".jpg", frame)
        if not ok:
            raise DeviceError("Could not encode camera frame")
        return encoded.tobytes()

    def stop(self) -> None:
        self.capture.release()


class SystemMediaDevice(MediaDevice):
    """Default microphone (PyAudio) plus optional default camera (OpenCV)."""

    def __init__(
        self,
        sample_rate: int = 16000,
        chunk_size: int = 1024,
        channels: int = 1,
        format: int = pyaudio.paInt16,
        camera_index: int = 0,
    ):
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.format = format
        self.camera_index = camera_index

    def open(self, constraints: DeviceConstraints) -> DeviceStream:
        logger.info(f"Requesting media devices: {constraints.as_dict()}")
        tracks = [self._open_audio()]
        if constraints.video:
            try:
                tracks.append(self._open_video())
            except DeviceError:
                tracks[0].stop()
                raise

        settings = {
            "sample_rate": self.sample_rate,
            "channels": self.channels,
            "sample_width": pyaudio.get_sample_size(self.format),
            # Requested processing; applied only where the host audio API does it
            "echo_cancellation": constraints.echo_cancellation,
            "noise_suppression": constraints.noise_suppression,
            "auto_gain_control": constraints.auto_gain_control,
        }
        logger.info(f"Media stream opened: {[t.kind for t in tracks]}, "
                    f"{self.sample_rate}Hz, {self.chunk_size} samples/chunk")
        return DeviceStream(tracks, settings)

    def _open_audio(self) -> PyAudioTrack:
        pyaudio_instance = pyaudio.PyAudio()
        try:
            stream = pyaudio_instance.open(
                format=self.format,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                frames_per_buffer=self.chunk_size,
                stream_callback=None
            )
        except (OSError, ValueError) as e:
            pyaudio_instance.terminate()
            raise DeviceError(f"Could not open microphone: {e}", cause=e) from e
        return PyAudioTrack(pyaudio_instance, stream, self.chunk_size)

    def _open_video(self) -> OpenCVVideoTrack:
        try:
            import cv2
        except ImportError as e:
            raise DeviceError("Video capture requires opencv-python-headless", cause=e) from e

        capture = cv2.VideoCapture(self.camera_index)
        if not capture.isOpened():
            capture.release()
            raise DeviceError(f"Could not open camera {self.camera_index}")
        return OpenCVVideoTrack(capture, cv2)
