"""Media formats, format negotiation and the buffering encoder."""

import io
import logging
import threading
import wave
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional

import numpy as np

from .device import DeviceStream
from .errors import EncoderRuntimeError, UnsupportedFormatError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MediaFormat:
    """A container/codec pair the encoder can produce."""
    mime_type: str
    extension: str
    container: str  # "wav" or "raw"

    def assemble(self, payload: bytes, settings: Dict[str, Any]) -> bytes:
        """Wrap concatenated PCM segments in this format's container."""
        if self.container == "raw":
            return payload
        buffer = io.BytesIO()
        with wave.open(buffer, 'wb') as wf:
            wf.setnchannels(settings.get("channels", 1))
            wf.setsampwidth(settings.get("sample_width", 2))
            wf.setframerate(settings.get("sample_rate", 16000))
            wf.writeframes(payload)
        return buffer.getvalue()

    def estimate_duration(self, payload_bytes: int, settings: Dict[str, Any]) -> float:
        bytes_per_second = (settings.get("sample_rate", 16000)
                            * settings.get("channels", 1)
                            * settings.get("sample_width", 2))
        return payload_bytes / bytes_per_second if bytes_per_second else 0.0


WAV_FORMAT = MediaFormat("audio/wav;codecs=pcm_s16le", "wav", "wav")
PLAIN_WAV_FORMAT = MediaFormat("audio/wav", "wav", "wav")
PCM_FORMAT = MediaFormat("audio/L16", "pcm", "raw")

SUPPORTED_FORMATS = {f.mime_type: f for f in (WAV_FORMAT, PLAIN_WAV_FORMAT, PCM_FORMAT)}

# Most preferred first; compressed containers need an encoder we do not ship
DEFAULT_MIME_CANDIDATES = [
    "audio/webm;codecs=opus",
    "audio/ogg;codecs=opus",
    "audio/wav;codecs=pcm_s16le",
    "audio/wav",
    "audio/L16",
]


def negotiate_format(
    candidates: Iterable[str],
    is_supported: Optional[Callable[[str], bool]] = None,
) -> MediaFormat:
    """Return the first supported candidate.

    Raises:
        UnsupportedFormatError: if no candidate is supported
    """
    is_supported = is_supported or MediaEncoder.is_type_supported
    candidates = list(candidates)
    for mime_type in candidates:
        if is_supported(mime_type):
            logger.info(f"Using MIME type: {mime_type}")
            return SUPPORTED_FORMATS[mime_type]
        logger.debug(f"MIME type not supported: {mime_type}")
    raise UnsupportedFormatError(f"No supported MIME type found for recording among {candidates}")


class MediaEncoder:
    """Reads the audio track continuously and hands out buffered segments.

    The reader thread appends to a pending buffer; request_data() swaps the
    buffer out and passes it to ``on_data``. Calls to request_data() are
    serialized.
    """

    def __init__(
        self,
        stream: DeviceStream,
        media_format: MediaFormat,
        on_data: Callable[[bytes], None],
        on_error: Callable[[EncoderRuntimeError], None],
    ):
        if stream.audio_track is None:
            raise EncoderRuntimeError("Device stream has no audio track")
        self.stream = stream
        self.media_format = media_format
        self.on_data = on_data
        self.on_error = on_error
        self.sample_width = stream.settings.get("sample_width", 2)

        self.pending = bytearray()
        self.peak_level = 0.0
        self.total_reads = 0
        self._buffer_lock = threading.Lock()
        self._flush_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._reader_thread: Optional[threading.Thread] = None

    @staticmethod
    def is_type_supported(mime_type: str) -> bool:
        return mime_type in SUPPORTED_FORMATS

    @property
    def is_running(self) -> bool:
        return self._reader_thread is not None and self._reader_thread.is_alive()

    def start(self) -> None:
        self._stop_event.clear()
        self._reader_thread = threading.Thread(target=self._read_continuously, daemon=True)
        self._reader_thread.name = "MediaEncoderThread"
        self._reader_thread.start()
        logger.info(f"Encoder started ({self.media_format.mime_type})")

    def request_data(self) -> int:
        """Flush buffered bytes to ``on_data``.

        Returns:
            Number of bytes flushed (zero-byte flushes are still delivered)
        """
        with self._flush_lock:
            with self._buffer_lock:
                segment = bytes(self.pending)
                self.pending.clear()
            self.on_data(segment)
            return len(segment)

    def stop(self, timeout: float = 0.5) -> bool:
        """Stop reading, wait up to ``timeout`` for the reader, then flush.

        Returns:
            True if the reader thread finished within the timeout
        """
        self._stop_event.set()
        finished = self._join_reader(timeout)
        self.request_data()
        logger.info(f"Encoder stopped after {self.total_reads} reads")
        return finished

    def abort(self, timeout: float = 0.5) -> bool:
        """Stop reading without a final flush.

        Waits up to ``timeout`` for an in-progress read to return.

        Returns:
            True if the reader thread finished within the timeout
        """
        self._stop_event.set()
        return self._join_reader(timeout)

    def _join_reader(self, timeout: float) -> bool:
        thread = self._reader_thread
        if thread is None or thread is threading.current_thread():
            return True
        thread.join(timeout=timeout)
        if thread.is_alive():
            logger.warning(f"Encoder reader did not finish within {timeout:.2f}s")
            return False
        return True

    def _read_continuously(self) -> None:
        track = self.stream.audio_track
        try:
            while not self._stop_event.is_set():
                data = track.read()
                if not data:
                    continue
                self._update_peak_level(data)
                with self._buffer_lock:
                    self.pending.extend(data)
                self.total_reads += 1
        except Exception as e:
            if self._stop_event.is_set():
                # Tracks are released underneath a blocked read on teardown
                logger.debug(f"Reader exited during shutdown: {e}")
                return
            logger.error(f"Encoder read failed: {e}")
            self.on_error(EncoderRuntimeError(f"Encoder failed: {e}", cause=e))

    def _update_peak_level(self, data: bytes) -> None:
        if self.sample_width != 2 or len(data) < 2:
            return
        samples = np.frombuffer(data[:len(data) - len(data) % 2], dtype=np.int16)
        peak = float(np.max(np.abs(samples.astype(np.int32)))) / 32768.0
        self.peak_level = max(self.peak_level, peak)