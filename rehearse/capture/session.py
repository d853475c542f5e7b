"""Capture session: one recording attempt from device request to artifact."""

import logging
import threading
import time
import uuid
from datetime import datetime
from typing import Callable, List, Optional

from ..models.capture import (
    CaptureArtifact,
    CaptureState,
    CaptureStats,
    DeviceConstraints,
    MediaChunk,
)
from ..models.events import CaptureEvent
from .capture_pub import CapturePublisher
from .device import DeviceStream, MediaDevice
from .encoder import DEFAULT_MIME_CANDIDATES, MediaEncoder, MediaFormat, negotiate_format
from .errors import (
    CaptureCancelledError,
    CaptureError,
    CaptureStateError,
    DeviceError,
    EncoderRuntimeError,
    NoDataError,
)
from .scheduler import ScheduledTask

logger = logging.getLogger(__name__)


class CaptureSession:
    """Owns one device stream and the chunks recorded from it.

    IDLE -> REQUESTING -> RECORDING -> STOPPING -> STOPPED, with FAILED
    reachable from REQUESTING, RECORDING and STOPPING. STOPPED and FAILED
    are terminal; teardown() moves them to IDLE but the session cannot be
    started again.
    """

    def __init__(
        self,
        device: MediaDevice,
        mime_candidates: Optional[List[str]] = None,
        flush_interval: float = 1.0,
        grace_period: float = 0.5,
        publisher: Optional[CapturePublisher] = None,
        on_error: Optional[Callable[[CaptureError], None]] = None,
        session_id: Optional[str] = None,
    ):
        """Initialize a capture session.

        Args:
            device: Source of the device stream
            mime_candidates: Encoding formats to try, most preferred first
            flush_interval: Seconds between encoder flushes
            grace_period: Upper bound on the wait for the final flush in stop()
            publisher: Lifecycle event publisher
            on_error: Called when recording fails outside start()/stop()
            session_id: Identifier used in events; generated if omitted
        """
        self.device = device
        self.mime_candidates = list(mime_candidates or DEFAULT_MIME_CANDIDATES)
        self.flush_interval = flush_interval
        self.grace_period = grace_period
        self.publisher = publisher or CapturePublisher()
        self.on_error = on_error
        self.session_id = session_id or uuid.uuid4().hex[:12]

        self.state = CaptureState.IDLE
        self.mime_type: Optional[str] = None
        self.media_format: Optional[MediaFormat] = None
        self.artifact: Optional[CaptureArtifact] = None
        self.error: Optional[CaptureError] = None
        self.started_at: Optional[datetime] = None

        self._chunks: List[MediaChunk] = []
        self._stream: Optional[DeviceStream] = None
        self._encoder: Optional[MediaEncoder] = None
        self._flush_task: Optional[ScheduledTask] = None
        self._start_monotonic: Optional[float] = None
        self._lock = threading.RLock()
        self._cancel_event = threading.Event()
        self._used = False
        self._released = False

    @property
    def chunks(self) -> List[MediaChunk]:
        return list(self._chunks)

    @property
    def stream(self) -> Optional[DeviceStream]:
        return self._stream

    @property
    def is_released(self) -> bool:
        return self._released

    def start(self, constraints: Optional[DeviceConstraints] = None) -> "CaptureSession":
        """Acquire the device, negotiate a format and begin recording.

        Raises:
            DeviceError: permission denied or no matching device
            UnsupportedFormatError: no candidate format is supported
            CaptureCancelledError: cancel() or teardown() ran while the
                device request was pending
            EncoderRuntimeError: the encoder could not be started
            CaptureStateError: the session was already used
        """
        constraints = constraints or DeviceConstraints()
        with self._lock:
            if self._used or self.state is not CaptureState.IDLE:
                raise CaptureStateError(
                    f"Session {self.session_id} cannot start from {self.state.value}")
            self._used = True
            self.state = CaptureState.REQUESTING
        logger.info(f"Session {self.session_id}: requesting user media")

        try:
            stream = self.device.open(constraints)
        except DeviceError as e:
            self._fail(e)
            raise

        try:
            with self._lock:
                self._stream = stream
                if self._cancel_event.is_set():
                    logger.info(f"Session {self.session_id}: start cancelled, releasing stream")
                    raise CaptureCancelledError("Start cancelled while requesting devices")

                media_format = negotiate_format(self.mime_candidates)
                self._encoder = MediaEncoder(
                    stream,
                    media_format,
                    on_data=self.record_chunk,
                    on_error=self._on_encoder_error,
                )
                self._encoder.start()
                self._flush_task = ScheduledTask(
                    self.flush_interval,
                    self._encoder.request_data,
                    name=f"ChunkFlush-{self.session_id}",
                )
                self._flush_task.start()

                self.media_format = media_format
                self.mime_type = media_format.mime_type
                self.started_at = datetime.now()
                self._start_monotonic = time.monotonic()
                self.state = CaptureState.RECORDING
        except CaptureCancelledError as e:
            self._fail(e, publish=False)
            raise
        except CaptureError as e:
            self._fail(e)
            raise
        except Exception as e:
            error = EncoderRuntimeError(f"Encoder failed to start: {e}", cause=e)
            self._fail(error)
            raise error

        logger.info(f"Session {self.session_id}: recording ({self.mime_type})")
        self._publish("started", metadata={"mime_type": self.mime_type})
        return self

    def record_chunk(self, data: bytes) -> None:
        """Append an encoder-flushed segment; zero-byte segments are ignored."""
        if not data:
            logger.debug(f"Session {self.session_id}: ignoring empty segment")
            return
        with self._lock:
            if self.state not in (CaptureState.RECORDING, CaptureState.STOPPING):
                logger.warning(f"Session {self.session_id}: dropping segment in state {self.state.value}")
                return
            chunk = MediaChunk(data=data, sequence_number=len(self._chunks), timestamp=time.time())
            self._chunks.append(chunk)
        logger.debug(f"Session {self.session_id}: chunk #{chunk.sequence_number} ({chunk.size} bytes)")
        self._publish("chunk", metadata={"sequence_number": chunk.sequence_number, "size": chunk.size})

    def stop(self) -> CaptureArtifact:
        """Flush, finalize and return the artifact.

        Raises:
            NoDataError: nothing but zero-byte segments were recorded
            EncoderRuntimeError: the encoder had already failed
            CaptureCancelledError: called while the device request was pending
            CaptureStateError: the session never started
        """
        with self._lock:
            if self.state is CaptureState.STOPPED:
                return self.artifact
            if self.state is CaptureState.FAILED and self.error is not None:
                raise self.error
            if self.state is CaptureState.REQUESTING:
                self.cancel()
                raise CaptureCancelledError("Stop requested before recording began")
            if self.state is not CaptureState.RECORDING:
                raise CaptureStateError(
                    f"Session {self.session_id} cannot stop from {self.state.value}")
            self.state = CaptureState.STOPPING
            flush_task, encoder = self._flush_task, self._encoder

        logger.info(f"Session {self.session_id}: stopping")
        deadline = time.monotonic() + self.grace_period
        flush_task.cancel(timeout=self.grace_period)
        encoder.stop(timeout=max(0.0, deadline - time.monotonic()))

        with self._lock:
            if self.state is not CaptureState.STOPPING:
                raise CaptureCancelledError(
                    f"Session {self.session_id} torn down while stopping")
            chunks = [c for c in self._chunks if c.size > 0]
            if chunks:
                self._release()
                payload = b"".join(c.data for c in chunks)
                settings = self._stream.settings
                self.artifact = CaptureArtifact(
                    data=self.media_format.assemble(payload, settings),
                    mime_type=self.mime_type,
                    duration_estimate_seconds=self.media_format.estimate_duration(len(payload), settings),
                    chunk_count=len(chunks),
                    started_at=self.started_at,
                )
                self.state = CaptureState.STOPPED

        if not chunks:
            error = NoDataError(f"Session {self.session_id} recorded no data")
            if not self._fail(error, only_from=(CaptureState.STOPPING,)):
                raise CaptureCancelledError(
                    f"Session {self.session_id} torn down while stopping")
            raise error

        logger.info(f"Session {self.session_id}: stopped, {len(chunks)} chunks, "
                    f"{self.artifact.size_bytes} bytes")
        self._publish("stopped", metadata={
            "size": self.artifact.size_bytes,
            "duration": self.artifact.duration_estimate_seconds,
        })
        return self.artifact

    def cancel(self) -> None:
        """Cancel a pending start; the stream is released as soon as it arrives."""
        self._cancel_event.set()

    def teardown(self) -> None:
        """Release everything this session holds. Safe to call repeatedly."""
        self._cancel_event.set()
        with self._lock:
            self._used = True
            if self.state is CaptureState.REQUESTING:
                # start() releases the stream once device.open() returns
                return
            if self.state in (CaptureState.RECORDING, CaptureState.STOPPING):
                logger.warning(f"Session {self.session_id}: abandoned while {self.state.value}")
                self.state = CaptureState.FAILED

        self._stop_workers()
        with self._lock:
            self._release()
            if self.state in (CaptureState.STOPPED, CaptureState.FAILED):
                self.state = CaptureState.IDLE
                self.artifact = None

    def stats(self) -> CaptureStats:
        """Snapshot of progress; safe to call while chunks are being appended."""
        chunks = self._chunks
        count = len(chunks)
        elapsed = 0.0
        if self._start_monotonic is not None:
            elapsed = time.monotonic() - self._start_monotonic
        encoder = self._encoder
        return CaptureStats(
            state=self.state,
            elapsed_seconds=elapsed,
            chunk_count=count,
            total_bytes=sum(c.size for c in chunks[:count]),
            peak_level=encoder.peak_level if encoder else 0.0,
            mime_type=self.mime_type or "",
        )

    def _on_encoder_error(self, error: EncoderRuntimeError) -> None:
        if not self._fail(error, only_from=(CaptureState.RECORDING,)):
            logger.debug(f"Session {self.session_id}: ignoring encoder error in {self.state.value}")
            return
        if self.on_error:
            self.on_error(error)

    def _fail(self, error: CaptureError, publish: bool = True, only_from=None) -> bool:
        """Move to FAILED, stop the workers, then release the device.

        Must be called without holding the session lock.

        Returns:
            False if ``only_from`` was given and the session was in another state
        """
        with self._lock:
            if only_from is not None and self.state not in only_from:
                return False
            self.error = error
            self.state = CaptureState.FAILED
        self._stop_workers()
        with self._lock:
            self._release()
        logger.error(f"Session {self.session_id} failed: {error}")
        if publish:
            self._publish("error", error=error)
        return True

    def _stop_workers(self) -> None:
        """Cancel the flush task and wait for the reader, within one grace period.

        Must be called without holding the session lock; the workers take it.
        """
        deadline = time.monotonic() + self.grace_period
        flush_task, encoder = self._flush_task, self._encoder
        if flush_task is not None:
            flush_task.cancel(timeout=self.grace_period)
        if encoder is not None:
            encoder.abort(timeout=max(0.0, deadline - time.monotonic()))

    def _release(self) -> None:
        """Stop device tracks exactly once per session."""
        if self._released or self._stream is None:
            return
        self._released = True
        self._stream.stop()
        logger.info(f"Session {self.session_id}: device tracks released")

    def _publish(self, event_type: str, error: Optional[Exception] = None, metadata=None) -> None:
        self.publisher.publish(CaptureEvent(
            session_id=self.session_id,
            event_type=event_type,
            error=error,
            metadata=metadata or {},
        ))

    def __del__(self):
        """Ensure device tracks are released on deletion."""
        if not getattr(self, "_released", True) and getattr(self, "_stream", None) is not None:
            self._release()
