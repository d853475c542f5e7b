"""Capture controller: single-session owner driven by direct calls or a toggle."""

import logging
import threading
from typing import Callable, List, Optional

from ..models.capture import CaptureArtifact, CaptureState, DeviceConstraints
from .capture_pub import CapturePublisher
from .device import MediaDevice
from .errors import CaptureCancelledError, CaptureError, CaptureStateError
from .session import CaptureSession

logger = logging.getLogger(__name__)

_ACTIVE_STATES = (CaptureState.REQUESTING, CaptureState.RECORDING, CaptureState.STOPPING)


class CaptureController:
    """Runs at most one CaptureSession at a time.

    set_recording() follows an external "should be recording" signal. A
    single worker thread reconciles the requested state with the actual one,
    so toggles that arrive while a start or stop is running collapse into the
    latest request and starts and stops never overlap.
    """

    def __init__(
        self,
        device: MediaDevice,
        constraints: Optional[DeviceConstraints] = None,
        mime_candidates: Optional[List[str]] = None,
        flush_interval: float = 1.0,
        grace_period: float = 0.5,
        publisher: Optional[CapturePublisher] = None,
        on_artifact: Optional[Callable[[CaptureArtifact], None]] = None,
        on_error: Optional[Callable[[CaptureError], None]] = None,
    ):
        self.device = device
        self.constraints = constraints or DeviceConstraints()
        self.mime_candidates = mime_candidates
        self.flush_interval = flush_interval
        self.grace_period = grace_period
        self.publisher = publisher or CapturePublisher()
        self.on_artifact = on_artifact
        self.on_error = on_error

        self.sessions_started = 0
        self._session: Optional[CaptureSession] = None
        self._desired = False
        self._closed = False
        self._worker: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._op_lock = threading.Lock()

    @property
    def session(self) -> Optional[CaptureSession]:
        return self._session

    @property
    def is_recording(self) -> bool:
        session = self._session
        return session is not None and session.state is CaptureState.RECORDING

    def start(self, constraints: Optional[DeviceConstraints] = None) -> CaptureSession:
        """Start a new session.

        Raises:
            CaptureStateError: another session is still active
            DeviceError, UnsupportedFormatError, EncoderRuntimeError,
            CaptureCancelledError: from the session
        """
        with self._op_lock:
            with self._lock:
                if self._closed:
                    raise CaptureStateError("Controller is closed")
                previous = self._session
                if previous is not None and previous.state in _ACTIVE_STATES:
                    raise CaptureStateError(
                        f"Session {previous.session_id} is already {previous.state.value}")
                session = CaptureSession(
                    self.device,
                    mime_candidates=self.mime_candidates,
                    flush_interval=self.flush_interval,
                    grace_period=self.grace_period,
                    publisher=self.publisher,
                    on_error=self._on_session_failure,
                )
                self._session = session
                self.sessions_started += 1
            if previous is not None:
                previous.teardown()
            return session.start(constraints or self.constraints)

    def stop(self) -> CaptureArtifact:
        """Stop the current session and hand back its artifact.

        The session is torn down whether or not stop succeeds.

        Raises:
            CaptureStateError: there is no session
            NoDataError, EncoderRuntimeError: from the session
        """
        with self._op_lock:
            session = self._session
            if session is None:
                raise CaptureStateError("No capture session to stop")
            try:
                return session.stop()
            finally:
                session.teardown()
                with self._lock:
                    if self._session is session:
                        self._session = None

    def set_recording(self, requested: bool) -> None:
        """Follow the external recording signal (edge-triggered)."""
        with self._lock:
            if self._closed:
                raise CaptureStateError("Controller is closed")
            self._desired = requested
            session = self._session
            if not requested and session is not None and session.state is CaptureState.REQUESTING:
                session.cancel()
            if self._worker is None:
                self._worker = threading.Thread(target=self._reconcile, daemon=True)
                self._worker.name = "CaptureToggleThread"
                self._worker.start()
        logger.debug(f"Recording requested: {requested}")

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Wait for pending toggles to be applied.

        Returns:
            True if no reconcile work is left
        """
        worker = self._worker
        if worker is not None:
            worker.join(timeout=timeout)
            return not worker.is_alive()
        return True

    def teardown(self) -> None:
        """Release the current session, whatever its state."""
        with self._lock:
            session = self._session
            self._desired = False
        if session is not None:
            session.teardown()

    def close(self, timeout: float = 2.0) -> None:
        """Tear down and stop accepting toggles."""
        with self._lock:
            self._closed = True
        self.teardown()
        self.wait_idle(timeout=timeout)
        logger.info(f"CaptureController closed after {self.sessions_started} sessions")

    def _reconcile(self) -> None:
        while True:
            with self._lock:
                desired = self._desired
                recording = self.is_recording
                if desired == recording or (self._closed and not recording):
                    self._worker = None
                    return
            try:
                if desired:
                    self.start()
                else:
                    artifact = self.stop()
                    self._deliver(artifact)
            except CaptureCancelledError as e:
                logger.info(f"Capture cancelled: {e}")
            except CaptureError as e:
                self._report_error(e)
                if desired:
                    # Start failures are terminal; wait for a new toggle
                    with self._lock:
                        if self._desired:
                            self._desired = False

    def _deliver(self, artifact: CaptureArtifact) -> None:
        if self.on_artifact is None:
            return
        try:
            self.on_artifact(artifact)
        except Exception as e:
            logger.error(f"Artifact handler failed: {e}")

    def _on_session_failure(self, error: CaptureError) -> None:
        # A failed recording is not restarted until the signal toggles again
        with self._lock:
            self._desired = False
        self._report_error(error)

    def _report_error(self, error: CaptureError) -> None:
        logger.error(f"Capture error ({type(error).__name__}): {error}")
        if self.on_error:
            self.on_error(error)

    def __enter__(self) -> "CaptureController":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __del__(self):
        """Ensure the device is released on deletion."""
        session = getattr(self, "_session", None)
        if session is not None:
            session.teardown()
