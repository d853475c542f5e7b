"""Repeating scheduled task with cancellation tied to its owner's teardown."""

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class ScheduledTask:
    """Runs a callback every ``interval`` seconds on one background thread.

    Callbacks never overlap: each run finishes before the next wait starts.
    """

    def __init__(self, interval: float, callback: Callable[[], None], name: str = "ScheduledTask"):
        if interval <= 0:
            raise ValueError(f"Interval must be positive, got {interval}")
        self.interval = interval
        self.callback = callback
        self.name = name
        self.run_count = 0
        self._cancel_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError(f"{self.name} already started")
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.name = self.name
        self._thread.start()
        logger.debug(f"{self.name} scheduled every {self.interval:.3f}s")

    def cancel(self, timeout: Optional[float] = None) -> bool:
        """Stop scheduling and wait up to ``timeout`` for an in-flight run.

        Returns:
            True if the worker thread has finished
        """
        self._cancel_event.set()
        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return True
        thread.join(timeout=timeout)
        if thread.is_alive():
            logger.warning(f"{self.name} did not finish within {timeout}s")
            return False
        return True

    def _run(self) -> None:
        while not self._cancel_event.wait(self.interval):
            try:
                self.callback()
            except Exception as e:
                logger.error(f"{self.name} callback failed: {e}")
            self.run_count += 1
