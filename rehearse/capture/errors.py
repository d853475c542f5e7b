"""Typed capture failures.

Every error carries a ``user_message`` suitable for showing to the person
recording; callers must surface it instead of dropping the failure.
"""

from typing import Optional


class CaptureError(Exception):
    """Base class for capture session failures."""

    user_message = "Recording failed. Please try again."

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class DeviceError(CaptureError):
    """Permission denied or no device matched the constraints."""

    user_message = ("Could not access camera and microphone. "
                    "Please allow access and try again.")


class UnsupportedFormatError(CaptureError):
    """No encoder format candidate is supported on this platform."""

    user_message = "Recording is not supported on this device."


class NoDataError(CaptureError):
    """Stop produced no usable bytes."""

    user_message = "No data was recorded. Please try again."


class EncoderRuntimeError(CaptureError):
    """The encoder failed while recording."""

    user_message = "Recording error occurred. Please try again."


class CaptureStateError(CaptureError):
    """An operation was requested in a state that does not allow it."""


class CaptureCancelledError(CaptureError):
    """A pending start was cancelled by a stop or teardown request."""

    user_message = "Recording was cancelled."
