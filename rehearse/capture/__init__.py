"""Capture session controller: device streams, encoding and lifecycle."""

from .errors import (
    CaptureError,
    DeviceError,
    UnsupportedFormatError,
    NoDataError,
    EncoderRuntimeError,
    CaptureStateError,
    CaptureCancelledError,
)
from .device import MediaDevice, MediaTrack, DeviceStream, SystemMediaDevice
from .encoder import MediaFormat, MediaEncoder, negotiate_format, DEFAULT_MIME_CANDIDATES
from .session import CaptureSession
from .controller import CaptureController
from .capture_pub import CapturePublisher
from .upload import import_upload

__all__ = [
    "CaptureError",
    "DeviceError",
    "UnsupportedFormatError",
    "NoDataError",
    "EncoderRuntimeError",
    "CaptureStateError",
    "CaptureCancelledError",
    "MediaDevice",
    "MediaTrack",
    "DeviceStream",
    "SystemMediaDevice",
    "MediaFormat",
    "MediaEncoder",
    "negotiate_format",
    "DEFAULT_MIME_CANDIDATES",
    "CaptureSession",
    "CaptureController",
    "CapturePublisher",
    "import_upload",
]
