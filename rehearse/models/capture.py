"""Capture-related data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Any


class CaptureState(Enum):
    """Lifecycle states of a single capture session."""
    IDLE = "idle"
    REQUESTING = "requesting"
    RECORDING = "recording"
    STOPPING = "stopping"
    STOPPED = "stopped"
    FAILED = "failed"


@dataclass(frozen=True)
class DeviceConstraints:
    """Input device request for a capture session."""
    video: bool = True
    echo_cancellation: bool = True
    noise_suppression: bool = True
    auto_gain_control: bool = True

    def as_dict(self) -> Dict[str, Any]:
        return {
            "video": self.video,
            "audio": {
                "echo_cancellation": self.echo_cancellation,
                "noise_suppression": self.noise_suppression,
                "auto_gain_control": self.auto_gain_control,
            },
        }


@dataclass(frozen=True)
class MediaChunk:
    """One encoder-flushed segment of in-progress media."""
    data: bytes
    sequence_number: int
    timestamp: float  # Unix timestamp of the flush

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class CaptureArtifact:
    """Finalized media assembled from all chunks of a stopped session."""
    data: bytes
    mime_type: str
    duration_estimate_seconds: float
    chunk_count: int = 0
    started_at: datetime = field(default_factory=datetime.now)

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass
class CaptureStats:
    """Snapshot of a session while it is running."""
    state: CaptureState
    elapsed_seconds: float
    chunk_count: int
    total_bytes: int
    peak_level: float
    mime_type: str = ""
