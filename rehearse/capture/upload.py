"""Import an existing recording as a capture artifact."""

import logging
import mimetypes
import wave
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..models.capture import CaptureArtifact
from .errors import UnsupportedFormatError

logger = logging.getLogger(__name__)

# Rough bytes-per-second for compressed uploads when no duration is known
FALLBACK_BYTES_PER_SECOND = 16000


def import_upload(file_path: str, duration_seconds: Optional[float] = None) -> CaptureArtifact:
    """Read an uploaded audio or video file into a CaptureArtifact.

    Args:
        file_path: Path to the uploaded file
        duration_seconds: Known duration; read from the WAV header or
            estimated from the file size when omitted

    Raises:
        UnsupportedFormatError: the file is not audio or video
    """
    path = Path(file_path)
    mime_type, _ = mimetypes.guess_type(path.name)
    if not mime_type or not mime_type.startswith(("audio/", "video/")):
        raise UnsupportedFormatError(f"Please upload an audio or video file, got {mime_type or 'unknown type'}")

    data = path.read_bytes()
    if duration_seconds is None:
        duration_seconds = _wav_duration(path) if path.suffix.lower() == ".wav" else None
    if duration_seconds is None:
        duration_seconds = len(data) / FALLBACK_BYTES_PER_SECOND

    logger.info(f"Imported upload {path.name}: {mime_type}, {len(data)} bytes, {duration_seconds:.1f}s")
    return CaptureArtifact(
        data=data,
        mime_type=mime_type,
        duration_estimate_seconds=duration_seconds,
        chunk_count=1,
        started_at=datetime.fromtimestamp(path.stat().st_mtime),
    )


def _wav_duration(path: Path) -> Optional[float]:
    try:
        with wave.open(str(path), 'rb') as wf:
            rate = wf.getframerate()
            return wf.getnframes() / rate if rate else None
    except (wave.Error, EOFError) as e:
        logger.warning(f"Could not read WAV header of {path.name}: {e}")
        return None
