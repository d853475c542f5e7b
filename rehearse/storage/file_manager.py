"""File management module for recordings and session records."""

import json
import logging
import mimetypes
import shutil
import random
import string
from pathlib import Path
from datetime import datetime
from typing import Dict, Any, Optional, List

from ..models.capture import CaptureArtifact
from ..models.session import SessionRecord

logger = logging.getLogger(__name__)

RECORD_FILENAME = "record.json"

_EXTENSIONS = {
    "audio/wav": ".wav",
    "audio/x-wav": ".wav",
    "audio/vnd.wave": ".wav",
    "audio/l16": ".pcm",
    "audio/webm": ".webm",
    "video/webm": ".webm",
    "audio/ogg": ".ogg",
}

AUDIO_SUFFIXES = {".wav", ".pcm", ".webm", ".ogg", ".mp3", ".m4a", ".flac", ".mp4", ".mov"}


def extension_for(mime_type: str) -> str:
    """File extension for a MIME type; parameters such as codecs are ignored."""
    base_type = mime_type.split(";")[0].strip().lower()
    if base_type in _EXTENSIONS:
        return _EXTENSIONS[base_type]
    return mimetypes.guess_extension(base_type) or ".bin"


class FileManager:
    """Manages storage of recordings and their session records, keyed by session id."""

    def __init__(self, data_dir: str = "./data"):
        """Initialize file manager with data directory.

        Args:
            data_dir: Base directory for storing all data
        """
        self.data_dir = Path(data_dir)
        self.sessions_dir = self.data_dir / "sessions"
        self.logs_dir = self.data_dir / "logs"

        self._ensure_directories()

        logger.info(f"FileManager initialized with data_dir: {self.data_dir}")

    def _ensure_directories(self) -> None:
        """Ensure all required directories exist."""
        for directory in [self.data_dir, self.sessions_dir, self.logs_dir]:
            directory.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Ensured directory exists: {directory}")

    def create_session_id(self) -> str:
        """Create new session directory with timestamp and random suffix.

        Returns:
            Session ID (timestamp-based with random suffix)
        """
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        random_suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=4))
        session_id = f"{timestamp}_{random_suffix}"
        session_path = self.sessions_dir / session_id
        session_path.mkdir(exist_ok=True)

        logger.info(f"Created session directory: {session_path}")
        return session_id

    def save_artifact(self, artifact: CaptureArtifact, session_id: str, filename: str = "recording") -> str:
        """Save artifact bytes to the session directory.

        Args:
            artifact: Recorded or uploaded media
            session_id: Session identifier
            filename: File name without extension

        Returns:
            Full path to saved media file
        """
        session_path = self.get_session_path(session_id)
        session_path.mkdir(exist_ok=True)
        media_path = session_path / f"{filename}{extension_for(artifact.mime_type)}"

        try:
            media_path.write_bytes(artifact.data)
            logger.info(f"Recording saved: {media_path} ({artifact.size_bytes} bytes)")
            return str(media_path)
        except Exception as e:
            logger.error(f"Error saving recording: {e}")
            raise

    def save_record(self, record: SessionRecord) -> str:
        """Save a session record as flat JSON.

        Returns:
            Path to saved record file
        """
        session_path = self.get_session_path(record.session_id)
        session_path.mkdir(exist_ok=True)
        record_file = session_path / RECORD_FILENAME

        try:
            with open(record_file, 'w') as f:
                json.dump(record.to_dict(), f, indent=2)
            logger.info(f"Session record saved: {record_file}")
            return str(record_file)
        except Exception as e:
            logger.error(f"Error saving session record: {e}")
            raise

    def load_record(self, session_id: str) -> Optional[SessionRecord]:
        """Load a session record.

        Returns:
            SessionRecord or None if missing or unreadable
        """
        record_file = self.get_session_path(session_id) / RECORD_FILENAME

        if not record_file.exists():
            logger.warning(f"Session record not found: {record_file}")
            return None

        try:
            with open(record_file, 'r') as f:
                data = json.load(f)
            return SessionRecord.from_dict(data)
        except Exception as e:
            logger.error(f"Error loading session record: {e}")
            return None

    def list_sessions(self) -> List[str]:
        """List all session IDs that have a saved record.

        Returns:
            List of session IDs sorted by creation time
        """
        try:
            sessions = [path.name for path in self.sessions_dir.iterdir()
                        if path.is_dir() and (path / RECORD_FILENAME).exists()]
            sessions.sort()
            logger.debug(f"Found {len(sessions)} sessions")
            return sessions
        except Exception as e:
            logger.error(f"Error listing sessions: {e}")
            return []

    def get_session_path(self, session_id: str) -> Path:
        return self.sessions_dir / session_id

    def _recorded_at(self, session_path: Path) -> float:
        # Record timestamp when present; unfinished sessions fall back to mtime
        record_file = session_path / RECORD_FILENAME
        if record_file.exists():
            try:
                with open(record_file, 'r') as f:
                    return datetime.fromisoformat(json.load(f)["timestamp"]).timestamp()
            except (OSError, ValueError, KeyError) as e:
                logger.warning(f"Unreadable record in {session_path.name}, using mtime: {e}")
        return session_path.stat().st_mtime

    def cleanup_old_sessions(self, max_age_days: int = 30) -> int:
        """Delete sessions recorded more than ``max_age_days`` ago.

        Returns:
            Number of sessions removed
        """
        cutoff = datetime.now().timestamp() - max_age_days * 86400
        removed = 0

        try:
            for session_path in self.sessions_dir.iterdir():
                if not session_path.is_dir() or self._recorded_at(session_path) >= cutoff:
                    continue
                shutil.rmtree(session_path)
                removed += 1
                logger.info(f"Removed expired session {session_path.name}")
        except OSError as e:
            logger.error(f"Error during cleanup: {e}")

        logger.info(f"Session cleanup removed {removed} sessions older than {max_age_days} days")
        return removed

    def get_storage_stats(self) -> Dict[str, Any]:
        """Summarize disk usage and recorded time across sessions."""
        stats = {
            "session_count": 0,
            "media_files": 0,
            "recorded_seconds": 0.0,
            "total_size_bytes": 0,
            "data_directory": str(self.data_dir),
        }
        try:
            for session_path in self.sessions_dir.iterdir():
                if not session_path.is_dir():
                    continue
                stats["session_count"] += 1
                for file_path in session_path.iterdir():
                    stats["total_size_bytes"] += file_path.stat().st_size
                    if file_path.suffix.lower() in AUDIO_SUFFIXES:
                        stats["media_files"] += 1
                record = self.load_record(session_path.name) if (session_path / RECORD_FILENAME).exists() else None
                if record is not None:
                    stats["recorded_seconds"] += record.duration_seconds
        except OSError as e:
            logger.error(f"Error getting storage stats: {e}")
            return {}

        stats["total_size_mb"] = round(stats["total_size_bytes"] / (1024 * 1024), 2)
        return stats
