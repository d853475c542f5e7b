"""Event models for capture lifecycle publishing."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Any, Dict


@dataclass
class CaptureEvent:
    """Capture session lifecycle event."""
    session_id: str
    event_type: str  # "started", "chunk", "stopped", "error"
    timestamp: datetime = field(default_factory=datetime.now)
    error: Optional[Exception] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
