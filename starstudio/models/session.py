"""Recording-session data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class SessionState(Enum):
    """Lifecycle states of a recording session."""
    IDLE = "idle"
    ACQUIRING = "acquiring"
    RECORDING = "recording"
    STOPPED = "stopped"
    SUBMITTING = "submitting"


@dataclass(frozen=True)
class CapturedMedia:
    """Media blob assembled once when a recording stops."""
    data: bytes
    mime_type: str
    chunk_count: int

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass
class SessionInfo:
    """Information about a recording kept on disk for playback."""
    session_id: str
    question_id: str
    recorded_at: datetime
    duration_seconds: int
    media_file: str
    mime_type: str
    file_size_bytes: int
    chunk_count: int
