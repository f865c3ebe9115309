"""UI-related data models."""

from dataclasses import dataclass
from typing import Optional

from .session import SessionState


@dataclass
class RecordingStatus:
    """Point-in-time view of a recording session for display."""
    session_id: str
    state: SessionState = SessionState.IDLE
    elapsed_seconds: int = 0
    transcript: str = ""
    interim_text: str = ""
    chunk_count: int = 0
    input_level: float = 0.0  # Peak of the latest chunk, 0.0-1.0
    has_media: bool = False
    playback_path: Optional[str] = None
    transcription_available: bool = False
    last_error: Optional[str] = None

    @property
    def is_recording(self) -> bool:
        return self.state is SessionState.RECORDING
