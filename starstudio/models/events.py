"""Event models carried over the per-session pub/sub channels."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class MediaChunkEvent:
    """A binary segment emitted by the capture device."""
    chunk_id: str
    data: bytes
    timestamp: float  # Unix timestamp when chunk was captured
    sequence_number: int
    generation: int = 0  # Which recording of the session produced it
    sample_rate: int = 16000
    channels: int = 1
    final: bool = False  # True for the last chunk flushed on stop
    level: Optional[float] = None  # Peak amplitude 0.0-1.0, when the device measures it


@dataclass
class TranscriptEvent:
    """A recognition result, either interim or final."""
    text: str
    is_final: bool
    generation: int = 0
    confidence: Optional[float] = None
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class CaptureErrorEvent:
    """Capture stopped on its own (device unplugged, stream overflow...)."""
    detail: str
    generation: int = 0
    timestamp: datetime = field(default_factory=datetime.now)
