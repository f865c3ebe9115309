"""Abstract transcription listener and capability provider."""

from abc import ABC, abstractmethod
from typing import Callable, Optional
import logging

from ..models.events import TranscriptEvent

logger = logging.getLogger(__name__)

TranscriptSink = Callable[[TranscriptEvent], None]


class TranscriptionListener(ABC):
    """Streams recognition results for one recording."""

    @property
    @abstractmethod
    def is_listening(self) -> bool:
        """True between a successful start() and the listener stopping."""

    @abstractmethod
    def start(self) -> None:
        """Begin recognition. Calling it twice is a no-op."""

    @abstractmethod
    def stop(self) -> None:
        """Stop recognition. Safe to call when already stopped."""


class TranscriptionProvider(ABC):
    """Creates listeners, or reports that speech recognition is unavailable."""

    @property
    def is_available(self) -> bool:
        return True

    @abstractmethod
    def create_listener(self,
                        media_topic: str,
                        publish: TranscriptSink,
                        generation: int) -> Optional[TranscriptionListener]:
        """Create a listener for one recording.

        Args:
            media_topic: Pub/sub topic carrying the recording's media chunks
            publish: Sink for TranscriptEvent results
            generation: Recording generation stamped on every result

        Returns:
            A listener, or None when recognition is unavailable
        """


class UnavailableTranscriptionProvider(TranscriptionProvider):
    """Provider used when no speech recognition backend is configured."""

    def __init__(self, reason: str = "Speech recognition not configured"):
        self.reason = reason

    @property
    def is_available(self) -> bool:
        return False

    def create_listener(self, media_topic: str, publish: TranscriptSink,
                        generation: int) -> Optional[TranscriptionListener]:
        logger.info(f"Transcription unavailable: {self.reason}")
        return None
