"""Abstract capture device and capability provider."""

from abc import ABC, abstractmethod
from typing import Callable, List, Any
import logging

from ..exceptions import DeviceError

logger = logging.getLogger(__name__)

# Receives MediaChunkEvent and CaptureErrorEvent objects
EventSink = Callable[[Any], None]


class CaptureDevice(ABC):
    """An acquired camera/microphone stream owned by one recording."""

    def __init__(self, mime_type: str, sample_rate: int = 16000, channels: int = 1):
        self.mime_type = mime_type
        self.sample_rate = sample_rate
        self.channels = channels

    @property
    @abstractmethod
    def is_capturing(self) -> bool:
        """True while the device is emitting chunks."""

    @abstractmethod
    def start(self, publish: EventSink, generation: int) -> None:
        """Begin capture, sending chunk events to ``publish``.

        Args:
            publish: Sink for MediaChunkEvent / CaptureErrorEvent
            generation: Recording generation stamped on every event
        """

    @abstractmethod
    def stop(self) -> None:
        """Stop capture. All chunks are published before this returns.

        Must be a no-op when capture already stopped on its own.
        """

    @abstractmethod
    def release(self) -> None:
        """Release the underlying hardware. Idempotent."""


class CaptureProvider(ABC):
    """Grants access to a capture device, or explains why it can't."""

    @property
    def is_available(self) -> bool:
        return True

    @abstractmethod
    async def acquire(self, preferred_mime_types: List[str]) -> CaptureDevice:
        """Request camera/microphone access.

        Raises:
            PermissionDeniedError: Access refused by the user or platform
            DeviceError: Any other acquisition failure
        """


class UnavailableCaptureProvider(CaptureProvider):
    """Provider used when the runtime has no capture capability at all."""

    def __init__(self, reason: str = "No capture device available"):
        self.reason = reason

    @property
    def is_available(self) -> bool:
        return False

    async def acquire(self, preferred_mime_types: List[str]) -> CaptureDevice:
        logger.warning(f"Capture requested but unavailable: {self.reason}")
        raise DeviceError(self.reason)
