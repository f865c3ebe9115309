"""Microphone capture via PyAudio, publishing chunks from a background thread."""

import asyncio
import errno
import time
import logging
from threading import Thread, Event
from typing import Optional, List

import numpy as np
import pyaudio

from .base import CaptureDevice, CaptureProvider, EventSink
from .media import negotiate_mime_type, base_mime_type
from ..exceptions import PermissionDeniedError, DeviceError
from ..models.events import MediaChunkEvent, CaptureErrorEvent

logger = logging.getLogger(__name__)

# PyAudio records raw PCM; the controller wraps it in a WAV container
SUPPORTED_MIME_TYPES = ("audio/wav",)

_PERMISSION_ERRNOS = (errno.EACCES, errno.EPERM)


class PyAudioCaptureDevice(CaptureDevice):
    """An open PyAudio input stream read continuously in a background thread."""

    def __init__(
        self,
        pyaudio_instance: pyaudio.PyAudio,
        stream,
        mime_type: str,
        sample_rate: int = 16000,
        chunk_size: int = 1024,
        channels: int = 1,
    ):
        super().__init__(mime_type, sample_rate=sample_rate, channels=channels)
        self.pyaudio_instance: Optional[pyaudio.PyAudio] = pyaudio_instance
        self.stream = stream
        self.chunk_size = chunk_size

        # Recording thread management
        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self._capturing = False

        self.total_chunks = 0
        self.peak_level = 0.0
        self.generation = 0
        self._publish: Optional[EventSink] = None

    @property
    def is_capturing(self) -> bool:
        return self._capturing

    def start(self, publish: EventSink, generation: int) -> None:
        """Start continuous capture in background thread."""
        if self._capturing:
            logger.warning("Capture already in progress")
            return
        if self.stream is None:
            raise DeviceError("Capture device has already been released")

        logger.info("Starting audio capture")
        self._publish = publish
        self.generation = generation
        self.stop_event.clear()
        self.total_chunks = 0
        self.peak_level = 0.0

        self.recording_thread = Thread(target=self._record_continuously, daemon=True)
        self.recording_thread.name = "StudioCaptureThread"
        self._capturing = True
        self.recording_thread.start()

    def stop(self) -> None:
        """Stop capture and wait for the last chunk to be published."""
        if self.recording_thread is None:
            return

        self.stop_event.set()
        if self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Capture thread did not stop cleanly")

        self.recording_thread = None
        self._capturing = False
        logger.info(f"Capture stopped. Total chunks: {self.total_chunks}")

    def release(self) -> None:
        """Close the stream and free PyAudio."""
        self.stop()
        if self.stream is not None:
            try:
                self.stream.stop_stream()
                self.stream.close()
            except OSError as e:
                logger.warning(f"Error closing audio stream: {e}")
            self.stream = None
        if self.pyaudio_instance is not None:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None
            logger.info("Audio device released")

    def __read_audio_chunk(self) -> bytes:
        audio_chunk = self.stream.read(self.chunk_size, exception_on_overflow=False)
        self.total_chunks += 1
        self.peak_level = _peak_level(audio_chunk)
        return audio_chunk

    def __publish_chunk(self, audio_chunk: bytes, final: bool) -> None:
        event = MediaChunkEvent(
            chunk_id=f"chunk_{self.total_chunks}",
            data=audio_chunk,
            timestamp=time.time(),
            sequence_number=self.total_chunks,
            generation=self.generation,
            sample_rate=self.sample_rate,
            channels=self.channels,
            final=final,
            level=self.peak_level,
        )
        self._publish(event)

    def _record_continuously(self) -> None:
        """Internal method: continuous capture loop in background thread."""
        try:
            while not self.stop_event.is_set():
                self.__publish_chunk(self.__read_audio_chunk(), final=False)
            # Flush one last chunk so consumers know capture is done
            self.__publish_chunk(self.__read_audio_chunk(), final=True)
        except OSError as e:
            logger.error(f"Audio capture failed: {e}")
            self._publish(CaptureErrorEvent(detail=f"Audio capture failed: {e}",
                                            generation=self.generation))
        finally:
            self._capturing = False


class PyAudioCaptureProvider(CaptureProvider):
    """Opens the default input device with PyAudio."""

    def __init__(self, sample_rate: int = 16000, chunk_size: int = 1024, channels: int = 1):
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels

    @staticmethod
    def is_type_supported(mime_type: str) -> bool:
        return base_mime_type(mime_type) in SUPPORTED_MIME_TYPES

    async def acquire(self, preferred_mime_types: List[str]) -> PyAudioCaptureDevice:
        mime_type = negotiate_mime_type(preferred_mime_types, self.is_type_supported)
        if not self.is_type_supported(mime_type):
            mime_type = SUPPORTED_MIME_TYPES[0]

        loop = asyncio.get_running_loop()
        pyaudio_instance, stream = await loop.run_in_executor(None, self._open_stream)
        return PyAudioCaptureDevice(
            pyaudio_instance,
            stream,
            mime_type=mime_type,
            sample_rate=self.sample_rate,
            chunk_size=self.chunk_size,
            channels=self.channels,
        )

    def _open_stream(self):
        pyaudio_instance = pyaudio.PyAudio()
        try:
            stream = pyaudio_instance.open(
                format=pyaudio.paInt16,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                frames_per_buffer=self.chunk_size,
                stream_callback=None,
            )
        except PermissionError as e:
            pyaudio_instance.terminate()
            raise PermissionDeniedError(f"Microphone access denied: {e}") from e
        except OSError as e:
            pyaudio_instance.terminate()
            if e.errno in _PERMISSION_ERRNOS:
                raise PermissionDeniedError(f"Microphone access denied: {e}") from e
            raise DeviceError(f"Could not open microphone: {e}") from e

        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk")
        return pyaudio_instance, stream


def _peak_level(audio_chunk: bytes) -> float:
    """Peak amplitude of a PCM16 chunk, scaled to 0.0-1.0."""
    if not audio_chunk:
        return 0.0
    samples = np.frombuffer(audio_chunk, dtype=np.int16)
    if samples.size == 0:
        return 0.0
    return float(np.max(np.abs(samples.astype(np.int32)))) / 32768.0
