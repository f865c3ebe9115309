"""Pytest configuration and fixtures for STAR Studio tests."""

import asyncio
import time
import logging
import tempfile
from pathlib import Path
from typing import List, Optional
from unittest.mock import Mock, patch

import numpy as np
import pytest
import yaml

from starstudio.capture.base import CaptureDevice, CaptureProvider
from starstudio.models.events import MediaChunkEvent, TranscriptEvent, CaptureErrorEvent
from starstudio.models.records import Attempt, Draft, Question
from starstudio.transcription.base import TranscriptionListener, TranscriptionProvider


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests with no hardware or network")
    config.addinivalue_line("markers", "integration: tests wiring several components together")
    config.addinivalue_line("markers", "hardware: tests that need a real microphone")


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def sample_audio_chunk():
    """Generate a sample audio chunk for testing."""
    # Generate 1024 samples of 16-bit audio (sine wave)
    sample_rate = 16000
    duration = 1024 / sample_rate  # ~0.064 seconds
    freq = 440  # A4 note

    t = np.linspace(0, duration, 1024, False)
    wave_data = np.sin(2 * np.pi * freq * t)

    # Convert to 16-bit integers
    audio_data = (wave_data * 32767).astype(np.int16)
    return audio_data.tobytes()


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # Configure mock stream
        mock_stream.read.return_value = b'\x00' * 2048  # Silent audio
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        # Configure mock PyAudio instance
        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None

        # Configure mock PyAudio class
        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def config_file(temp_data_dir):
    """Write a minimal configuration file and return its path."""
    def write(data=None):
        settings = data if data is not None else {
            "supabase": {"url": "https://example.supabase.co", "key": "anon-key"},
            "openai": {"api_key": "sk-test", "model": "gpt-4o-mini"},
            "audio": {"sample_rate": 16000, "chunk_size": 1024, "channels": 1},
            "recording": {"tick_seconds": 1.0},
            "storage": {"data_directory": "data"},
        }
        path = Path(temp_data_dir) / "starstudio.yaml"
        with open(path, 'w') as f:
            yaml.safe_dump(settings, f)
        return str(path)

    return write


# ----------------------------------------------------------------------
# Test doubles for the recording controller's collaborators
# ----------------------------------------------------------------------

class ManualTicker:
    """Ticker driven by the test instead of the clock."""

    def __init__(self, callback, interval: float = 1.0):
        self.callback = callback
        self.interval = interval
        self.running = False
        self.start_count = 0

    @property
    def is_running(self) -> bool:
        return self.running

    def start(self):
        self.running = True
        self.start_count += 1

    def stop(self):
        self.running = False

    def tick(self, count: int = 1):
        for _ in range(count):
            if self.running:
                self.callback()


class FakeCaptureDevice(CaptureDevice):
    """Publishes chunks on demand from the calling thread."""

    def __init__(self, mime_type: str = "audio/wav", final_chunk: Optional[bytes] = None):
        super().__init__(mime_type)
        self.final_chunk = final_chunk
        self.publish = None
        self.generation = None
        self.sequence = 0
        self.capturing = False
        self.stopped = False
        self.released = False
        self.start_error: Optional[Exception] = None

    @property
    def is_capturing(self) -> bool:
        return self.capturing

    def start(self, publish, generation):
        if self.start_error is not None:
            raise self.start_error
        self.publish = publish
        self.generation = generation
        self.capturing = True

    def emit(self, data: bytes, generation: Optional[int] = None, level: Optional[float] = None):
        self.sequence += 1
        self.publish(MediaChunkEvent(
            chunk_id=f"chunk_{self.sequence}",
            data=data,
            timestamp=time.time(),
            sequence_number=self.sequence,
            generation=self.generation if generation is None else generation,
            level=level,
        ))

    def fail(self, detail: str = "Device unplugged"):
        self.capturing = False
        self.publish(CaptureErrorEvent(detail=detail, generation=self.generation))

    def stop(self):
        if self.capturing and self.final_chunk is not None:
            self.emit(self.final_chunk)
        self.capturing = False
        self.stopped = True

    def release(self):
        self.stop()
        self.released = True


class FakeCaptureProvider(CaptureProvider):
    """Hands out a fresh FakeCaptureDevice per acquire, or fails as configured."""

    def __init__(self, error: Optional[Exception] = None, final_chunk: Optional[bytes] = None):
        self.error = error
        self.final_chunk = final_chunk
        self.gate: Optional[asyncio.Event] = None
        self.devices: List[FakeCaptureDevice] = []
        self.requested_mime_types = []

    @property
    def device(self) -> FakeCaptureDevice:
        return self.devices[-1]

    async def acquire(self, preferred_mime_types):
        self.requested_mime_types.append(list(preferred_mime_types))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        device = FakeCaptureDevice(final_chunk=self.final_chunk)
        self.devices.append(device)
        return device


class FakeListener(TranscriptionListener):
    def __init__(self, publish, generation):
        self.publish = publish
        self.generation = generation
        self.listening = False
        self.stopped = False

    @property
    def is_listening(self) -> bool:
        return self.listening

    def start(self):
        self.listening = True

    def stop(self):
        self.listening = False
        self.stopped = True

    def interim(self, text: str):
        self.publish(TranscriptEvent(text=text, is_final=False, generation=self.generation))

    def final(self, text: str, generation: Optional[int] = None):
        self.publish(TranscriptEvent(
            text=text,
            is_final=True,
            generation=self.generation if generation is None else generation,
        ))


class FakeTranscriptionProvider(TranscriptionProvider):
    def __init__(self, available: bool = True, error: Optional[Exception] = None):
        self.available = available
        self.error = error
        self.listeners: List[FakeListener] = []

    @property
    def is_available(self) -> bool:
        return self.available

    @property
    def listener(self) -> FakeListener:
        return self.listeners[-1]

    def create_listener(self, media_topic, publish, generation):
        if self.error is not None:
            raise self.error
        if not self.available:
            return None
        listener = FakeListener(publish, generation)
        self.listeners.append(listener)
        return listener


class FakePersistence:
    """In-memory stand-in for SupabasePersistence."""

    def __init__(self):
        self.fail_with: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None
        self.created: List[dict] = []
        self.attempts = {}
        self.questions = {}
        self.drafts = {}
        self.feedback_updates: List[dict] = []

    async def create_attempt(self, user_id, question_id, draft_id, duration, transcript):
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        call = {
            "user_id": user_id,
            "question_id": question_id,
            "draft_id": draft_id,
            "duration": duration,
            "transcript": transcript,
        }
        self.created.append(call)
        attempt = Attempt(id=f"attempt-{len(self.created)}", feedback=None, **call)
        self.attempts[attempt.id] = attempt
        return attempt

    async def get_attempt(self, attempt_id, user_id=None):
        attempt = self.attempts.get(attempt_id)
        if attempt is None or (user_id and attempt.user_id != user_id):
            return None
        return attempt

    async def update_attempt_feedback(self, attempt_id, user_id, transcript, feedback):
        self.feedback_updates.append({
            "attempt_id": attempt_id,
            "user_id": user_id,
            "transcript": transcript,
            "feedback": feedback,
        })
        self.attempts[attempt_id].feedback = feedback
        return self.attempts[attempt_id]

    async def get_question(self, question_id):
        return self.questions.get(question_id)

    async def get_draft(self, user_id, question_id):
        return self.drafts.get((user_id, question_id))


@pytest.fixture
def tickers():
    """ManualTicker instances created by controllers, in creation order."""
    created = []

    def factory(callback):
        ticker = ManualTicker(callback)
        created.append(ticker)
        return ticker

    factory.created = created
    return factory


@pytest.fixture
def capture_provider():
    return FakeCaptureProvider()


@pytest.fixture
def transcription_provider():
    return FakeTranscriptionProvider()


@pytest.fixture
def persistence():
    return FakePersistence()


@pytest.fixture
def sample_question():
    return Question(id="q-1", title="Tell me about a time you resolved a conflict",
                    category="Teamwork", difficulty="medium")


@pytest.fixture
def sample_draft():
    return Draft(id="draft-1", user_id="user-1", question_id="q-1",
                 situation="Two teammates disagreed on the API design",
                 task="Get the release unblocked",
                 action="Ran a design review with both of them",
                 result=None)
