"""Recording session controller: the record/stop/re-record/submit state machine."""

import asyncio
import uuid
import logging
from typing import Callable, List, Optional

from pubsub import pub

from .channels import EventInbox, session_topics
from .ticker import IntervalTicker
from ..capture.base import CaptureDevice, CaptureProvider
from ..capture.media import assemble_media
from ..capture.publisher import MediaPublisher
from ..config import DEFAULT_MIME_TYPES
from ..exceptions import (
    StudioError,
    InvalidStateError,
    DeviceError,
    PersistenceError,
    SubmissionFailedError,
)
from ..models.events import MediaChunkEvent, TranscriptEvent, CaptureErrorEvent
from ..models.records import Attempt, Draft
from ..models.session import SessionState, CapturedMedia
from ..models.ui import RecordingStatus
from ..storage.media_store import MediaStore
from ..transcription.base import TranscriptionListener, TranscriptionProvider
from ..transcription.publisher import TranscriptPublisher

logger = logging.getLogger(__name__)

# Persisted instead of an empty transcript
NO_TRANSCRIPT = "No transcript available"


class RecordingSessionController:
    """Owns one recording screen's devices, buffers and lifecycle.

    Capture chunks and recognition results are published from worker
    threads onto the session's pub/sub topics. The controller only enqueues
    them and wakes its event loop; every state change happens on that loop.
    The elapsed-seconds counter, advanced by the ticker, is the single source
    for both the displayed timer and the persisted duration.
    """

    def __init__(self,
                 capture_provider: CaptureProvider,
                 transcription_provider: TranscriptionProvider,
                 persistence,
                 user_id: str,
                 question_id: str,
                 draft: Optional[Draft] = None,
                 media_store: Optional[MediaStore] = None,
                 mime_types: Optional[List[str]] = None,
                 ticker_factory: Callable[[Callable[[], None]], IntervalTicker] = IntervalTicker,
                 on_error: Optional[Callable[[StudioError], None]] = None,
                 session_id: Optional[str] = None):
        """Initialize a recording session for one question.

        Args:
            capture_provider: Grants camera/microphone access
            transcription_provider: Creates speech listeners (may be unavailable)
            persistence: Object with an async ``create_attempt`` (SupabasePersistence)
            user_id: Signed-in user
            question_id: Question being answered
            draft: The user's STAR draft for the question, if any
            media_store: Where stopped recordings are saved for playback
            mime_types: Ordered container preferences, first supported wins
            ticker_factory: Builds the 1-second clock from a tick callback
            on_error: Receives failures that happen outside any call (device lost)
            session_id: Explicit session identifier; generated when omitted
        """
        self.capture_provider = capture_provider
        self.transcription_provider = transcription_provider
        self.persistence = persistence
        self.user_id = user_id
        self.question_id = question_id
        self.draft = draft
        self.media_store = media_store
        self.mime_types = list(mime_types or DEFAULT_MIME_TYPES)
        self.on_error = on_error

        if session_id is None:
            session_id = media_store.create_session_directory() if media_store else uuid.uuid4().hex[:12]
        self.session_id = session_id

        # Channels
        self.media_topic, self.transcript_topic = session_topics(session_id)
        self.media_publisher = MediaPublisher(self.media_topic)
        self.transcript_publisher = TranscriptPublisher(self.transcript_topic)
        self._inbox = EventInbox(on_put=self._wake)
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        pub.subscribe(self._on_channel_event, self.media_topic)
        pub.subscribe(self._on_channel_event, self.transcript_topic)

        # Session state
        self._state = SessionState.IDLE
        self._generation = 0
        self._elapsed_seconds = 0
        self._transcript_buffer: List[str] = []
        self._media_chunks: List[bytes] = []
        self._interim_text = ""
        self._input_level = 0.0
        self._captured_media: Optional[CapturedMedia] = None
        self._playback_path: Optional[str] = None
        self.last_error: Optional[str] = None
        self.submitted_attempt: Optional[Attempt] = None

        # Resources held only while recording
        self._device: Optional[CaptureDevice] = None
        self._listener: Optional[TranscriptionListener] = None
        self._ticker = ticker_factory(self._on_tick)
        self._stopping = False
        self._closed = False

        logger.info(f"Recording session {session_id} opened for question {question_id}")

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def elapsed_seconds(self) -> int:
        return self._elapsed_seconds

    @property
    def transcript(self) -> str:
        """Final segments so far, each followed by a single space."""
        return "".join(self._transcript_buffer)

    @property
    def media_chunks(self) -> List[bytes]:
        return list(self._media_chunks)

    @property
    def captured_media(self) -> Optional[CapturedMedia]:
        return self._captured_media

    @property
    def playback_path(self) -> Optional[str]:
        return self._playback_path

    @property
    def is_closed(self) -> bool:
        return self._closed

    def status(self) -> RecordingStatus:
        return RecordingStatus(
            session_id=self.session_id,
            state=self._state,
            elapsed_seconds=self._elapsed_seconds,
            transcript=self.transcript,
            interim_text=self._interim_text,
            chunk_count=len(self._media_chunks),
            input_level=self._input_level,
            has_media=self._captured_media is not None,
            playback_path=self._playback_path,
            transcription_available=self.transcription_provider.is_available,
            last_error=self.last_error,
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Acquire devices and begin a new recording, discarding any previous take.

        Raises:
            InvalidStateError: Not in Idle or Stopped (including overlapping starts)
            PermissionDeniedError: Camera/microphone access refused
            DeviceError: Acquisition or device start failed
        """
        if self._closed:
            raise InvalidStateError("start", "closed")
        if self._state not in (SessionState.IDLE, SessionState.STOPPED):
            raise InvalidStateError("start", self._state.value)

        self._loop = asyncio.get_running_loop()
        previous_state = self._state
        self._state = SessionState.ACQUIRING
        logger.info(f"Acquiring capture device (session {self.session_id})")

        try:
            device = await self.capture_provider.acquire(self.mime_types)
        except StudioError as e:
            self._state = previous_state
            self.last_error = e.detail
            logger.warning(f"Capture acquisition failed: {e.detail}")
            raise
        except OSError as e:
            self._state = previous_state
            self.last_error = str(e)
            logger.warning(f"Capture acquisition failed: {e}")
            raise DeviceError(f"Could not access camera/microphone: {e}") from e
        except asyncio.CancelledError:
            self._state = previous_state
            raise

        if self._closed:
            # Screen was left while the permission prompt was open
            device.release()
            return

        self._generation += 1
        try:
            device.start(self.media_publisher.publish, self._generation)
        except (StudioError, OSError) as e:
            device.release()
            self._state = previous_state
            self.last_error = str(e)
            logger.warning(f"Capture device failed to start: {e}")
            raise DeviceError(f"Capture device failed to start: {e}") from e

        self._device = device
        self._media_chunks.clear()
        self._transcript_buffer.clear()
        self._interim_text = ""
        self._input_level = 0.0
        self._elapsed_seconds = 0
        self._captured_media = None
        self._playback_path = None
        self.last_error = None
        self._state = SessionState.RECORDING

        self._listener = self._start_listener()
        self._ticker.start()
        logger.info(f"Recording started (session {self.session_id}, take {self._generation}, "
                    f"format {device.mime_type})")

    def stop(self) -> None:
        """Halt capture, transcription and timing, then assemble the recording.

        A no-op unless recording.
        """
        if self._state is not SessionState.RECORDING or self._stopping:
            logger.debug(f"stop() ignored in state {self._state.value}")
            return

        self._stopping = True
        try:
            self._ticker.stop()
            device = self._device
            self._release_sources()
            # Everything published before the sources stopped belongs to this take
            self.process_pending()

            self._state = SessionState.STOPPED
            self._interim_text = ""
            self._input_level = 0.0
            self._captured_media = assemble_media(
                self._media_chunks,
                device.mime_type,
                sample_rate=device.sample_rate,
                channels=device.channels,
            )
        finally:
            self._stopping = False

        logger.info(f"Recording stopped after {self._elapsed_seconds}s: "
                    f"{self._captured_media.chunk_count} chunks, "
                    f"{len(self._transcript_buffer)} final segments")
        self._save_for_playback()

    async def submit(self) -> Attempt:
        """Create the Attempt record for the stopped recording and close the session.

        Raises:
            InvalidStateError: Not Stopped, or nothing has been recorded
            SubmissionFailedError: The database write failed; the session is
                back in Stopped and submit() may be retried
        """
        if self._state is not SessionState.STOPPED or self._captured_media is None:
            raise InvalidStateError("submit", "closed" if self._closed else self._state.value)

        self._state = SessionState.SUBMITTING
        transcript = self.transcript.strip() or NO_TRANSCRIPT

        attempt = None
        try:
            attempt = await self.persistence.create_attempt(
                user_id=self.user_id,
                question_id=self.question_id,
                draft_id=self.draft.id if self.draft else None,
                duration=self._elapsed_seconds,
                transcript=transcript,
            )
        except PersistenceError as e:
            self._submission_failed(e.detail, e)
        except (asyncio.TimeoutError, OSError, ValueError) as e:
            self._submission_failed(str(e) or type(e).__name__, e)
        finally:
            # Closed while waiting: the screen is gone, stay Idle
            if attempt is None and not self._closed:
                self._state = SessionState.STOPPED

        self.submitted_attempt = attempt
        logger.info(f"Submitted attempt {attempt.id} (session {self.session_id})")
        self.close()
        return attempt

    def _submission_failed(self, detail: str, cause: Exception) -> None:
        self.last_error = detail
        logger.error(f"Submission failed (session {self.session_id}): {detail}")
        raise SubmissionFailedError(f"Failed to submit recording: {detail}") from cause

    def close(self) -> None:
        """Release every resource; the session cannot be used afterwards."""
        if self._closed:
            return

        self._ticker.stop()
        self._release_sources()
        self._closed = True
        self._state = SessionState.IDLE

        pub.unsubscribe(self._on_channel_event, self.media_topic)
        pub.unsubscribe(self._on_channel_event, self.transcript_topic)
        logger.info(f"Recording session {self.session_id} closed")

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------

    def process_pending(self) -> None:
        """Apply queued channel events in arrival order."""
        while True:
            event = self._inbox.pop()
            if event is None:
                return
            self._handle_event(event)

    def _on_channel_event(self, event) -> None:
        """pub/sub listener; may run on any thread."""
        self._inbox.put(event)

    def _wake(self) -> None:
        loop = self._loop
        if loop is not None and not loop.is_closed():
            loop.call_soon_threadsafe(self.process_pending)

    def _handle_event(self, event) -> None:
        if event.generation != self._generation or self._state is not SessionState.RECORDING:
            logger.debug(f"Dropping stale {type(event).__name__} from take {event.generation}")
            return

        if isinstance(event, MediaChunkEvent):
            if event.data:
                self._media_chunks.append(event.data)
            if event.level is not None:
                self._input_level = event.level
        elif isinstance(event, TranscriptEvent):
            self._on_transcript(event)
        elif isinstance(event, CaptureErrorEvent):
            if self._stopping:
                # The user already asked to stop; the take is kept as is
                logger.warning(f"Capture error while stopping: {event.detail}")
                return
            error = DeviceError(event.detail)
            self.last_error = error.detail
            logger.error(f"Capture lost during recording: {event.detail}")
            self.stop()
            if self.on_error is not None:
                self.on_error(error)

    def _on_transcript(self, event: TranscriptEvent) -> None:
        if not event.is_final:
            self._interim_text = event.text
            return
        self._interim_text = ""
        text = event.text.strip()
        if text:
            self._transcript_buffer.append(text + " ")

    def _on_tick(self) -> None:
        if self._state is not SessionState.RECORDING:
            return
        self._elapsed_seconds += 1

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    def _start_listener(self) -> Optional[TranscriptionListener]:
        try:
            listener = self.transcription_provider.create_listener(
                self.media_topic,
                self.transcript_publisher.publish,
                self._generation,
            )
            if listener is not None:
                listener.start()
            return listener
        except Exception as e:
            # Recording goes on without transcript; submission falls back to the sentinel
            logger.warning(f"Transcription unavailable for this take: {e}", exc_info=True)
            return None

    def _release_sources(self) -> None:
        """Stop device and listener. Either may already have stopped on its own."""
        device, self._device = self._device, None
        listener, self._listener = self._listener, None

        if device is not None:
            try:
                device.stop()
            except (StudioError, OSError) as e:
                logger.warning(f"Error stopping capture device: {e}")
        if listener is not None:
            try:
                listener.stop()
            except (StudioError, OSError, RuntimeError) as e:
                logger.warning(f"Error stopping transcription listener: {e}")
        if device is not None:
            try:
                device.release()
            except (StudioError, OSError) as e:
                logger.warning(f"Error releasing capture device: {e}")

    def _save_for_playback(self) -> None:
        if self.media_store is None:
            return
        try:
            self._playback_path = self.media_store.save_recording(
                self.session_id,
                self.question_id,
                self._captured_media,
                self._elapsed_seconds,
            )
        except OSError as e:
            logger.error(f"Could not save recording for playback: {e}")
