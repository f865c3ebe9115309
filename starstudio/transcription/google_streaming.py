"""Google Speech-to-Text streaming listener."""

import queue
import logging
import threading
from typing import Optional, Iterator

from pubsub import pub
from google.cloud import speech
from google.api_core import exceptions as gax_exceptions
from google.oauth2 import service_account

from .base import TranscriptionListener, TranscriptionProvider, TranscriptSink
from ..models.events import MediaChunkEvent, TranscriptEvent

logger = logging.getLogger(__name__)


class GoogleStreamingListener(TranscriptionListener):
    """Feeds a recording's PCM chunks to streaming_recognize in a worker thread.

    Chunks arrive on the session's media topic; interim and final results are
    handed to ``publish`` as TranscriptEvents.
    """

    def __init__(self,
                 client: speech.SpeechClient,
                 streaming_config: speech.StreamingRecognitionConfig,
                 media_topic: str,
                 publish: TranscriptSink,
                 generation: int):
        self.client = client
        self.streaming_config = streaming_config
        self.media_topic = media_topic
        self.publish = publish
        self.generation = generation

        self.audio_queue: "queue.Queue[Optional[bytes]]" = queue.Queue()
        self.worker_thread: Optional[threading.Thread] = None
        self._subscribed = False
        self._listening = False

    @property
    def is_listening(self) -> bool:
        return self._listening

    def start(self) -> None:
        if self.worker_thread is not None:
            return

        pub.subscribe(self._on_media_event, self.media_topic)
        self._subscribed = True
        self._listening = True
        self.worker_thread = threading.Thread(target=self._listen, daemon=True)
        self.worker_thread.name = f"StudioTranscriptionThread_{self.generation}"
        self.worker_thread.start()
        logger.info("Google streaming recognition started")

    def stop(self) -> None:
        if self._subscribed:
            pub.unsubscribe(self._on_media_event, self.media_topic)
            self._subscribed = False

        if self.worker_thread is None:
            return

        # End of request stream; lets the API flush its last final result
        self.audio_queue.put(None)
        if self.worker_thread.is_alive():
            self.worker_thread.join(timeout=1.0)
            if self.worker_thread.is_alive():
                logger.warning("Transcription thread still draining after stop")
        self.worker_thread = None
        self._listening = False
        logger.info("Google streaming recognition stopped")

    def _on_media_event(self, event) -> None:
        if isinstance(event, MediaChunkEvent) and event.generation == self.generation and event.data:
            self.audio_queue.put(event.data)

    def _requests(self) -> Iterator[speech.StreamingRecognizeRequest]:
        while True:
            chunk = self.audio_queue.get()
            if chunk is None:
                return
            yield speech.StreamingRecognizeRequest(audio_content=chunk)

    def _listen(self) -> None:
        try:
            responses = self.client.streaming_recognize(
                config=self.streaming_config,
                requests=self._requests(),
            )
            for response in responses:
                self._handle_response(response)
        except gax_exceptions.GoogleAPICallError as e:
            # Recording goes on without transcript; submission falls back to the sentinel
            logger.error(f"Google streaming recognition failed: {e}")
        finally:
            self._listening = False

    def _handle_response(self, response) -> None:
        for result in response.results:
            if not result.alternatives:
                continue
            alternative = result.alternatives[0]
            event = TranscriptEvent(
                text=alternative.transcript,
                is_final=result.is_final,
                generation=self.generation,
                confidence=alternative.confidence if result.is_final else None,
            )
            logger.debug(f"{'FINAL' if event.is_final else 'interim'}: '{event.text}'")
            self.publish(event)


class GoogleStreamingTranscriptionProvider(TranscriptionProvider):
    """Google Speech-to-Text streaming recognition."""

    def __init__(self,
                 credentials_path: str,
                 sample_rate: int = 16000,
                 language: str = "en-US",
                 enable_automatic_punctuation: bool = True):
        """Initialize Google streaming provider.

        Args:
            credentials_path: Path to Google Cloud service account JSON file
            sample_rate: Sample rate of the PCM16 audio on the media topic
            language: Language code (e.g., 'en-US')
            enable_automatic_punctuation: Enable automatic punctuation
        """
        if not credentials_path:
            raise ValueError("Google credentials path is required")
        self.credentials_path = credentials_path
        self.language = language
        self.client: Optional[speech.SpeechClient] = None
        self.project_id = None
        self.streaming_config = speech.StreamingRecognitionConfig(
            config=speech.RecognitionConfig(
                encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
                sample_rate_hertz=sample_rate,
                language_code=language,
                enable_automatic_punctuation=enable_automatic_punctuation,
            ),
            interim_results=True,
        )

    def initialize(self) -> None:
        """Load credentials and build the Speech client."""
        logger.info(f"Loading Google credentials from: {self.credentials_path}")
        credentials = service_account.Credentials.from_service_account_file(self.credentials_path)
        self.client = speech.SpeechClient(credentials=credentials)
        self.project_id = credentials.project_id
        logger.info(f"Google Speech streaming ready (project {self.project_id})")

    def create_listener(self, media_topic: str, publish: TranscriptSink,
                        generation: int) -> Optional[TranscriptionListener]:
        if self.client is None:
            self.initialize()
        return GoogleStreamingListener(
            client=self.client,
            streaming_config=self.streaming_config,
            media_topic=media_topic,
            publish=publish,
            generation=generation,
        )
