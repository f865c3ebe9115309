"""Transcript publisher module for pub/sub event publishing."""

import logging
from pubsub import pub
from ..models.events import TranscriptEvent

logger = logging.getLogger(__name__)


class TranscriptPublisher:
    """Publishes recognition results using pubsub.pub on a session's transcript topic."""

    def __init__(self, topic: str):
        """Initialize transcript publisher.

        Args:
            topic: Pub/sub topic name for transcript events
        """
        self.topic = topic
        logger.info(f"TranscriptPublisher initialized with topic: {topic}")

    def publish(self, event: TranscriptEvent) -> None:
        """Publish a recognition result to the pub/sub topic."""
        pub.sendMessage(self.topic, event=event)
        logger.debug(f"Published {'final' if event.is_final else 'interim'} transcript: {event.text[:40]!r}")
