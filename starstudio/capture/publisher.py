"""Media publisher module for pub/sub event publishing."""

import logging
from typing import Any
from pubsub import pub

logger = logging.getLogger(__name__)


class MediaPublisher:
    """Publishes capture events using pubsub.pub on a session's media topic."""

    def __init__(self, topic: str):
        """Initialize media publisher.

        Args:
            topic: Pub/sub topic name for media events
        """
        self.topic = topic
        logger.info(f"MediaPublisher initialized with topic: {topic}")

    def publish(self, event: Any) -> None:
        """Publish a MediaChunkEvent or CaptureErrorEvent to the topic."""
        pub.sendMessage(self.topic, event=event)
