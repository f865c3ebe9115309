"""Recording session lifecycle."""

from .controller import RecordingSessionController, NO_TRANSCRIPT
from .channels import EventInbox, session_topics
from .ticker import IntervalTicker

__all__ = [
    "RecordingSessionController",
    "NO_TRANSCRIPT",
    "EventInbox",
    "session_topics",
    "IntervalTicker",
]
