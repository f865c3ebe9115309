"""Data models for the STAR Studio application."""

from .session import SessionState, CapturedMedia, SessionInfo
from .events import MediaChunkEvent, TranscriptEvent, CaptureErrorEvent
from .records import Question, Draft, Attempt
from .feedback import StarFeedback, Feedback, FeedbackResult, FALLBACK_FEEDBACK
from .ui import RecordingStatus

__all__ = [
    "SessionState",
    "CapturedMedia",
    "SessionInfo",
    "MediaChunkEvent",
    "TranscriptEvent",
    "CaptureErrorEvent",
    "Question",
    "Draft",
    "Attempt",
    "StarFeedback",
    "Feedback",
    "FeedbackResult",
    "FALLBACK_FEEDBACK",
    "RecordingStatus",
]
