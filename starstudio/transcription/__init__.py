"""Speech transcription module for STAR Studio."""

from .base import TranscriptionListener, TranscriptionProvider, UnavailableTranscriptionProvider
from .publisher import TranscriptPublisher

__all__ = [
    "TranscriptionListener",
    "TranscriptionProvider",
    "UnavailableTranscriptionProvider",
    "TranscriptPublisher",
]
