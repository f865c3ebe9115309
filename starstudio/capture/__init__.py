"""Camera/microphone capture module."""

from .base import CaptureDevice, CaptureProvider, UnavailableCaptureProvider
from .media import negotiate_mime_type, assemble_media, file_extension_for
from .publisher import MediaPublisher

__all__ = [
    'CaptureDevice',
    'CaptureProvider',
    'UnavailableCaptureProvider',
    'negotiate_mime_type',
    'assemble_media',
    'file_extension_for',
    'MediaPublisher',
]
