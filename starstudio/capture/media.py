"""Codec negotiation and assembly of captured media."""

import io
import wave
import logging
from typing import Callable, Iterable, List, Sequence

from ..models.session import CapturedMedia

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "video/webm": "webm",
    "video/mp4": "mp4",
    "audio/webm": "weba",
    "audio/wav": "wav",
}


def negotiate_mime_type(preferences: Sequence[str], is_supported: Callable[[str], bool]) -> str:
    """Pick the first preferred container the device supports.

    Falls back to the first preference when the device reports support for none.
    """
    if not preferences:
        raise ValueError("At least one MIME type preference is required")

    for mime_type in preferences:
        if is_supported(mime_type):
            logger.debug(f"Negotiated recording format: {mime_type}")
            return mime_type

    logger.warning(f"No preferred format supported, falling back to {preferences[0]}")
    return preferences[0]


def base_mime_type(mime_type: str) -> str:
    """Strip codec parameters: 'video/webm;codecs=vp9' -> 'video/webm'."""
    return mime_type.split(";", 1)[0].strip().lower()


def file_extension_for(mime_type: str) -> str:
    return _EXTENSIONS.get(base_mime_type(mime_type), "bin")


def assemble_media(chunks: Iterable[bytes],
                   mime_type: str,
                   sample_rate: int = 16000,
                   channels: int = 1,
                   sample_width: int = 2) -> CapturedMedia:
    """Join captured chunks, in arrival order, into one immutable blob.

    Raw PCM captured as ``audio/wav`` is wrapped in a WAV container so the
    result plays back directly.
    """
    chunk_list: List[bytes] = [chunk for chunk in chunks if chunk]
    payload = b"".join(chunk_list)

    if base_mime_type(mime_type) == "audio/wav":
        buffer = io.BytesIO()
        with wave.open(buffer, 'wb') as wf:
            wf.setnchannels(channels)
            wf.setsampwidth(sample_width)
            wf.setframerate(sample_rate)
            wf.writeframes(payload)
        payload = buffer.getvalue()

    logger.debug(f"Assembled {len(chunk_list)} chunks into {len(payload)} bytes ({mime_type})")
    return CapturedMedia(data=payload, mime_type=mime_type, chunk_count=len(chunk_list))
