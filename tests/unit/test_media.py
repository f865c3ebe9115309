"""Unit tests for codec negotiation and media assembly."""

import io
import wave

import pytest

from starstudio.capture.media import (
    negotiate_mime_type,
    base_mime_type,
    file_extension_for,
    assemble_media,
)
from starstudio.config import DEFAULT_MIME_TYPES


@pytest.mark.unit
class TestNegotiateMimeType:

    def test_first_supported_preference_wins(self):
        supported = {"video/webm", "video/mp4"}

        chosen = negotiate_mime_type(DEFAULT_MIME_TYPES, lambda m: m in supported)

        assert chosen == "video/webm"

    def test_codec_variant_preferred_when_supported(self):
        chosen = negotiate_mime_type(DEFAULT_MIME_TYPES, lambda m: True)
        assert chosen == "video/webm;codecs=vp9"

    def test_falls_back_to_first_preference(self):
        chosen = negotiate_mime_type(["video/webm", "video/mp4"], lambda m: False)
        assert chosen == "video/webm"

    def test_empty_preferences_rejected(self):
        with pytest.raises(ValueError):
            negotiate_mime_type([], lambda m: True)


@pytest.mark.unit
class TestMimeHelpers:

    @pytest.mark.parametrize("mime_type,expected", [
        ("video/webm;codecs=vp9", "video/webm"),
        ("Video/MP4", "video/mp4"),
        ("audio/wav", "audio/wav"),
    ])
    def test_base_mime_type(self, mime_type, expected):
        assert base_mime_type(mime_type) == expected

    @pytest.mark.parametrize("mime_type,extension", [
        ("video/webm;codecs=vp9", "webm"),
        ("video/mp4", "mp4"),
        ("audio/wav", "wav"),
        ("application/x-unknown", "bin"),
    ])
    def test_file_extension_for(self, mime_type, extension):
        assert file_extension_for(mime_type) == extension


@pytest.mark.unit
class TestAssembleMedia:

    def test_container_chunks_concatenated_in_order(self):
        chunks = [b"header", b"cluster-1", b"cluster-2"]

        media = assemble_media(chunks, "video/webm")

        assert media.data == b"headercluster-1cluster-2"
        assert media.mime_type == "video/webm"
        assert media.chunk_count == 3
        assert media.size_bytes == len(media.data)

    def test_empty_chunks_ignored(self):
        media = assemble_media([b"", b"a", b"", b"b"], "video/mp4")

        assert media.data == b"ab"
        assert media.chunk_count == 2

    def test_pcm_wrapped_in_wav(self, sample_audio_chunk):
        media = assemble_media([sample_audio_chunk, sample_audio_chunk], "audio/wav",
                               sample_rate=16000, channels=1)

        with wave.open(io.BytesIO(media.data), 'rb') as wf:
            assert wf.getnchannels() == 1
            assert wf.getsampwidth() == 2
            assert wf.getframerate() == 16000
            assert wf.readframes(wf.getnframes()) == sample_audio_chunk * 2

    def test_no_chunks_gives_empty_recording(self):
        media = assemble_media([], "video/webm")

        assert media.data == b""
        assert media.chunk_count == 0
