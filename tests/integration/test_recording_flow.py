"""Integration tests for the complete record / re-record / submit workflow."""

import io
import time
import wave
import asyncio
import threading
from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from starstudio.capture.pyaudio_device import PyAudioCaptureProvider
from starstudio.models.session import SessionState
from starstudio.session.controller import RecordingSessionController
from starstudio.session.ticker import IntervalTicker
from starstudio.storage.media_store import MediaStore
from starstudio.transcription.google_streaming import GoogleStreamingTranscriptionProvider


def paced_reads(mock_pyaudio, chunk):
    def read(size, exception_on_overflow=False):
        time.sleep(0.005)
        return chunk

    mock_pyaudio['stream'].read.side_effect = read


def fast_ticker(callback):
    return IntervalTicker(callback, interval=0.02)


@pytest.mark.integration
class TestRecordingFlowIntegration:
    """Real capture threads, pub/sub channels and ticker; fake database."""

    @pytest.mark.asyncio
    async def test_complete_recording_workflow(self, temp_data_dir, mock_pyaudio, sample_audio_chunk,
                                               transcription_provider, persistence):
        paced_reads(mock_pyaudio, sample_audio_chunk)
        store = MediaStore(temp_data_dir)
        controller = RecordingSessionController(
            capture_provider=PyAudioCaptureProvider(),
            transcription_provider=transcription_provider,
            persistence=persistence,
            user_id="user-1",
            question_id="q-1",
            media_store=store,
            ticker_factory=fast_ticker,
        )

        await controller.start()
        listener = transcription_provider.listener

        # Recognition results arrive from a worker thread
        worker = threading.Thread(target=lambda: (listener.final("Hello "), listener.final("world ")))
        worker.start()
        worker.join()
        await asyncio.sleep(0.15)

        controller.stop()
        elapsed = controller.elapsed_seconds
        media = controller.captured_media

        assert controller.state is SessionState.STOPPED
        assert elapsed >= 3
        assert controller.transcript == "Hello world "
        assert media.chunk_count > 0
        with wave.open(io.BytesIO(media.data), 'rb') as wf:
            frames = wf.readframes(wf.getnframes())
        assert frames == sample_audio_chunk * media.chunk_count

        # Timer is frozen once stopped
        await asyncio.sleep(0.06)
        assert controller.elapsed_seconds == elapsed

        attempt = await controller.submit()

        assert attempt.duration == elapsed
        assert attempt.transcript == "Hello world"
        assert controller.is_closed
        assert mock_pyaudio['instance'].terminate.called
        assert store.load_session_info(controller.session_id).chunk_count == media.chunk_count

    @pytest.mark.asyncio
    async def test_re_record_replaces_first_take(self, temp_data_dir, mock_pyaudio,
                                                 transcription_provider, persistence):
        first_take = b'\x01\x00' * 512
        second_take = b'\x02\x00' * 512
        store = MediaStore(temp_data_dir)
        controller = RecordingSessionController(
            capture_provider=PyAudioCaptureProvider(),
            transcription_provider=transcription_provider,
            persistence=persistence,
            user_id="user-1",
            question_id="q-1",
            media_store=store,
            ticker_factory=fast_ticker,
        )

        paced_reads(mock_pyaudio, first_take)
        await controller.start()
        transcription_provider.listener.final("first attempt")
        await asyncio.sleep(0.1)
        controller.stop()

        paced_reads(mock_pyaudio, second_take)
        await controller.start()
        transcription_provider.listener.final("second attempt")
        await asyncio.sleep(0.05)
        controller.stop()

        with wave.open(io.BytesIO(controller.captured_media.data), 'rb') as wf:
            frames = wf.readframes(wf.getnframes())
        assert first_take not in frames
        assert frames == second_take * controller.captured_media.chunk_count
        assert controller.transcript == "second attempt "

        with open(controller.playback_path, 'rb') as f:
            assert f.read() == controller.captured_media.data

        attempt = await controller.submit()
        assert attempt.transcript == "second attempt"
        assert attempt.duration == controller.elapsed_seconds

    @pytest.mark.asyncio
    async def test_streaming_recognition_flushed_before_stop_completes(self, mock_pyaudio,
                                                                       sample_audio_chunk, persistence):
        paced_reads(mock_pyaudio, sample_audio_chunk)
        streamed = []

        def streaming_recognize(config, requests):
            for request in requests:
                streamed.append(request.audio_content)
            # The last final result only comes back once the request stream ends
            return [SimpleNamespace(results=[SimpleNamespace(
                is_final=True,
                alternatives=[SimpleNamespace(transcript="I rebuilt the deploy pipeline.", confidence=0.93)],
            )])]

        provider = GoogleStreamingTranscriptionProvider("unused.json")
        provider.client = Mock()
        provider.client.streaming_recognize.side_effect = streaming_recognize

        controller = RecordingSessionController(
            capture_provider=PyAudioCaptureProvider(),
            transcription_provider=provider,
            persistence=persistence,
            user_id="user-1",
            question_id="q-1",
            ticker_factory=fast_ticker,
        )

        await controller.start()
        await asyncio.sleep(0.1)
        controller.stop()

        assert controller.transcript == "I rebuilt the deploy pipeline. "
        assert 0 < len(streamed) <= controller.captured_media.chunk_count

        attempt = await controller.submit()
        assert attempt.transcript == "I rebuilt the deploy pipeline."
