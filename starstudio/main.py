"""Main application entry point for STAR Studio."""

import sys
import asyncio
import argparse
import logging
from pathlib import Path
from typing import Optional

from .config import StarStudioConfig
from .capture.base import CaptureProvider, UnavailableCaptureProvider
from .exceptions import StudioError
from .feedback import FeedbackGenerator, OpenAIChatEngine, ReviewService
from .session import RecordingSessionController, IntervalTicker
from .storage import MediaStore, SupabasePersistence
from .transcription.base import TranscriptionProvider, UnavailableTranscriptionProvider
from .ui import StudioScreen, print_review

logger = logging.getLogger(__name__)


def setup_logging(config: StarStudioConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/starstudio.log')
    console_output = config.get('logging.console_output', True)

    Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    ))
    handlers.append(file_handler)

    # Console handler - warnings only, the screens own stdout
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("STAR Studio starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def build_capture_provider(config: StarStudioConfig) -> CaptureProvider:
    if not config.get('audio.enabled', True):
        return UnavailableCaptureProvider("Audio capture disabled in configuration")

    from .capture.pyaudio_device import PyAudioCaptureProvider
    return PyAudioCaptureProvider(
        sample_rate=config.get('audio.sample_rate', 16000),
        chunk_size=config.get('audio.chunk_size', 1024),
        channels=config.get('audio.channels', 1),
    )


def build_transcription_provider(config: StarStudioConfig) -> TranscriptionProvider:
    if not config.get('transcription.enabled', True):
        return UnavailableTranscriptionProvider("Transcription disabled in configuration")

    credentials_path = config.get_google_credentials_path()
    if not credentials_path:
        return UnavailableTranscriptionProvider("Google credentials not configured")

    from .transcription.google_streaming import GoogleStreamingTranscriptionProvider
    return GoogleStreamingTranscriptionProvider(
        credentials_path=credentials_path,
        sample_rate=config.get('audio.sample_rate', 16000),
        language=config.get('google_cloud.language', 'en-US'),
        enable_automatic_punctuation=config.get('google_cloud.enable_automatic_punctuation', True),
    )


def build_review_service(config: StarStudioConfig, persistence: SupabasePersistence) -> ReviewService:
    engine = OpenAIChatEngine(
        api_key=config.require('openai.api_key'),
        model=config.get('openai.model', 'gpt-4o-mini'),
    )
    return ReviewService(persistence, FeedbackGenerator(engine, persistence))


async def run_record(config: StarStudioConfig, user_id: str, question_id: str) -> Optional[str]:
    """Open the recording screen for one question. Returns the new attempt id."""
    persistence = SupabasePersistence.from_config(config)
    question = await persistence.get_question(question_id)
    if question is None:
        raise StudioError(f"Question not found: {question_id}", code="NOT_FOUND")
    draft = await persistence.get_draft(user_id, question_id)

    media_store = MediaStore(config.get_data_directory())
    max_age_days = config.get('storage.max_age_days')
    if max_age_days:
        media_store.cleanup_old_sessions(max_age_days)

    tick_seconds = config.get('recording.tick_seconds', 1.0)
    controller = RecordingSessionController(
        capture_provider=build_capture_provider(config),
        transcription_provider=build_transcription_provider(config),
        persistence=persistence,
        user_id=user_id,
        question_id=question.id,
        draft=draft,
        media_store=media_store,
        mime_types=config.get_mime_type_preferences(),
        ticker_factory=lambda callback: IntervalTicker(callback, interval=tick_seconds),
    )
    attempt = await StudioScreen(controller, question, draft).run()
    return attempt.id if attempt else None


async def run_review(config: StarStudioConfig, attempt_id: str, user_id: Optional[str]) -> None:
    persistence = SupabasePersistence.from_config(config)
    review = await build_review_service(config, persistence).review(attempt_id, user_id)
    print_review(review)


def main() -> None:
    """Main entry point for STAR Studio."""
    parser = argparse.ArgumentParser(
        description="STAR Studio - behavioral interview practice",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="starstudio.yaml",
        help="Path to configuration YAML file (default: starstudio.yaml)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, else INFO)"
    )
    parser.add_argument(
        "--version",
        action="version",
        version="STAR Studio v0.1.0"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    record_parser = subparsers.add_parser("record", help="Record an answer to a question")
    record_parser.add_argument("question_id", help="Question to answer")
    record_parser.add_argument("--user-id", required=True, help="Signed-in user id")

    review_parser = subparsers.add_parser("review", help="Show AI feedback for an attempt")
    review_parser.add_argument("attempt_id", help="Attempt to review")
    review_parser.add_argument("--user-id", help="Only review attempts owned by this user")

    args = parser.parse_args()

    try:
        config = StarStudioConfig(args.config)
        setup_logging(config, args.log_level or config.get('logging.level', 'INFO'))

        if args.command == "record":
            attempt_id = asyncio.run(run_record(config, args.user_id, args.question_id))
            if attempt_id:
                print(f"Review it with: starstudio review {attempt_id}")
        else:
            asyncio.run(run_review(config, args.attempt_id, args.user_id))
    except KeyboardInterrupt:
        print("\nGoodbye!")
    except (StudioError, FileNotFoundError) as e:
        print(f"Error: {e}")
        logging.error(f"Application error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
