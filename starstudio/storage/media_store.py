"""Local storage of captured media for playback before submission."""

import json
import logging
import shutil
import random
import string
from pathlib import Path
from datetime import datetime
from typing import Optional
from dataclasses import asdict

from ..capture.media import file_extension_for
from ..models.session import CapturedMedia, SessionInfo

logger = logging.getLogger(__name__)


class MediaStore:
    """Keeps each recording screen's latest capture under its own session directory."""

    def __init__(self, data_dir: str = "./data"):
        """Initialize media store with data directory.

        Args:
            data_dir: Base directory for storing recordings
        """
        self.data_dir = Path(data_dir)
        self.sessions_dir = self.data_dir / "sessions"

        for directory in [self.data_dir, self.sessions_dir]:
            directory.mkdir(parents=True, exist_ok=True)

        logger.info(f"MediaStore initialized with data_dir: {self.data_dir}")

    def create_session_directory(self) -> str:
        """Create new session directory with timestamp and random suffix.

        Returns:
            Session ID (timestamp-based with random suffix)
        """
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        random_suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=4))
        session_id = f"{timestamp}_{random_suffix}"
        session_path = self.sessions_dir / session_id
        session_path.mkdir(exist_ok=True)

        logger.info(f"Created session directory: {session_path}")
        return session_id

    def get_session_path(self, session_id: str) -> Path:
        return self.sessions_dir / session_id

    def save_recording(self, session_id: str, question_id: str,
                       media: CapturedMedia, duration_seconds: int) -> str:
        """Write the captured media, replacing any earlier take of this session.

        Returns:
            Path of the playable media file
        """
        session_path = self.get_session_path(session_id)
        session_path.mkdir(parents=True, exist_ok=True)

        for previous in session_path.glob("recording.*"):
            previous.unlink()

        media_file = f"recording.{file_extension_for(media.mime_type)}"
        media_path = session_path / media_file
        with open(media_path, 'wb') as f:
            f.write(media.data)

        self.save_session_info(SessionInfo(
            session_id=session_id,
            question_id=question_id,
            recorded_at=datetime.now(),
            duration_seconds=duration_seconds,
            media_file=media_file,
            mime_type=media.mime_type,
            file_size_bytes=media.size_bytes,
            chunk_count=media.chunk_count,
        ))

        logger.info(f"Recording saved: {media_path} ({media.size_bytes} bytes)")
        return str(media_path)

    def save_session_info(self, session_info: SessionInfo) -> str:
        session_path = self.get_session_path(session_info.session_id)
        session_path.mkdir(exist_ok=True)

        info_file = session_path / "session_info.json"
        info_dict = asdict(session_info)
        info_dict['recorded_at'] = session_info.recorded_at.isoformat()

        with open(info_file, 'w') as f:
            json.dump(info_dict, f, indent=2)

        logger.debug(f"Session info saved: {info_file}")
        return str(info_file)

    def load_session_info(self, session_id: str) -> Optional[SessionInfo]:
        """Load session information, or None if the session has no recording."""
        info_file = self.get_session_path(session_id) / "session_info.json"

        if not info_file.exists():
            logger.warning(f"Session info file not found: {info_file}")
            return None

        try:
            with open(info_file, 'r') as f:
                data = json.load(f)
            data['recorded_at'] = datetime.fromisoformat(data['recorded_at'])
            return SessionInfo(**data)
        except (OSError, ValueError, TypeError, KeyError) as e:
            logger.error(f"Error loading session info {info_file}: {e}")
            return None

    def cleanup_old_sessions(self, max_age_days: int = 30) -> int:
        """Remove session directories older than ``max_age_days``.

        Returns:
            Number of sessions removed
        """
        cutoff_time = datetime.now().timestamp() - (max_age_days * 24 * 60 * 60)
        cleaned_count = 0

        for session_path in self.sessions_dir.iterdir():
            if session_path.is_dir() and session_path.stat().st_mtime < cutoff_time:
                shutil.rmtree(session_path)
                cleaned_count += 1
                logger.info(f"Cleaned up old session: {session_path}")

        logger.info(f"Cleaned up {cleaned_count} old sessions")
        return cleaned_count
