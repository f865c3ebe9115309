"""Per-session pub/sub channels feeding the controller's event inbox."""

import queue
import logging
from typing import Any, Callable, Optional, Tuple

logger = logging.getLogger(__name__)


def session_topics(session_id: str) -> Tuple[str, str]:
    """Media and transcript topic names for one recording screen."""
    root = f"studio_session_{session_id}"
    return f"{root}_media", f"{root}_transcript"


class EventInbox:
    """Thread-safe mailbox: producers put from any thread, the owner pops on its own.

    ``on_put`` runs after each put, from the producer's thread; the controller
    uses it to wake its event loop.
    """

    def __init__(self, on_put: Optional[Callable[[], None]] = None):
        self._queue: "queue.SimpleQueue[Any]" = queue.SimpleQueue()
        self.on_put = on_put

    def put(self, event: Any) -> None:
        self._queue.put(event)
        if self.on_put is not None:
            self.on_put()

    def pop(self) -> Optional[Any]:
        """Next pending event in arrival order, or None when empty."""
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    def empty(self) -> bool:
        return self._queue.empty()
