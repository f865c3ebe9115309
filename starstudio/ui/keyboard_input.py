"""Single-key input for the terminal screens."""

import sys
import threading
import logging
from typing import Optional, Callable

logger = logging.getLogger(__name__)


class KeyReader:
    """Reads keys on a background thread and hands each to ``callback``.

    Uses raw single-character reads when stdin is a terminal and falls back
    to line input otherwise. The callback returns False to stop reading.
    """

    def __init__(self, callback: Callable[[str], bool], poll_interval: float = 0.1):
        self.callback = callback
        self.poll_interval = poll_interval
        self.running = False
        self.thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self.running:
            return

        self.running = True
        self.thread = threading.Thread(target=self._input_loop, daemon=True)
        self.thread.name = "StudioKeyReader"
        self.thread.start()
        logger.info("Key reader started")

    def stop(self) -> None:
        self.running = False
        if self.thread and self.thread is not threading.current_thread():
            self.thread.join(timeout=1.0)
        self.thread = None
        logger.info("Key reader stopped")

    def _input_loop(self) -> None:
        read_key = self._read_raw_key if sys.stdin.isatty() else self._read_line_key
        while self.running:
            try:
                key = read_key()
            except EOFError:
                break
            except OSError as e:
                logger.error(f"Key input error: {e}")
                break
            if key is None:
                continue
            logger.debug(f"Key pressed: {key!r}")
            if not self.callback(key):
                break
        self.running = False

    def _read_raw_key(self) -> Optional[str]:
        if sys.platform == "win32":
            import msvcrt
            if msvcrt.kbhit():
                return msvcrt.getch().decode('utf-8', errors='ignore').lower()
            threading.Event().wait(self.poll_interval)
            return None

        import select
        import termios
        import tty

        if not select.select([sys.stdin], [], [], self.poll_interval)[0]:
            return None
        old_settings = termios.tcgetattr(sys.stdin)
        try:
            tty.setraw(sys.stdin.fileno())
            return sys.stdin.read(1).lower()
        finally:
            termios.tcsetattr(sys.stdin, termios.TCSADRAIN, old_settings)

    def _read_line_key(self) -> Optional[str]:
        line = input("> ").strip().lower()
        # An empty line acts like the space bar
        return line[0] if line else " "
