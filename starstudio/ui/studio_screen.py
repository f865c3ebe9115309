"""Terminal recording screen: live timer, transcript and STAR draft."""

import asyncio
import logging
from typing import Optional, Tuple

from rich.align import Align
from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .formatting import format_time, format_level
from .keyboard_input import KeyReader
from ..exceptions import StudioError
from ..models.records import Attempt, Draft, Question
from ..models.session import SessionState
from ..session.controller import RecordingSessionController

logger = logging.getLogger(__name__)

_STATE_STYLES = {
    SessionState.IDLE: ("READY", "bold blue"),
    SessionState.ACQUIRING: ("REQUESTING DEVICE", "bold yellow"),
    SessionState.RECORDING: ("RECORDING", "bold red"),
    SessionState.STOPPED: ("STOPPED", "bold yellow"),
    SessionState.SUBMITTING: ("SAVING", "bold magenta"),
}


class StudioScreen:
    """Drives a RecordingSessionController from the keyboard and renders its status."""

    def __init__(self, controller: RecordingSessionController, question: Question,
                 draft: Optional[Draft] = None, console: Optional[Console] = None):
        self.controller = controller
        self.question = question
        self.draft = draft
        self.console = console or Console()
        self.show_draft = True
        self.notice: Optional[Tuple[str, str]] = None
        self.running = False
        self.loop: Optional[asyncio.AbstractEventLoop] = None
        self.key_reader: Optional[KeyReader] = None

        controller.on_error = self._on_background_error

    def create_layout(self) -> Layout:
        layout = Layout()
        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="main", ratio=1),
            Layout(name="footer", size=3)
        )
        layout["main"].split_row(
            Layout(name="recording_panel", ratio=2),
            Layout(name="draft_panel", ratio=1)
        )
        return layout

    def update_header(self, layout: Layout) -> None:
        status = self.controller.status()
        label, style = _STATE_STYLES[status.state]
        title = Text(self.question.title, style="bold")
        badges = f"{self.question.category}" + (f" / {self.question.difficulty}" if self.question.difficulty else "")
        layout["header"].update(Panel(
            Align.center(Text.assemble(title, "  |  ", badges, "  |  ", (label, style))),
            style="bright_blue"
        ))

    def update_recording_panel(self, layout: Layout) -> None:
        status = self.controller.status()
        table = Table(show_header=False, box=None)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="white")
        table.add_row("Time", format_time(status.elapsed_seconds))
        table.add_row("Chunks", str(status.chunk_count))
        if status.is_recording:
            table.add_row("Level", Text(format_level(status.input_level), style="green"))
        if status.playback_path:
            table.add_row("Playback", status.playback_path)
        if not status.transcription_available:
            table.add_row("Transcript", Text("speech recognition unavailable", style="dim"))

        transcript = Text(status.transcript or "", style="white")
        if status.interim_text:
            transcript.append(status.interim_text, style="dim italic")
        if not transcript.plain:
            transcript = Text("Your words will appear here while you record.", style="dim italic")

        body = Table.grid(padding=(1, 0))
        body.add_row(table)
        body.add_row(transcript)
        if self.notice:
            body.add_row(Text(*self.notice))

        layout["recording_panel"].update(Panel(body, title="Recording", border_style="green"))

    def update_draft_panel(self, layout: Layout) -> None:
        if not self.show_draft:
            layout["draft_panel"].update(Panel(Text("Hidden (press d)", style="dim"), title="Your Draft"))
            return
        if self.draft is None:
            content = Text("No draft available for this question.", style="dim")
        else:
            content = Text()
            for name, value in self.draft.star_fields().items():
                if value:
                    content.append(f"{name.title()}\n", style="bold cyan")
                    content.append(f"{value}\n\n")
        layout["draft_panel"].update(Panel(content, title="Your Draft", border_style="blue"))

    def update_footer(self, layout: Layout) -> None:
        state = self.controller.state
        if state is SessionState.RECORDING:
            controls = Text.assemble(("SPACE", "bold red"), " Stop  ")
        elif state is SessionState.STOPPED:
            controls = Text.assemble(("R", "bold blue"), " Re-record  ", ("S", "bold green"), " Submit  ")
        else:
            controls = Text.assemble(("SPACE", "bold green"), " Start Recording  ")
        controls.append_text(Text.assemble(("D", "bold"), " Toggle Draft  ", ("Q", "bold red"), " Quit"))
        layout["footer"].update(Panel(Align.center(controls), style="bright_black"))

    def update_display(self, layout: Layout) -> None:
        self.update_header(layout)
        self.update_recording_panel(layout)
        self.update_draft_panel(layout)
        self.update_footer(layout)

    def handle_key_input(self, key: str) -> bool:
        """Keyboard thread callback. Returns False to stop reading keys."""
        if key in ('q', '\x03'):
            self.running = False
            return False
        if self.loop is not None:
            asyncio.run_coroutine_threadsafe(self.dispatch(key), self.loop)
        return True

    async def dispatch(self, key: str) -> None:
        """Map a key to a controller operation, turning failures into a notice."""
        state = self.controller.state
        try:
            if key in (' ', '\r', '\n'):
                if state is SessionState.RECORDING:
                    self.controller.stop()
                elif state is SessionState.IDLE:
                    await self.controller.start()
            elif key == 'r' and state is SessionState.STOPPED:
                await self.controller.start()
            elif key == 's' and state is SessionState.STOPPED:
                attempt = await self.controller.submit()
                self.notice = (f"Recording submitted (attempt {attempt.id})", "bold green")
                self.running = False
            elif key == 'd':
                self.show_draft = not self.show_draft
        except StudioError as e:
            self.notice = (f"{e.detail}. Please try again.", "bold red")

    def _on_background_error(self, error: StudioError) -> None:
        self.notice = (f"{error.detail}. Please try again.", "bold red")

    async def run(self) -> Optional[Attempt]:
        """Run until the user quits or submits. Returns the submitted attempt, if any."""
        self.loop = asyncio.get_running_loop()
        self.running = True
        layout = self.create_layout()
        self.key_reader = KeyReader(self.handle_key_input)
        self.key_reader.start()

        try:
            with Live(layout, console=self.console, refresh_per_second=10, screen=True):
                while self.running:
                    self.update_display(layout)
                    await asyncio.sleep(0.1)
        finally:
            self.key_reader.stop()
            self.controller.close()

        attempt = self.controller.submitted_attempt
        if attempt is not None:
            self.console.print(f"Recording submitted: attempt {attempt.id}", style="bold green")
        return attempt
