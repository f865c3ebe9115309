"""Terminal rendering of an attempt's AI feedback."""

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .formatting import format_time
from ..feedback.review import Review


def render_review(review: Review) -> Group:
    """Build the renderable for one reviewed attempt."""
    feedback = review.result.feedback
    title = review.question.title if review.question else f"Question {review.attempt.question_id}"

    header = Text.assemble((title, "bold"), "  ", (f"Duration: {format_time(review.attempt.duration)}", "dim"))

    star = Table(show_header=False, box=None, padding=(0, 1))
    star.add_column(style="bold cyan")
    star.add_column()
    for name, comment in feedback.star.model_dump().items():
        star.add_row(name.title(), comment)

    strengths = Text("\n".join(f"+ {item}" for item in feedback.strengths), style="green")
    improvements = Text("\n".join(f"- {item}" for item in feedback.improvements), style="yellow")

    parts = [
        header,
        Panel(Text(feedback.overall), title="Overall"),
        Panel(star, title="STAR Breakdown"),
        Panel(strengths, title="Strengths"),
        Panel(improvements, title="Areas for Improvement"),
        Panel(Text(review.result.transcript or ""), title="Transcript", border_style="dim"),
    ]
    if review.result.is_fallback:
        parts.insert(1, Text("AI feedback was unavailable; showing general guidance.", style="dim italic"))
    return Group(*parts)


def print_review(review: Review, console: Console = None) -> None:
    (console or Console()).print(render_review(review))
