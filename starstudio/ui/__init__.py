"""Terminal user interface for STAR Studio."""

from .formatting import format_time, format_level
from .review_view import render_review, print_review
from .studio_screen import StudioScreen

__all__ = [
    "format_time",
    "format_level",
    "render_review",
    "print_review",
    "StudioScreen",
]
