"""AI feedback on recorded attempts."""

from .llm import OpenAIChatEngine
from .prompts import build_feedback_prompt
from .generator import FeedbackGenerator, parse_feedback
from .review import Review, ReviewService

__all__ = [
    "OpenAIChatEngine",
    "build_feedback_prompt",
    "FeedbackGenerator",
    "parse_feedback",
    "Review",
    "ReviewService",
]
