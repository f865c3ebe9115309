"""Structured feedback returned by the feedback generator."""

from typing import List

from pydantic import BaseModel, Field


class StarFeedback(BaseModel):
    """Per-component commentary on the STAR structure."""
    situation: str
    task: str
    action: str
    result: str


class Feedback(BaseModel):
    """Coach feedback on one attempt."""
    overall: str
    star: StarFeedback
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)


class FeedbackResult(BaseModel):
    """What the review screen shows: the transcript judged and the feedback."""
    transcript: str
    feedback: Feedback
    is_fallback: bool = False


# Shown whenever the model cannot be reached or returns something unusable
FALLBACK_FEEDBACK = Feedback(
    overall=(
        "Your response demonstrates good structure and addresses the question. "
        "Consider adding more specific details and quantifiable results."
    ),
    star=StarFeedback(
        situation="Clearly described the context and background",
        task="Identified your responsibility in the situation",
        action="Explained specific steps you took",
        result="Mentioned the outcome of your actions",
    ),
    strengths=[
        "Clear STAR structure throughout the response",
        "Stayed relevant to the question asked",
        "Described your own actions rather than the team's",
    ],
    improvements=[
        "Add more specific details about the situation",
        "Elaborate on the techniques or reasoning behind your actions",
        "Include metrics that show the impact of the result",
    ],
)
