"""Feedback generator: prompt the LLM with an attempt and parse its STAR feedback."""

import json
import logging
from typing import Any, Optional

from pydantic import ValidationError

from .llm import OpenAIChatEngine
from .prompts import build_feedback_prompt
from ..exceptions import FeedbackGenerationError, PersistenceError
from ..models.feedback import Feedback, FeedbackResult
from ..models.records import Draft

logger = logging.getLogger(__name__)


def _extract_json(text: str) -> Any:
    """Decode the model's answer, tolerating prose or code fences around the object."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end <= start:
        raise FeedbackGenerationError("Model response contains no JSON object")
    try:
        return json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        raise FeedbackGenerationError(f"Model response is not valid JSON: {e}") from e


def parse_feedback(text: str) -> Feedback:
    """Parse a model response into Feedback.

    Raises:
        FeedbackGenerationError: Response is not JSON or lacks required fields
    """
    data = _extract_json(text)
    try:
        return Feedback.model_validate(data)
    except ValidationError as e:
        raise FeedbackGenerationError(f"Model response has the wrong shape: {e}") from e


class FeedbackGenerator:
    """Generates and stores coach feedback for an attempt."""

    def __init__(self, engine: OpenAIChatEngine, persistence):
        self.engine = engine
        self.persistence = persistence

    async def generate_feedback(self, attempt_id: str, question_title: str,
                                draft: Optional[Draft] = None,
                                user_id: Optional[str] = None) -> FeedbackResult:
        """Judge the attempt's transcript against the question and draft.

        Raises:
            PersistenceError: Attempt missing or the feedback could not be stored
            FeedbackGenerationError: LLM call failed or returned unusable output
        """
        attempt = await self.persistence.get_attempt(attempt_id, user_id)
        if attempt is None:
            raise PersistenceError(f"Attempt not found: {attempt_id}", status=404)

        prompt = build_feedback_prompt(question_title, attempt.transcript, draft)
        logger.info(f"Requesting feedback for attempt {attempt_id}")
        response_text = await self.engine.send_prompt(prompt)
        feedback = parse_feedback(response_text)

        await self.persistence.update_attempt_feedback(
            attempt.id,
            attempt.user_id,
            attempt.transcript,
            feedback.model_dump(),
        )
        return FeedbackResult(transcript=attempt.transcript, feedback=feedback)
