"""Review flow: show stored feedback or generate it, never failing the screen."""

import logging
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from .generator import FeedbackGenerator
from ..exceptions import StudioError, PersistenceError
from ..models.feedback import Feedback, FeedbackResult, FALLBACK_FEEDBACK
from ..models.records import Attempt, Draft, Question

logger = logging.getLogger(__name__)


@dataclass
class Review:
    """Everything the review screen shows for one attempt."""
    attempt: Attempt
    question: Optional[Question]
    draft: Optional[Draft]
    result: FeedbackResult


class ReviewService:
    """Loads an attempt and makes sure it has feedback to show."""

    def __init__(self, persistence, generator: FeedbackGenerator):
        self.persistence = persistence
        self.generator = generator

    async def review(self, attempt_id: str, user_id: Optional[str] = None) -> Review:
        """Return the attempt with its feedback.

        Feedback already stored on the attempt is reused. Otherwise it is
        generated; any generation failure is replaced by FALLBACK_FEEDBACK.

        Raises:
            PersistenceError: The attempt itself cannot be loaded
        """
        attempt = await self.persistence.get_attempt(attempt_id, user_id)
        if attempt is None:
            raise PersistenceError(f"Attempt not found: {attempt_id}", status=404)

        question = await self.persistence.get_question(attempt.question_id)
        draft = await self.persistence.get_draft(attempt.user_id, attempt.question_id)

        stored = self._stored_feedback(attempt)
        if stored is not None:
            return Review(attempt, question, draft,
                          FeedbackResult(transcript=attempt.transcript, feedback=stored))

        title = question.title if question else "Behavioral interview question"
        try:
            result = await self.generator.generate_feedback(attempt.id, title, draft, user_id)
        except StudioError as e:
            logger.warning(f"Feedback generation failed for attempt {attempt.id}, "
                           f"showing fallback: {e.detail}")
            result = FeedbackResult(transcript=attempt.transcript,
                                    feedback=FALLBACK_FEEDBACK,
                                    is_fallback=True)
        return Review(attempt, question, draft, result)

    @staticmethod
    def _stored_feedback(attempt: Attempt) -> Optional[Feedback]:
        if not attempt.feedback:
            return None
        try:
            return Feedback.model_validate(attempt.feedback)
        except ValidationError:
            logger.warning(f"Stored feedback for attempt {attempt.id} is malformed, regenerating")
            return None
