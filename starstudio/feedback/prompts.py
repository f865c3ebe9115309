"""Prompt templates for interview feedback."""

from typing import Optional

from ..models.records import Draft

NOT_PROVIDED = "Not provided"

FEEDBACK_PROMPT = """You are an expert interview coach evaluating a behavioral interview response.

Question: "{question_title}"

{draft_context}

Candidate's spoken response (transcript):
"{transcript}"

Provide detailed feedback in the following JSON format:
{{
  "overall": "A brief overall assessment (2-3 sentences)",
  "star": {{
    "situation": "Feedback on the situation component",
    "task": "Feedback on the task component",
    "action": "Feedback on the action component",
    "result": "Feedback on the result component"
  }},
  "strengths": ["strength 1", "strength 2", "strength 3"],
  "improvements": ["improvement 1", "improvement 2", "improvement 3"]
}}

Focus on:
- STAR structure completeness
- Specificity and detail
- Relevance to the question
- Communication clarity
- Quantifiable results
- How closely the spoken answer follows the prepared draft, if one is given"""


def build_draft_context(draft: Optional[Draft]) -> str:
    if draft is None:
        return ""
    return (
        "The user prepared this STAR draft:\n"
        f"Situation: {draft.situation or NOT_PROVIDED}\n"
        f"Task: {draft.task or NOT_PROVIDED}\n"
        f"Action: {draft.action or NOT_PROVIDED}\n"
        f"Result: {draft.result or NOT_PROVIDED}"
    )


def build_feedback_prompt(question_title: str, transcript: str, draft: Optional[Draft] = None) -> str:
    return FEEDBACK_PROMPT.format(
        question_title=question_title,
        draft_context=build_draft_context(draft),
        transcript=transcript,
    )
