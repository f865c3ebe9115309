"""Records stored in the hosted database."""

from dataclasses import dataclass
from typing import Optional, Dict, Any


@dataclass
class Question:
    """A behavioral interview question from the library."""
    id: str
    title: str
    category: str
    difficulty: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Question":
        return cls(
            id=str(row["id"]),
            title=row["title"],
            category=row.get("category", ""),
            difficulty=row.get("difficulty"),
            description=row.get("description"),
        )


@dataclass
class Draft:
    """A user's written STAR answer to a question. Every field is optional."""
    id: str
    user_id: str
    question_id: str
    situation: Optional[str] = None
    task: Optional[str] = None
    action: Optional[str] = None
    result: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Draft":
        return cls(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            question_id=str(row["question_id"]),
            situation=row.get("situation"),
            task=row.get("task"),
            action=row.get("action"),
            result=row.get("result"),
        )

    def star_fields(self) -> Dict[str, Optional[str]]:
        return {
            "situation": self.situation,
            "task": self.task,
            "action": self.action,
            "result": self.result,
        }


@dataclass
class Attempt:
    """One recorded practice session plus its eventual feedback."""
    user_id: str
    question_id: str
    duration: int
    transcript: str
    draft_id: Optional[str] = None
    feedback: Optional[Dict[str, Any]] = None
    id: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Attempt":
        draft_id = row.get("draft_id")
        return cls(
            id=str(row["id"]) if row.get("id") is not None else None,
            user_id=str(row["user_id"]),
            question_id=str(row["question_id"]),
            draft_id=str(draft_id) if draft_id is not None else None,
            duration=int(row.get("duration") or 0),
            transcript=row.get("transcript") or "",
            feedback=row.get("feedback"),
            created_at=row.get("created_at"),
        )

    def to_insert_row(self) -> Dict[str, Any]:
        """Columns sent when the attempt is first created."""
        return {
            "user_id": self.user_id,
            "question_id": self.question_id,
            "draft_id": self.draft_id,
            "duration": self.duration,
            "transcript": self.transcript,
            "feedback": self.feedback,
        }
