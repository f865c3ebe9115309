"""Supabase persistence over the PostgREST HTTP API."""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from ..config import StarStudioConfig
from ..exceptions import PersistenceError
from ..models.records import Attempt, Draft, Question

logger = logging.getLogger(__name__)

_SINGLE_OBJECT = "application/vnd.pgrst.object+json"


class SupabasePersistence:
    """Reads questions and drafts, writes attempts.

    Requests carry the project key as ``apikey`` and either the signed-in
    user's access token or the key itself as the bearer token, so row level
    security applies exactly as it would in the browser.
    """

    def __init__(self, url: str, api_key: str, access_token: Optional[str] = None,
                 timeout: float = 30.0):
        if not url or not api_key:
            raise ValueError("Supabase url and key are required")
        self.rest_url = f"{url.rstrip('/')}/rest/v1"
        self.api_key = api_key
        self.access_token = access_token or api_key
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    @classmethod
    def from_config(cls, config: StarStudioConfig) -> "SupabasePersistence":
        return cls(
            url=config.require('supabase.url'),
            api_key=config.require('supabase.key'),
            access_token=config.get('supabase.access_token'),
            timeout=config.get('supabase.timeout_seconds', 30.0),
        )

    def _headers(self, single: bool = False) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }
        if single:
            headers["Accept"] = _SINGLE_OBJECT
        return headers

    async def _request(self, method: str, table: str,
                       params: Optional[Dict[str, str]] = None,
                       payload: Optional[Dict[str, Any]] = None,
                       single: bool = False) -> Any:
        """Send one PostgREST request.

        Returns:
            Decoded JSON body, or None for a single-object read that matched no row
        """
        url = f"{self.rest_url}/{table}"
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.request(method, url, params=params, json=payload,
                                           headers=self._headers(single)) as response:
                    if single and method == "GET" and response.status == 406:
                        return None
                    if response.status >= 400:
                        error_text = await response.text()
                        raise PersistenceError(
                            f"Supabase {method} {table} failed: {response.status} - {error_text}",
                            status=response.status,
                        )
                    return await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise PersistenceError(f"Supabase {method} {table} timed out") from e
        except (aiohttp.ClientError, ValueError) as e:
            # ValueError: malformed JSON in a 2xx body
            raise PersistenceError(f"Supabase {method} {table} failed: {e}") from e

    async def create_attempt(self, user_id: str, question_id: str, draft_id: Optional[str],
                             duration: int, transcript: str) -> Attempt:
        """Insert a new attempt. Feedback is always null at creation."""
        attempt = Attempt(
            user_id=user_id,
            question_id=question_id,
            draft_id=draft_id,
            duration=duration,
            transcript=transcript,
            feedback=None,
        )
        row = await self._request("POST", "attempts", payload=attempt.to_insert_row(),
                                  params={"select": "*"}, single=True)
        if not row:
            raise PersistenceError("Supabase returned no row for the new attempt")
        created = Attempt.from_row(row)
        logger.info(f"Created attempt {created.id} for question {question_id} ({duration}s)")
        return created

    async def get_attempt(self, attempt_id: str, user_id: Optional[str] = None) -> Optional[Attempt]:
        params = {"select": "*", "id": f"eq.{attempt_id}"}
        if user_id:
            params["user_id"] = f"eq.{user_id}"
        row = await self._request("GET", "attempts", params=params, single=True)
        return Attempt.from_row(row) if row else None

    async def update_attempt_feedback(self, attempt_id: str, user_id: str,
                                      transcript: str, feedback: Dict[str, Any]) -> Attempt:
        params = {"select": "*", "id": f"eq.{attempt_id}", "user_id": f"eq.{user_id}"}
        row = await self._request("PATCH", "attempts", params=params,
                                  payload={"transcript": transcript, "feedback": feedback},
                                  single=True)
        if not row:
            raise PersistenceError(f"Attempt not found: {attempt_id}", status=404)
        logger.info(f"Stored feedback for attempt {attempt_id}")
        return Attempt.from_row(row)

    async def get_question(self, question_id: str) -> Optional[Question]:
        row = await self._request("GET", "questions",
                                  params={"select": "*", "id": f"eq.{question_id}"},
                                  single=True)
        return Question.from_row(row) if row else None

    async def get_draft(self, user_id: str, question_id: str) -> Optional[Draft]:
        """The user's draft for a question, or None when they haven't written one."""
        rows = await self._request("GET", "drafts", params={
            "select": "*",
            "question_id": f"eq.{question_id}",
            "user_id": f"eq.{user_id}",
            "limit": "1",
        })
        return Draft.from_row(rows[0]) if rows else None
