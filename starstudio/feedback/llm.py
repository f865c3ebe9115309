"""OpenAI chat engine for sending prompts and getting responses."""

import asyncio
import logging
import aiohttp

from ..exceptions import FeedbackGenerationError

logger = logging.getLogger(__name__)

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"


class OpenAIChatEngine:
    """Simple engine for sending prompts to OpenAI chat completions."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini",
                 base_url: str = OPENAI_CHAT_URL, timeout: float = 60.0):
        """Initialize chat engine.

        Args:
            api_key: OpenAI API key
            model: Chat model used for feedback
            base_url: Chat completions endpoint
            timeout: Total request timeout in seconds
        """
        if not api_key:
            raise ValueError("OpenAI API key is required")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)

        logger.info(f"OpenAIChatEngine initialized with model: {model}")

    async def send_prompt(self, prompt: str, temperature: float = 0.3, max_tokens: int = 2000) -> str:
        """Send a prompt and get the response text.

        Raises:
            FeedbackGenerationError: If the API call fails
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        data = {
            "model": self.model,
            "messages": [
                {
                    "role": "user",
                    "content": prompt
                }
            ],
            "temperature": temperature,
            "max_tokens": max_tokens
        }

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(self.base_url, headers=headers, json=data) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise FeedbackGenerationError(f"OpenAI API error: {response.status} - {error_text}")

                    result = await response.json()
        except asyncio.TimeoutError as e:
            raise FeedbackGenerationError("OpenAI request timed out") from e
        except (aiohttp.ClientError, ValueError) as e:
            raise FeedbackGenerationError(f"OpenAI request failed: {e}") from e

        try:
            return result["choices"][0]["message"]["content"].strip()
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise FeedbackGenerationError(f"Unexpected OpenAI response shape: {e}") from e
