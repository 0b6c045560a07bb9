"""
OpenAI Chat client wrapper.
Encapsulates request/response logic and the per-call timeout, and turns
every upstream failure into an UpstreamError.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol, Sequence

from openai import AsyncOpenAI
from openai import OpenAIError

from app.core.config import settings
from app.core.errors import UpstreamError
from app.models.schemas import ChatTurn
from app.services.prompt_builder import build_messages

logger = logging.getLogger("openai_client")


class ChatCompletionClient(Protocol):
    async def complete(self, history: Sequence[ChatTurn], message: str) -> str:
        ...


class OpenAIClient:
    """
    Thin async wrapper around OpenAI Chat Completions.
    Allows setting model, temperature, token budget, system prompt and per-call timeout.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o-mini",
        timeout_seconds: int = 20,
        temperature: float = 0.7,
        max_tokens: int = 500,
        system_prompt: Optional[str] = None,
    ) -> None:
        self._api_key = api_key or settings.openai_api_key
        self._client = AsyncOpenAI(api_key=self._api_key)
        self._model = model
        self._timeout_seconds = timeout_seconds
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._system_prompt = system_prompt

    async def complete(self, history: Sequence[ChatTurn], message: str) -> str:
        """
        Execute one chat completion for `message` given the prior `history`.
        Returns assistant content as plain text.
        Raises UpstreamError on API errors, timeouts, and empty replies.
        """
        messages = build_messages(history, message, system_prompt=self._system_prompt)

        async def _call() -> str:
            resp = await self._client.chat.completions.create(
                model=self._model,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
                messages=messages,
            )
            return (resp.choices[0].message.content or "").strip()

        try:
            content = await asyncio.wait_for(_call(), timeout=self._timeout_seconds)
        except asyncio.TimeoutError as exc:
            logger.warning("OpenAI call timed out after %ss", self._timeout_seconds)
            raise UpstreamError("AI service timed out") from exc
        except OpenAIError as exc:
            logger.warning("OpenAI call failed: %s", exc.__class__.__name__)
            raise UpstreamError() from exc

        if not content:
            raise UpstreamError("AI service returned an empty reply")
        return content

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.close()
