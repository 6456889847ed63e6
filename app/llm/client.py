from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import Literal

from openai import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    AsyncOpenAI,
    AuthenticationError,
    RateLimitError,
)
from openai.types.chat import ChatCompletion

from app.core.config import settings
from app.llm.prompts import get_system_prompt

logger = logging.getLogger(__name__)

ReasoningEffort = Literal["low", "medium", "high"]

MAX_TOKENS = 2048
TEMPERATURE = 0.7
TOP_P = 0.9

_AFTER_FIRST_CLOSING_TAG = re.compile(r"</[^>]+>(.*)$", re.DOTALL)
_TAGGED_BLOCK = re.compile(r"<[^>]+>.*?</[^>]+>", re.DOTALL)


class LLMServiceError(Exception):
    """Base error raised when the LLM service cannot fulfill a request."""

    def __init__(self, message: str, error_code: str) -> None:
        super().__init__(message)
        self.error_code = error_code


class LLMUnavailableError(LLMServiceError):
    """LLM is unavailable (timeout, rate limit, or upstream outage)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "llm_unavailable")


class LLMAuthenticationError(LLMServiceError):
    """LLM authentication failed (service credentials invalid)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "llm_auth_failed")


class LLMInvalidResponseError(LLMServiceError):
    """LLM returned an invalid or unexpected response."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "llm_response_invalid")


def extract_content_from_harmony_response(response: str) -> str:
    """Drop the model's tagged reasoning block and keep the answer that follows it.

    >>> extract_content_from_harmony_response("<思考過程>分析</思考過程>\\n答え")
    '答え'
    """
    match = _AFTER_FIRST_CLOSING_TAG.search(response)
    if match:
        return match.group(1).strip()
    return _TAGGED_BLOCK.sub("", response).strip()


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    async def complete(
        self, prompt: str, *, reasoning_effort: ReasoningEffort = "medium"
    ) -> str:
        """Return the model's answer to ``prompt`` with any reasoning block removed."""
        raise NotImplementedError


class OpenAIClient(LLMClient):
    """Client for an OpenAI-compatible chat completion server (vLLM serving gpt-oss)."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
    ) -> None:
        """Initialize OpenAI client."""
        url = (base_url or settings.llm_api_url or "").rstrip("/")
        # vLLM usually runs without a key; the SDK still insists on one.
        self.client = AsyncOpenAI(
            base_url=f"{url}/v1",
            api_key=api_key or settings.llm_api_key or "not-needed",
            timeout=settings.llm_timeout_seconds,
            max_retries=0,
        )
        self.model = model or settings.llm_model

    def _handle_errors(self, error: Exception) -> LLMServiceError:
        """Log error with appropriate message based on error type."""
        if isinstance(error, APITimeoutError):
            logger.error(f"LLM API request timed out. Error: {error}")
            return LLMUnavailableError("LLM request timed out. Try again.")
        elif isinstance(error, APIConnectionError):
            logger.error(f"LLM API connection failed. Error: {error}")
            return LLMUnavailableError("LLM service unreachable. Try again shortly.")
        elif isinstance(error, RateLimitError):
            logger.error(f"LLM API rate limit exceeded. Error: {error}")
            return LLMUnavailableError("LLM rate limit exceeded. Try again later.")
        elif isinstance(error, AuthenticationError):
            logger.error(f"LLM API authentication failed. Error: {error}")
            return LLMAuthenticationError("LLM authentication failed.")
        elif isinstance(error, APIError):
            logger.error(f"LLM API error. Error: {error}")
            return LLMUnavailableError("LLM service error. Try again later.")
        elif isinstance(error, (IndexError, AttributeError)):
            logger.error(f"Unexpected response structure from LLM. Error: {error}")
            return LLMInvalidResponseError("LLM returned an unexpected response.")
        elif isinstance(error, ValueError):
            logger.error(f"Invalid value encountered. Error: {error}")
            return LLMInvalidResponseError(str(error))
        else:
            logger.error(f"Unexpected error calling LLM. Error: {error}")
            return LLMServiceError("LLM request failed. Try again later.", "llm_error")

    async def complete(
        self, prompt: str, *, reasoning_effort: ReasoningEffort = "medium"
    ) -> str:
        try:
            response: ChatCompletion = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": get_system_prompt(reasoning_effort)},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=MAX_TOKENS,
                temperature=TEMPERATURE,
                top_p=TOP_P,
                extra_body={"reasoning_effort": reasoning_effort},
            )

            content = response.choices[0].message.content
            if not content or not content.strip():
                raise ValueError("Empty response from LLM")

            return extract_content_from_harmony_response(content.strip())

        except Exception as e:
            raise self._handle_errors(e) from e


def build_llm_client() -> LLMClient | None:
    """Return a client when an endpoint is configured, ``None`` for templated fallback."""
    if not settings.llm_enabled:
        return None
    return OpenAIClient()
