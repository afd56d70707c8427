"""Chat-completion clients for the chapter pipeline.

Each client makes exactly one request per ``complete`` call (SDK retries are
disabled) and converts every failure into a ``ModelError`` subclass, so the
pipeline only ever has to handle chaptergen errors.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import anthropic
import openai
from anthropic.types import TextBlock

from chaptergen.config import LLMProvider, settings
from chaptergen.errors import (
    EmptyModelResponseError,
    NetworkError,
    ParseError,
    error_for_status,
)

logger = logging.getLogger(__name__)


class ChatClient(Protocol):
    """Anything that can turn a system + user prompt into a reply."""

    def complete(
        self,
        system: str,
        user: str,
        *,
        temperature: float,
        max_tokens: int,
    ) -> str: ...


def _error_detail(body: object) -> str | None:
    """Pull a human-readable message out of a provider error body.

    OpenAI bodies arrive already unwrapped (``{"message": ...}``); Anthropic
    bodies keep the envelope (``{"type": "error", "error": {"message": ...}}``).
    """
    if not isinstance(body, dict):
        return None
    if isinstance(body.get("message"), str):
        return str(body["message"])
    inner = body.get("error")
    if isinstance(inner, dict) and isinstance(inner.get("message"), str):
        return str(inner["message"])
    return None


class OpenAIChatClient:
    """Client for the OpenAI ``/chat/completions`` endpoint."""

    provider = "OpenAI"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
    ) -> None:
        self.model = model or settings.chapter_model
        self._client = openai.OpenAI(
            api_key=api_key or settings.openai_api_key,
            base_url=base_url or settings.openai_base_url or None,
            max_retries=0,
        )

    def complete(self, system: str, user: str, *, temperature: float, max_tokens: int) -> str:
        try:
            completion = self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except openai.APIConnectionError as exc:
            logger.error("Network error calling %s: %s", self.provider, exc)
            raise NetworkError(
                f"Network error: Could not reach {self.provider} API. "
                "Check your internet connection."
            ) from exc
        except openai.APIResponseValidationError as exc:
            raise ParseError(f"Failed to parse response from {self.provider}: {exc}") from exc
        except openai.APIStatusError as exc:
            logger.error("%s returned HTTP %d", self.provider, exc.status_code)
            raise error_for_status(
                exc.status_code,
                detail=_error_detail(exc.body),
                retry_after=exc.response.headers.get("retry-after"),
                provider=self.provider,
            ) from exc

        return _first_choice_content(completion, self.provider)


def _first_choice_content(completion: Any, provider: str) -> str:
    choices = getattr(completion, "choices", None)
    if choices is None:
        raise ParseError(f"{provider} returned an unexpected response: {str(completion)[:200]}")

    content = choices[0].message.content if choices else None
    if not isinstance(content, str) or not content.strip():
        raise EmptyModelResponseError(f"{provider} returned an empty response. Please try again.")
    return content.strip()


class AnthropicChatClient:
    """Client for the Anthropic Messages API."""

    provider = "Anthropic"

    def __init__(self, api_key: str | None = None, model: str | None = None) -> None:
        self.model = model or settings.anthropic_model
        self._client = anthropic.Anthropic(
            api_key=api_key or settings.anthropic_api_key,
            max_retries=0,
        )

    def complete(self, system: str, user: str, *, temperature: float, max_tokens: int) -> str:
        try:
            response = self._client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system,
                messages=[{"role": "user", "content": user}],
            )
        except anthropic.APIConnectionError as exc:
            logger.error("Network error calling %s: %s", self.provider, exc)
            raise NetworkError(
                f"Network error: Could not reach {self.provider} API. "
                "Check your internet connection."
            ) from exc
        except anthropic.APIResponseValidationError as exc:
            raise ParseError(f"Failed to parse response from {self.provider}: {exc}") from exc
        except anthropic.APIStatusError as exc:
            logger.error("%s returned HTTP %d", self.provider, exc.status_code)
            raise error_for_status(
                exc.status_code,
                detail=_error_detail(exc.body),
                retry_after=exc.response.headers.get("retry-after"),
                provider=self.provider,
            ) from exc

        blocks = getattr(response, "content", None)
        if blocks is None:
            raise ParseError(f"{self.provider} returned an unexpected response")

        text = "".join(block.text for block in blocks if isinstance(block, TextBlock)).strip()
        if not text:
            raise EmptyModelResponseError(
                f"{self.provider} returned an empty response. Please try again."
            )
        return text


def get_chat_client(provider: str | LLMProvider | None = None) -> ChatClient:
    """Build the chat client for *provider* (defaults to ``settings.llm_provider``)."""
    provider = LLMProvider(provider or settings.llm_provider)
    if provider is LLMProvider.ANTHROPIC:
        return AnthropicChatClient()
    return OpenAIChatClient()
