"""
adapters/openai_llm.py
──────────────────────────────────────────────────────────────────────────────
Implements LLMPort with the OpenAI Chat Completions REST endpoint (plain
requests, no SDK).

  - system prompt and user message become the two chat messages
  - 401 is a bad key: AuthenticationError, no retry
  - 429 / 500 / 503 and transport errors back off (adapters/http_retry.py)
  - anything else that fails is an LLMError

Env: OPENAI_API_KEY (required), OPENAI_LLM_MODEL (default gpt-4o).
Selected with LLM_PROVIDER=openai.
"""
from __future__ import annotations

import logging

from anzsco_cache.adapters.http_retry import post_json_with_backoff
from anzsco_cache.config.settings import Settings
from anzsco_cache.domain.exceptions import AuthenticationError, LLMError

logger = logging.getLogger(__name__)

_OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"
_RETRY_STATUSES = (429, 500, 503)


def _reject_key() -> None:
    raise AuthenticationError(
        "OpenAI returned 401 Unauthorised. Check that OPENAI_API_KEY is valid."
    )


class OpenAILLMAdapter:
    """Chat-completions adapter, injected into SectionExplainer by the container."""

    def __init__(self, settings: Settings) -> None:
        if not settings.openai_api_key:
            raise AuthenticationError(
                "OPENAI_API_KEY is not set. "
                "Add it to your .env file or environment."
            )
        self._settings = settings
        self._auth_headers = {
            "Authorization": f"Bearer {settings.openai_api_key}",
            "Content-Type": "application/json",
        }
        logger.debug("OpenAILLMAdapter ready | model=%s", settings.openai_llm_model)

    @property
    def model_name(self) -> str:
        return self._settings.openai_llm_model

    def generate_text(self, system_prompt: str, user_message: str) -> str:
        """Return the assistant's reply to one system + user exchange.

        Raises:
            AuthenticationError: On HTTP 401.
            LLMError: On exhausted retries, a non-2xx response or empty output.
        """
        body = {
            "model": self.model_name,
            "temperature": 0.3,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
        }
        data = post_json_with_backoff(
            "OpenAI",
            _OPENAI_CHAT_URL,
            body,
            headers=lambda: self._auth_headers,
            retries=self._settings.llm_retries,
            timeout=self._settings.llm_timeout,
            retry_statuses=_RETRY_STATUSES,
            on_unauthorized=_reject_key,
        )
        return _message_content(data)


def _message_content(data: dict) -> str:
    try:
        choices = data.get("choices") or []
        content = (choices[0]["message"].get("content") or "") if choices else ""
    except (AttributeError, KeyError, TypeError) as exc:
        raise LLMError(f"Unexpected OpenAI response structure: {exc}") from exc
    content = content.strip()
    if not content:
        raise LLMError("OpenAI returned no content")
    return content
