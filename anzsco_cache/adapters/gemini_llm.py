"""
adapters/gemini_llm.py
──────────────────────────────────────────────────────────────────────────────
Implements LLMPort using Vertex AI Gemini (generateContent REST API).

Key behaviour:
  - Sends systemInstruction + contents in the Vertex AI REST format
  - Plain-text output; the answer is shown to the user as-is
  - 401 invalidates the cached gcloud token and the next attempt fetches a
    fresh one
  - 429 / 503 and transport errors back off (adapters/http_retry.py)
  - Any terminal failure raises LLMError; an answer is never None

To enable:
  LLM_PROVIDER=vertex (the default) plus GCP_PROJECT_ID / GCP_LOCATION_ID.
"""
from __future__ import annotations

import logging

from anzsco_cache.adapters.gcp_auth import GCPAuthManager
from anzsco_cache.adapters.http_retry import post_json_with_backoff
from anzsco_cache.config.settings import Settings
from anzsco_cache.domain.exceptions import LLMError

logger = logging.getLogger(__name__)

_RETRY_STATUSES = (429, 503)


def _build_gemini_url(settings: Settings) -> str:
    return (
        f"https://{settings.gcp_location_id}-aiplatform.googleapis.com"
        f"/v1/projects/{settings.gcp_project_id}"
        f"/locations/{settings.gcp_location_id}"
        f"/publishers/google/models/{settings.gcp_gemini_model}:generateContent"
    )


class GeminiLLMAdapter:
    """Vertex AI Gemini adapter, injected into SectionExplainer by the container."""

    def __init__(self, auth: GCPAuthManager, settings: Settings) -> None:
        self._auth = auth
        self._settings = settings
        self._url = _build_gemini_url(settings)
        self._proxies = (
            {"https": f"http://{settings.https_proxy}"} if settings.https_proxy else {}
        )
        logger.debug("GeminiLLMAdapter ready | url=%s", self._url)

    @property
    def model_name(self) -> str:
        return self._settings.gcp_gemini_model

    def generate_text(self, system_prompt: str, user_message: str) -> str:
        """Ask Gemini for an answer and return its text.

        Raises:
            LLMError: On exhausted retries, a non-2xx response or empty output.
            AuthenticationError: If gcloud cannot produce a token.
        """
        body = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": user_message}]}],
            "generationConfig": {"temperature": 0.3},
        }
        data = post_json_with_backoff(
            "Gemini",
            self._url,
            body,
            headers=self._headers,
            retries=self._settings.llm_retries,
            timeout=self._settings.llm_timeout,
            retry_statuses=_RETRY_STATUSES,
            proxies=self._proxies,
            on_unauthorized=self._auth.invalidate,
        )
        return _candidate_text(data)

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self._auth.get_token()}",
            "Content-Type": "application/json",
        }


def _candidate_text(data: dict) -> str:
    """Concatenate the text parts of the first candidate."""
    try:
        candidates = data.get("candidates") or []
        parts = candidates[0]["content"].get("parts", []) if candidates else []
        text = "".join(part.get("text", "") for part in parts)
    except (AttributeError, KeyError, TypeError) as exc:
        raise LLMError(f"Unexpected Gemini response structure: {exc}") from exc
    text = text.strip()
    if not text:
        raise LLMError("Gemini returned no text")
    return text
