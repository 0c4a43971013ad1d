"""
adapters/http_retry.py
──────────────────────────────────────────────────────────────────────────────
JSON POST with exponential back-off, shared by the LLM adapters.

Behaviour per attempt:
  - transport error (requests.RequestException) → back off, try again
  - 401 → ``on_unauthorized()`` is called (it may raise); without a handler
    the 401 is treated like any other non-2xx status
  - a status in ``retry_statuses`` → back off, try again
  - any other non-2xx → LLMError immediately
  - 2xx → parsed JSON body

Headers are rebuilt per attempt so a refreshed bearer token is picked up
after a 401.
"""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import requests

from anzsco_cache.domain.exceptions import LLMError

logger = logging.getLogger(__name__)

INITIAL_BACKOFF_SECONDS = 2.0


def post_json_with_backoff(
    label: str,
    url: str,
    payload: dict,
    *,
    headers: Callable[[], dict],
    retries: int,
    timeout: int,
    retry_statuses: tuple[int, ...],
    proxies: Optional[dict] = None,
    on_unauthorized: Optional[Callable[[], None]] = None,
) -> dict:
    """POST ``payload`` to ``url`` and return the decoded JSON response.

    Args:
        label:           Provider name used in log lines and error messages.
        headers:         Called before every attempt to build request headers.
        retries:         Total attempts (at least one is always made).
        retry_statuses:  HTTP statuses that trigger back-off and a retry.
        on_unauthorized: Hook for HTTP 401; returning normally means retry.

    Raises:
        LLMError: On a non-retryable status, invalid JSON or exhausted retries.
    """
    attempts = max(1, retries)
    delay = INITIAL_BACKOFF_SECONDS

    for attempt in range(1, attempts + 1):
        try:
            resp = requests.post(
                url,
                headers=headers(),
                json=payload,
                proxies=proxies or {},
                timeout=timeout,
            )
        except requests.RequestException as exc:
            logger.warning("%s request error (attempt %d/%d): %s", label, attempt, attempts, exc)
            time.sleep(delay)
            delay *= 2
            continue

        if resp.status_code == 401 and on_unauthorized is not None:
            logger.warning("%s 401 (attempt %d/%d)", label, attempt, attempts)
            on_unauthorized()
            continue

        if resp.status_code in retry_statuses:
            logger.warning(
                "%s %d (attempt %d/%d), back-off %.1fs",
                label, resp.status_code, attempt, attempts, delay,
            )
            time.sleep(delay)
            delay *= 2
            continue

        if not resp.ok:
            logger.error("%s HTTP %d: %s", label, resp.status_code, resp.text[:300])
            raise LLMError(f"{label} returned HTTP {resp.status_code}")

        try:
            return resp.json()
        except ValueError as exc:
            raise LLMError(f"{label} returned invalid JSON: {exc}") from exc

    raise LLMError(f"{label} failed after {attempts} attempts")
