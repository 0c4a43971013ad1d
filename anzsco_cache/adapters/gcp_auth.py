"""
adapters/gcp_auth.py
──────────────────────────────────────────────────────────────────────────────
GCP access-token provider for the Gemini adapter.

Two modes:
  - GCP_ACCESS_TOKEN set  → that token is returned as-is (no subprocess);
                            invalidate() cannot refresh it, so a 401 from
                            Vertex surfaces as an LLMError after retries
  - otherwise             → `gcloud auth print-access-token`, cached in
                            memory and refreshed REFRESH_MARGIN seconds
                            before the assumed expiry

Thread-safe: a lock serialises refreshes so concurrent cache fills that all
miss at once still trigger only one gcloud call.
"""
from __future__ import annotations

import logging
import subprocess
import threading
import time
from typing import Callable

from anzsco_cache.config.settings import Settings
from anzsco_cache.domain.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

# gcloud tokens live for an hour; refresh two minutes early.
TOKEN_TTL_SECONDS: int = 3600
REFRESH_MARGIN: int = 120


class GCPAuthManager:
    """Hands out bearer tokens for Vertex AI requests.

    Created in services/container.py and injected into GeminiLLMAdapter.
    ``clock`` is injectable so expiry can be tested without sleeping.
    """

    def __init__(
        self,
        settings: Settings,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._gcloud_path = settings.gcloud_path
        self._static_token = settings.gcp_access_token.strip()
        self._clock = clock
        self._token = ""
        self._expires_at = 0.0
        self._lock = threading.Lock()
        logger.debug(
            "GCPAuthManager ready | mode=%s",
            "static" if self._static_token else "gcloud",
        )

    def get_token(self) -> str:
        """Return a usable bearer token, refreshing via gcloud when due.

        Raises:
            AuthenticationError: If gcloud is missing, fails or prints nothing.
        """
        if self._static_token:
            return self._static_token
        with self._lock:
            if not self._token or self._clock() >= self._expires_at - REFRESH_MARGIN:
                self._token = self._print_access_token()
                self._expires_at = self._clock() + TOKEN_TTL_SECONDS
                logger.info("GCPAuthManager: token refreshed")
            return self._token

    def invalidate(self) -> None:
        """Drop the cached token so the next get_token() calls gcloud again."""
        with self._lock:
            self._token = ""
            self._expires_at = 0.0

    def _print_access_token(self) -> str:
        cmd = [self._gcloud_path, "auth", "print-access-token"]
        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, timeout=30, check=True,
            )
        except FileNotFoundError as exc:
            raise AuthenticationError(
                f"gcloud not found at '{self._gcloud_path}'. "
                "Set GCLOUD_PATH or GCP_ACCESS_TOKEN."
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise AuthenticationError("gcloud timed out fetching access token") from exc
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or "").strip() or "(no stderr)"
            raise AuthenticationError(f"gcloud auth print-access-token failed: {stderr}") from exc

        token = result.stdout.strip()
        if not token:
            raise AuthenticationError("gcloud returned an empty access token")
        return token
