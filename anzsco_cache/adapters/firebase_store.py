"""
adapters/firebase_store.py
──────────────────────────────────────────────────────────────────────────────
Implements DocumentStorePort on a Firebase Realtime Database via its REST API.

Layout:
  {FIREBASE_STORE_URL}/{collection}/{escaped_key}.json  → one document

Key behaviour:
  - GET of an absent path returns JSON null → None
  - PUT replaces the whole node (never PATCH), matching the port contract
  - FIREBASE_AUTH_TOKEN, when set, is sent as the ``auth`` query parameter
  - Firebase forbids . $ # [ ] / in keys; they are %-escaped (along with %
    itself so the mapping stays reversible) and then URL-quoted for the path
  - Every transport or HTTP failure becomes StorageUnavailableError
"""
from __future__ import annotations

import logging
from urllib.parse import quote

import requests

from anzsco_cache.config.settings import Settings
from anzsco_cache.domain.exceptions import ConfigurationError, StorageUnavailableError

logger = logging.getLogger(__name__)

_FORBIDDEN = "%.$#[]/"


def escape_key(key: str) -> str:
    """Escape characters Firebase does not accept in a key."""
    return "".join(f"%{ord(ch):02X}" if ch in _FORBIDDEN else ch for ch in key)


def unescape_key(key: str) -> str:
    """Reverse escape_key()."""
    out: list[str] = []
    i = 0
    while i < len(key):
        if key[i] == "%" and i + 3 <= len(key):
            out.append(chr(int(key[i + 1:i + 3], 16)))
            i += 3
        else:
            out.append(key[i])
            i += 1
    return "".join(out)


class FirebaseDocumentStore:
    """Firebase Realtime Database implementation of DocumentStorePort.

    Injected into the cache stores via services/container.py when
    ``STORE_PROVIDER=firebase`` is set.
    """

    def __init__(self, settings: Settings) -> None:
        if not settings.firebase_store_url:
            raise ConfigurationError(
                "FIREBASE_STORE_URL is not set. "
                "Add it to your .env file or environment."
            )
        self._root = settings.firebase_store_url.rstrip("/")
        self._timeout = settings.source_timeout
        self._params = (
            {"auth": settings.firebase_auth_token}
            if settings.firebase_auth_token
            else {}
        )
        logger.debug("FirebaseDocumentStore ready | root=%s", self._root)

    # ── DocumentStorePort implementation ───────────────────────────────────

    def get(self, collection: str, key: str) -> dict | None:
        return self._request("GET", self._doc_url(collection, key))

    def put(self, collection: str, key: str, document: dict) -> None:
        self._request("PUT", self._doc_url(collection, key), json=document)

    def delete(self, collection: str, key: str) -> None:
        self._request("DELETE", self._doc_url(collection, key))

    def list(self, collection: str) -> dict[str, dict]:
        data = self._request("GET", self._collection_url(collection))
        if not data:
            return {}
        # Firebase returns an array when the keys look like dense integers
        if isinstance(data, list):
            return {str(i): doc for i, doc in enumerate(data) if doc is not None}
        return {unescape_key(k): v for k, v in data.items() if v is not None}

    # ── Private helpers ────────────────────────────────────────────────────

    def _collection_url(self, collection: str) -> str:
        return f"{self._root}/{quote(collection, safe='')}.json"

    def _doc_url(self, collection: str, key: str) -> str:
        path_key = quote(escape_key(key), safe="")
        return f"{self._root}/{quote(collection, safe='')}/{path_key}.json"

    def _request(self, method: str, url: str, json: dict | None = None):
        try:
            resp = requests.request(
                method,
                url,
                params=self._params,
                json=json,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise StorageUnavailableError(f"Firebase {method} failed: {exc}") from exc

        if not resp.ok:
            logger.error("Firebase %s HTTP %d: %s", method, resp.status_code, resp.text[:300])
            raise StorageUnavailableError(
                f"Firebase {method} returned HTTP {resp.status_code}"
            )
        if method == "DELETE":
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise StorageUnavailableError(f"Firebase returned invalid JSON: {exc}") from exc
