"""
adapters/memory_store.py
──────────────────────────────────────────────────────────────────────────────
Implements DocumentStorePort with process-local dicts.

The default STORE_PROVIDER.  Suitable for a single long-running process
(CLI session, one API worker) and for tests; nothing survives a restart.

Documents are deep-copied on the way in and out so callers can never mutate
stored state through a returned reference.  A single lock guards all
collections, which gives read-after-write consistency for free.
"""
from __future__ import annotations

import copy
import logging
import threading

logger = logging.getLogger(__name__)


class InMemoryDocumentStore:
    """Thread-safe in-memory implementation of DocumentStorePort."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict]] = {}
        self._lock = threading.Lock()
        logger.debug("InMemoryDocumentStore ready")

    # ── DocumentStorePort implementation ───────────────────────────────────

    def get(self, collection: str, key: str) -> dict | None:
        with self._lock:
            doc = self._collections.get(collection, {}).get(key)
            return copy.deepcopy(doc) if doc is not None else None

    def put(self, collection: str, key: str, document: dict) -> None:
        with self._lock:
            self._collections.setdefault(collection, {})[key] = copy.deepcopy(document)

    def delete(self, collection: str, key: str) -> None:
        with self._lock:
            self._collections.get(collection, {}).pop(key, None)

    def list(self, collection: str) -> dict[str, dict]:
        with self._lock:
            return copy.deepcopy(self._collections.get(collection, {}))
