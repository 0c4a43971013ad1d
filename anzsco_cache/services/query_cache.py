"""
services/query_cache.py
──────────────────────────────────────────────────────────────────────────────
Query/Response Cache: (query, occupation, section) → generated answer.

Storage layout (DocumentStorePort):
  ai_queries/{fingerprint} → QueryRecord document

Logical key normalisation:
  query            leading/trailing whitespace trimmed, otherwise verbatim;
                   near-duplicate questions are distinct entries
  occupation_name  trimmed + case-folded (same rule as the Occupation Index)
  section          trimmed + case-folded, must be a known Section

The fingerprint is the SHA-256 of the normalised triple, which keeps keys
short and free of characters document stores reject.

Timestamps:
  put()  sets created_at == accessed_at == now
  get()  on a hit moves accessed_at forward and persists it; when the clock
         has not advanced since the last touch it is bumped by 1µs so
         successive hits are strictly ordered
This is the only tier with a bounded lifecycle: evict_older_than() removes
records by accessed_at.  Losing a record only costs a regeneration.
"""
from __future__ import annotations

import hashlib
import logging
import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable

from pydantic import ValidationError

from anzsco_cache.domain.models import (
    QueryRecord,
    Section,
    normalize_occupation_name,
    normalize_section,
)
from anzsco_cache.ports.document_store_port import DocumentStorePort

logger = logging.getLogger(__name__)

_TICK = timedelta(microseconds=1)


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def fingerprint(query: str, occupation_name: str, section: str | Section) -> str:
    """Storage key for a (query, occupation, section) triple."""
    parts = (
        query.strip(),
        normalize_occupation_name(occupation_name),
        normalize_section(section).value,
    )
    return hashlib.sha256("\x1f".join(parts).encode("utf-8")).hexdigest()


class QueryCache:
    """Fingerprint-keyed answer cache over a DocumentStorePort.

    The touch in get() is a read-modify-write of the whole document, so get,
    put and the per-record delete in evict_older_than share one lock; a
    touch can then never write back a record that was just replaced or
    evicted by this process.

    Args:
        store: Document store shared with the other tiers.
        clock: Returns the current UTC time; injectable for tests.
    """

    COLLECTION = "ai_queries"

    def __init__(
        self,
        store: DocumentStorePort,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._clock = clock
        self._lock = threading.Lock()

    def get(
        self,
        query: str,
        occupation_name: str,
        section: str | Section,
    ) -> QueryRecord | None:
        """Return the cached record and touch its accessed_at, or None on a miss."""
        key = fingerprint(query, occupation_name, section)
        with self._lock:
            doc = self._store.get(self.COLLECTION, key)
            if doc is None:
                return None

            record = QueryRecord.model_validate(doc)
            now = self._clock()
            accessed = now if now > record.accessed_at else record.accessed_at + _TICK
            record = record.model_copy(update={"accessed_at": accessed})
            self._store.put(self.COLLECTION, key, record.model_dump(mode="json"))
            return record

    def put(
        self,
        query: str,
        occupation_name: str,
        section: str | Section,
        response: str,
        source: str,
    ) -> QueryRecord:
        """Store a freshly generated answer, replacing any record for the same key."""
        key = fingerprint(query, occupation_name, section)
        with self._lock:
            now = self._clock()
            record = QueryRecord(
                id=uuid.uuid4().hex,
                query=query.strip(),
                occupation_name=occupation_name.strip(),
                section=normalize_section(section),
                response=response,
                created_at=now,
                accessed_at=now,
                source=source,
            )
            self._store.put(self.COLLECTION, key, record.model_dump(mode="json"))
            return record

    def evict_older_than(self, cutoff: datetime) -> int:
        """Delete records last accessed before ``cutoff``.

        Each candidate from the listing is re-read under the lock before it
        is deleted, so a record touched or replaced since the listing stays.
        Documents that no longer validate as a QueryRecord are removed too.

        Returns:
            Number of records deleted.
        """
        removed = 0
        for key in self._store.list(self.COLLECTION):
            with self._lock:
                doc = self._store.get(self.COLLECTION, key)
                if doc is None or not self._is_stale(key, doc, cutoff):
                    continue
                self._store.delete(self.COLLECTION, key)
            removed += 1
        return removed

    @staticmethod
    def _is_stale(key: str, doc: dict, cutoff: datetime) -> bool:
        try:
            return QueryRecord.model_validate(doc).accessed_at < cutoff
        except ValidationError as exc:
            logger.warning("Evicting malformed query record %s: %s", key, exc)
            return True
