"""
services/facade.py
──────────────────────────────────────────────────────────────────────────────
CacheFacade: the only component callers talk to, and the only writer of the
three cache tiers.

Occupation flow  resolve_occupation(name)
  index hit  → detail hit  → return
             → detail miss → fetch detail → store detail → return
  index miss → classify → fetch detail (unless already cached for that code)
             → store index entry → store detail → return

Query flow  answer_query(query, occupation, section)
  cache hit  → touch accessed_at → return
  cache miss → generate → store record → return

Guarantees:
  • every external call of a flow completes before the first write, so a
    source failure leaves the cache untouched
  • at most one external call of each kind per request
  • concurrent fills of the same key are serialised by a per-key lock; the
    waiting caller re-checks the cache and is served the winner's write
  • errors other than a miss propagate unchanged
"""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Callable, Iterator

from anzsco_cache.config.settings import Settings
from anzsco_cache.domain.exceptions import DanglingReferenceError, StorageUnavailableError
from anzsco_cache.domain.models import (
    OccupationDetail,
    OccupationEntry,
    OccupationLookup,
    QueryRecord,
    Section,
    normalize_occupation_name,
    normalize_section,
)
from anzsco_cache.ports.source_port import (
    ClassificationSourcePort,
    DetailSourcePort,
    GenerationSourcePort,
)
from anzsco_cache.services.detail_store import OccupationDetailStore
from anzsco_cache.services.occupation_index import OccupationIndex
from anzsco_cache.services.query_cache import QueryCache, fingerprint, utcnow

logger = logging.getLogger(__name__)


class KeyedLocks:
    """Per-key in-flight markers.

    A lock exists only while someone holds or waits for it, so the registry
    does not grow with the number of keys ever seen.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, list] = {}  # key → [Lock, holders]

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            slot = self._locks.setdefault(key, [threading.Lock(), 0])
            slot[1] += 1
        slot[0].acquire()
        try:
            yield
        finally:
            slot[0].release()
            with self._guard:
                slot[1] -= 1
                if slot[1] == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


class CacheFacade:
    """Two-tier ANZSCO cache in front of the classification, detail and
    generation sources.

    Build via services/container.build_facade() and pass the instance to the
    request-handling layer; there is no module-level cache state.
    """

    def __init__(
        self,
        index: OccupationIndex,
        details: OccupationDetailStore,
        queries: QueryCache,
        classifier: ClassificationSourcePort,
        detail_source: DetailSourcePort,
        generator: GenerationSourcePort,
        settings: Settings,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._index = index
        self._details = details
        self._queries = queries
        self._classifier = classifier
        self._detail_source = detail_source
        self._generator = generator
        self._settings = settings
        self._clock = clock
        self._locks = KeyedLocks()
        self._last_eviction: datetime | None = None
        self._eviction_guard = threading.Lock()

    # ── Occupation flow ────────────────────────────────────────────────────

    def resolve_occupation(self, name: str) -> OccupationLookup:
        """Resolve an occupation name to its index entry and detail record.

        Raises:
            ValueError: If ``name`` is blank.
            UnknownOccupationError: If the sources do not know the occupation.
            ExternalSourceError: If a source call fails (nothing is written).
            ConflictError: If a concurrent writer indexed the name differently.
            StorageUnavailableError: If the document store fails.
        """
        key = normalize_occupation_name(name)
        if not key:
            raise ValueError("occupation name must not be blank")

        entry = self._index.lookup(name)
        if entry is not None:
            detail = self._details.get(entry.anzsco_code)
            if detail is not None:
                logger.debug("occupation hit | %r → %s", name, entry.anzsco_code)
                return OccupationLookup(entry=entry, detail=detail)

        with self._locks.hold(f"occupation:{key}"):
            entry = self._index.lookup(name)
            if entry is None:
                return self._fill_occupation(name)

            detail = self._details.get(entry.anzsco_code)
            if detail is None:
                logger.info("detail miss | %s — fetching", entry.anzsco_code)
                detail = self._detail_source.fetch_detail(entry.anzsco_code)
                self._index.ensure_code_marker(entry.anzsco_code)
                self.store_detail(entry.anzsco_code, detail)
            return OccupationLookup(entry=entry, detail=detail)

    def _fill_occupation(self, name: str) -> OccupationLookup:
        logger.info("occupation miss | %r — classifying", name)
        classification = self._classifier.classify(name)
        code = classification.anzsco_code
        canonical = classification.canonical_name
        if canonical and normalize_occupation_name(canonical) != normalize_occupation_name(name):
            logger.info(
                "%r indexed under the caller's spelling (source name %r)",
                name, canonical,
            )

        detail = self._details.get(code)
        fetched = detail is None
        if fetched:
            detail = self._detail_source.fetch_detail(code)

        entry = self._index.insert(
            OccupationEntry(
                occupation_name=name,
                anzsco_code=code,
                direct_link=classification.direct_link,
            )
        )
        if fetched:
            self.store_detail(entry.anzsco_code, detail)
        return OccupationLookup(entry=entry, detail=detail)

    def store_detail(self, anzsco_code: str, detail: OccupationDetail) -> None:
        """Write a detail record, replacing any existing one for the code.

        Raises:
            DanglingReferenceError: If no index entry owns ``anzsco_code``.
        """
        if not self._index.has_code(anzsco_code):
            raise DanglingReferenceError(
                f"No occupation entry owns ANZSCO code {anzsco_code!r}"
            )
        self._details.put(anzsco_code, detail)

    # ── Query flow ─────────────────────────────────────────────────────────

    def answer_query(
        self,
        query: str,
        occupation_name: str,
        section: str | Section,
    ) -> QueryRecord:
        """Return the cached answer for a query, generating it on a miss.

        Raises:
            ValueError: If the query or occupation is blank, or the section
                        is unknown.
            ExternalSourceError: If generation fails (nothing is written).
            StorageUnavailableError: If the document store fails.
        """
        if not query.strip():
            raise ValueError("query must not be blank")
        if not normalize_occupation_name(occupation_name):
            raise ValueError("occupation name must not be blank")
        section = normalize_section(section)

        record = self._queries.get(query, occupation_name, section)
        if record is not None:
            logger.debug("query hit | %s", record.id)
            return record

        with self._locks.hold(f"query:{fingerprint(query, occupation_name, section)}"):
            record = self._queries.get(query, occupation_name, section)
            if record is not None:
                return record

            logger.info("query miss | occupation=%r section=%s", occupation_name, section.value)
            generated = self._generator.generate(query.strip(), occupation_name.strip(), section)
            record = self._queries.put(
                query,
                occupation_name,
                section,
                generated.response,
                generated.source,
            )

        self._maybe_evict()
        return record

    # ── Eviction ───────────────────────────────────────────────────────────

    def evict_stale(self, now: datetime | None = None) -> int:
        """Remove query records not accessed within the retention window.

        Returns:
            Number of records removed.

        Raises:
            StorageUnavailableError: If the document store fails.
        """
        now = now or self._clock()
        cutoff = now - timedelta(days=self._settings.query_retention_days)
        removed = self._queries.evict_older_than(cutoff)
        with self._eviction_guard:
            self._last_eviction = now
        logger.info("evicted %d query record(s) last accessed before %s", removed, cutoff)
        return removed

    def _maybe_evict(self) -> None:
        """Opportunistic eviction after a write, throttled by EVICTION_INTERVAL_SECONDS.

        Eviction is advisory: a store failure here is logged and the answer
        already written is still returned.
        """
        if not self._settings.evict_on_write:
            return
        now = self._clock()
        interval = timedelta(seconds=self._settings.eviction_interval_seconds)
        with self._eviction_guard:
            if self._last_eviction is not None and now - self._last_eviction < interval:
                return
            # Claim the slot so concurrent writers skip this round.
            self._last_eviction = now
        try:
            self.evict_stale(now)
        except StorageUnavailableError as exc:
            logger.warning("opportunistic eviction failed: %s", exc)
