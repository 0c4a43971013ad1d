"""
services/occupation_index.py
──────────────────────────────────────────────────────────────────────────────
Occupation Index: free-text occupation name → ANZSCO code + reference link.

Storage layout (DocumentStorePort):
  occupations/{normalised name}  → OccupationEntry document
  occupation_codes/{anzsco code} → {"anzsco_code": …} ownership marker

The index is append-only.  Entries are never deleted and the only permitted
mutation is refresh_link().  Lookup is an exact match on the trimmed,
case-folded name; fuzzy matching belongs to the classification source.

The ownership marker is written after the entry, so has_code() never reports
a code whose entry is not yet readable.
"""
from __future__ import annotations

import logging

from anzsco_cache.domain.exceptions import ConflictError
from anzsco_cache.domain.models import OccupationEntry, normalize_occupation_name
from anzsco_cache.ports.document_store_port import DocumentStorePort

logger = logging.getLogger(__name__)


class OccupationIndex:
    """Append-only name → code index over a DocumentStorePort."""

    COLLECTION = "occupations"
    CODES_COLLECTION = "occupation_codes"

    def __init__(self, store: DocumentStorePort) -> None:
        self._store = store

    def lookup(self, name: str) -> OccupationEntry | None:
        """Return the entry for ``name``, or None when it is not indexed."""
        key = normalize_occupation_name(name)
        if not key:
            return None
        doc = self._store.get(self.COLLECTION, key)
        return OccupationEntry.model_validate(doc) if doc is not None else None

    def insert(self, entry: OccupationEntry) -> OccupationEntry:
        """Add an entry to the index.

        Re-inserting an entry with the same name and code is a no-op that
        returns the stored entry (its original spelling and link win).

        Raises:
            ConflictError: If the name is already indexed under another code.
        """
        existing = self.lookup(entry.occupation_name)
        if existing is not None:
            if existing.anzsco_code != entry.anzsco_code:
                raise ConflictError(
                    f"{entry.occupation_name!r} is already indexed as "
                    f"{existing.anzsco_code}, not {entry.anzsco_code}"
                )
            self.ensure_code_marker(existing.anzsco_code)
            return existing

        # Marker first: a marker without an entry only permits detail writes
        # for a code the next insert will own anyway.
        self._mark_code(entry.anzsco_code)
        self._store.put(self.COLLECTION, entry.key, entry.model_dump(mode="json"))
        logger.info("Indexed %r → %s", entry.occupation_name, entry.anzsco_code)
        return entry

    def ensure_code_marker(self, anzsco_code: str) -> None:
        """Write the ownership marker for an indexed code if it is missing."""
        if not self.has_code(anzsco_code):
            logger.warning("Restoring missing code marker for %s", anzsco_code)
            self._mark_code(anzsco_code)

    def _mark_code(self, anzsco_code: str) -> None:
        self._store.put(self.CODES_COLLECTION, anzsco_code, {"anzsco_code": anzsco_code})

    def refresh_link(self, name: str, direct_link: str) -> OccupationEntry | None:
        """Replace the reference link of an existing entry.

        Returns:
            The updated entry, or None if ``name`` is not indexed.
        """
        existing = self.lookup(name)
        if existing is None:
            return None
        updated = existing.model_copy(update={"direct_link": direct_link.strip()})
        self._store.put(self.COLLECTION, updated.key, updated.model_dump(mode="json"))
        return updated

    def has_code(self, anzsco_code: str) -> bool:
        """True if some indexed entry owns ``anzsco_code``."""
        return self._store.get(self.CODES_COLLECTION, anzsco_code) is not None

    def entries(self) -> list[OccupationEntry]:
        """Every indexed entry, ordered by normalised name."""
        docs = self._store.list(self.COLLECTION)
        return [OccupationEntry.model_validate(docs[k]) for k in sorted(docs)]
