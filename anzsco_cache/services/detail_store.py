"""
services/detail_store.py
──────────────────────────────────────────────────────────────────────────────
Occupation Detail Store: ANZSCO code → OccupationDetail.

Dumb storage.  put() replaces the whole record; there are no partial field
updates and no deletes.  The referential-integrity check (a detail needs an
owning index entry) is enforced by CacheFacade, not here.
"""
from __future__ import annotations

from anzsco_cache.domain.models import OccupationDetail
from anzsco_cache.ports.document_store_port import DocumentStorePort


class OccupationDetailStore:
    """Code-keyed detail records over a DocumentStorePort."""

    COLLECTION = "occupation_details"

    def __init__(self, store: DocumentStorePort) -> None:
        self._store = store

    def get(self, anzsco_code: str) -> OccupationDetail | None:
        doc = self._store.get(self.COLLECTION, anzsco_code)
        return OccupationDetail.model_validate(doc) if doc is not None else None

    def put(self, anzsco_code: str, detail: OccupationDetail) -> None:
        self._store.put(self.COLLECTION, anzsco_code, detail.model_dump(mode="json"))
