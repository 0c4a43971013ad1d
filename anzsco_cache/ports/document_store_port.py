"""
ports/document_store_port.py
──────────────────────────────────────────────────────────────────────────────
Abstract interface for the document store backing all three cache tiers.

The port is deliberately generic: named collections of JSON documents
addressed by a string key.  The stores in services/ decide the collection
names and key formats; adapters only move dicts in and out.

  get     — single document by key (None when absent)
  put     — create-or-replace a document (whole document, never a patch)
  delete  — remove a document (absent keys are not an error)
  list    — every document in a collection

Adapters must give read-after-write consistency per key: a put() is visible
to the next get() of the same key.

Current implementations: InMemoryDocumentStore, PostgresDocumentStore,
FirebaseDocumentStore.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class DocumentStorePort(Protocol):
    """Contract for a keyed JSON document store."""

    def get(self, collection: str, key: str) -> dict | None:
        """Fetch one document.

        Returns:
            The stored document, or None if the key is absent.

        Raises:
            StorageUnavailableError: On connection or backend failure.
        """
        ...

    def put(self, collection: str, key: str, document: dict) -> None:
        """Store a document, replacing any existing one under the same key.

        Raises:
            StorageUnavailableError: On connection or backend failure.
        """
        ...

    def delete(self, collection: str, key: str) -> None:
        """Remove a document.  Deleting an absent key is a no-op.

        Raises:
            StorageUnavailableError: On connection or backend failure.
        """
        ...

    def list(self, collection: str) -> dict[str, dict]:
        """Return every document in a collection.

        Returns:
            Dict mapping key → document.  Empty when the collection is empty.

        Raises:
            StorageUnavailableError: On connection or backend failure.
        """
        ...
