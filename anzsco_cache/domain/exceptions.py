"""
domain/exceptions.py
──────────────────────────────────────────────────────────────────────────────
Custom exception hierarchy.

All exceptions are rooted at ANZSCOCacheError so callers can catch broadly
(except ANZSCOCacheError) or narrowly (except ConflictError).

A cache miss is NOT an exception: stores return None and the CacheFacade
falls through to the external source.  Everything below is surfaced to the
caller unmodified, so the delivery layer can render "unavailable" instead
of a stale or fabricated answer.

When adding an HTTP layer, map these to status codes:
  ConflictError            → 409
  DanglingReferenceError   → 409
  UnknownOccupationError   → 404
  ExternalSourceError      → 502
  StorageUnavailableError  → 503
"""
from __future__ import annotations


class ANZSCOCacheError(Exception):
    """Base exception for all application errors."""


class ConfigurationError(ANZSCOCacheError):
    """Raised when required configuration is missing or invalid."""


class AuthenticationError(ANZSCOCacheError):
    """Raised when an access token or API key cannot be obtained."""


class ConflictError(ANZSCOCacheError):
    """Raised when an occupation name is already indexed under another code."""


class DanglingReferenceError(ANZSCOCacheError):
    """Raised when a detail record is written for a code no entry owns."""


class ExternalSourceError(ANZSCOCacheError):
    """Raised when a classification, detail or generation call fails."""


class UnknownOccupationError(ExternalSourceError):
    """Raised when a source has no record for the requested name or code."""


class LLMError(ExternalSourceError):
    """Raised when the LLM API call fails or returns no usable text."""


class StorageUnavailableError(ANZSCOCacheError):
    """Raised when the document store is unreachable or rejects a request."""
