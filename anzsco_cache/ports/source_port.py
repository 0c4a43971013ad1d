"""
ports/source_port.py
──────────────────────────────────────────────────────────────────────────────
Abstract interfaces for the three external sources the cache sits in front of.

Sources are read-only inputs: they never see or mutate cache state.  Every
failure must surface as ExternalSourceError (or a subclass) so the
CacheFacade can abort the flow before writing anything.

  ClassificationSourcePort  occupation name → ANZSCO code + reference link
  DetailSourcePort          ANZSCO code     → OccupationDetail
  GenerationSourcePort      query triple    → generated answer + provenance

Fuzzy or semantic matching of occupation names, if any, belongs in a
ClassificationSourcePort implementation — never in the cache.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from anzsco_cache.domain.models import (
    Classification,
    GeneratedResponse,
    OccupationDetail,
    Section,
)


@runtime_checkable
class ClassificationSourcePort(Protocol):
    """Contract for resolving an occupation name to its ANZSCO code."""

    def classify(self, occupation_name: str) -> Classification:
        """Classify a free-text occupation name.

        Raises:
            UnknownOccupationError: If the source has no such occupation.
            ExternalSourceError: On any other source failure.
        """
        ...


@runtime_checkable
class DetailSourcePort(Protocol):
    """Contract for fetching enriched metadata for an ANZSCO code."""

    def fetch_detail(self, anzsco_code: str) -> OccupationDetail:
        """Fetch the detail record for a code.

        Raises:
            UnknownOccupationError: If the source has no record for the code.
            ExternalSourceError: On any other source failure.
        """
        ...


@runtime_checkable
class GenerationSourcePort(Protocol):
    """Contract for generating explanatory text for a query."""

    def generate(
        self,
        query: str,
        occupation_name: str,
        section: Section,
    ) -> GeneratedResponse:
        """Generate an answer.

        Raises:
            ExternalSourceError: If generation fails or yields nothing.
        """
        ...
