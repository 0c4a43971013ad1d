"""
services/container.py
──────────────────────────────────────────────────────────────────────────────
Dependency Injection container.

THIS IS THE ONLY FILE THAT NAMES CONCRETE ADAPTER CLASSES.

Provider selection is driven entirely by environment variables — no code
changes are needed to switch between providers:

  STORE_PROVIDER=memory   (default) → InMemoryDocumentStore
  STORE_PROVIDER=postgres           → PostgresDocumentStore (schema ensured)
  STORE_PROVIDER=firebase           → FirebaseDocumentStore

  LLM_PROVIDER=vertex     (default) → GeminiLLMAdapter
  LLM_PROVIDER=openai               → OpenAILLMAdapter

The occupation list and detail sources are always the Firebase datasets;
their URLs come from OCCUPATION_SOURCE_URL / DETAIL_SOURCE_URL.

Lifetime:
  build_facade() returns a NEW CacheFacade on every call.  The caller owns
  it and passes it to whatever handles requests.  An in-memory store lives
  exactly as long as its facade.
"""
from __future__ import annotations

import logging

from anzsco_cache.adapters.firebase_sources import (
    FirebaseClassificationSource,
    FirebaseDetailSource,
)
from anzsco_cache.config.settings import Settings, get_settings
from anzsco_cache.domain.exceptions import ConfigurationError
from anzsco_cache.ports.document_store_port import DocumentStorePort
from anzsco_cache.ports.llm_port import LLMPort
from anzsco_cache.services.detail_store import OccupationDetailStore
from anzsco_cache.services.explainer import SectionExplainer
from anzsco_cache.services.facade import CacheFacade
from anzsco_cache.services.occupation_index import OccupationIndex
from anzsco_cache.services.query_cache import QueryCache

logger = logging.getLogger(__name__)


def _build_store(settings: Settings) -> DocumentStorePort:
    """Instantiate the DocumentStorePort adapter selected by STORE_PROVIDER."""
    provider = settings.store_provider.lower()
    if provider == "memory":
        from anzsco_cache.adapters.memory_store import InMemoryDocumentStore
        logger.info("Store provider: in-memory")
        return InMemoryDocumentStore()
    if provider == "postgres":
        from anzsco_cache.adapters.postgres_store import PostgresDocumentStore
        logger.info("Store provider: Postgres (%s)", settings.db_table)
        store = PostgresDocumentStore(settings)
        store.ensure_schema()
        return store
    if provider == "firebase":
        from anzsco_cache.adapters.firebase_store import FirebaseDocumentStore
        logger.info("Store provider: Firebase (%s)", settings.firebase_store_url)
        return FirebaseDocumentStore(settings)
    raise ConfigurationError(
        f"Unknown STORE_PROVIDER '{settings.store_provider}'. "
        "Valid values: 'memory', 'postgres', 'firebase'."
    )


def _build_llm(settings: Settings) -> LLMPort:
    """Instantiate the LLMPort adapter selected by LLM_PROVIDER."""
    provider = settings.llm_provider.lower()
    if provider == "openai":
        from anzsco_cache.adapters.openai_llm import OpenAILLMAdapter
        logger.info("LLM provider: OpenAI (%s)", settings.openai_llm_model)
        return OpenAILLMAdapter(settings)
    if provider == "vertex":
        from anzsco_cache.adapters.gcp_auth import GCPAuthManager
        from anzsco_cache.adapters.gemini_llm import GeminiLLMAdapter
        logger.info("LLM provider: Vertex AI Gemini (%s)", settings.gcp_gemini_model)
        return GeminiLLMAdapter(GCPAuthManager(settings), settings)
    raise ConfigurationError(
        f"Unknown LLM_PROVIDER '{settings.llm_provider}'. "
        "Valid values: 'vertex', 'openai'."
    )


def build_facade(settings: Settings | None = None) -> CacheFacade:
    """Build a fully wired CacheFacade.

    Args:
        settings: Settings to wire with; defaults to get_settings().

    Raises:
        ConfigurationError: If an unknown provider name is given.
        AuthenticationError: If required API keys / credentials are missing.
        StorageUnavailableError: If the Postgres schema cannot be ensured.
    """
    settings = settings or get_settings()
    logger.info(
        "Building CacheFacade | store_provider=%s llm_provider=%s",
        settings.store_provider,
        settings.llm_provider,
    )

    # ── Infrastructure adapters (provider-selected) ────────────────────────
    store = _build_store(settings)   # DocumentStorePort
    llm   = _build_llm(settings)     # LLMPort

    # ── Services (receive only Port interfaces, not concrete types) ────────
    facade = CacheFacade(
        index=OccupationIndex(store),
        details=OccupationDetailStore(store),
        queries=QueryCache(store),
        classifier=FirebaseClassificationSource(settings),
        detail_source=FirebaseDetailSource(settings),
        generator=SectionExplainer(llm),
        settings=settings,
    )

    logger.info("CacheFacade ready | llm=%s", llm.model_name)
    return facade
