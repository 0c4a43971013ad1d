"""
tests/conftest.py
──────────────────────────────────────────────────────────────────────────────
Shared pytest fixtures and mock adapter implementations.

Mock adapters implement the Port Protocols via structural subtyping — they do
NOT inherit from any base class.  pytest uses them to test service logic
without any real Firebase, LLM or database connections.

Fixture hierarchy:
  clock              → FakeClock (manually advanced UTC time)
  store              → InMemoryDocumentStore
  mock_classifier    → ClassificationSourcePort (counts calls)
  mock_detail_source → DetailSourcePort (counts calls)
  mock_generator     → GenerationSourcePort (counts calls)
  mock_llm           → LLMPort (canned text)
  index / details / queries → the three stores over `store`
  facade             → CacheFacade wired with all of the above
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from anzsco_cache.adapters.memory_store import InMemoryDocumentStore
from anzsco_cache.config.settings import Settings
from anzsco_cache.domain.exceptions import ExternalSourceError, UnknownOccupationError
from anzsco_cache.domain.models import (
    Classification,
    GeneratedResponse,
    OccupationDetail,
    Section,
    normalize_occupation_name,
)
from anzsco_cache.services.detail_store import OccupationDetailStore
from anzsco_cache.services.facade import CacheFacade
from anzsco_cache.services.occupation_index import OccupationIndex
from anzsco_cache.services.query_cache import QueryCache


# ── Settings fixture ───────────────────────────────────────────────────────

def make_settings(**overrides) -> Settings:
    """Settings with sane offline test defaults; keyword args override."""
    values = dict(
        store_provider="memory",
        llm_provider="openai",
        db_dsn="dbname=anzsco_cache_test",
        db_table="cache_documents",
        firebase_store_url="",
        firebase_auth_token="",
        occupation_source_url="https://example.test/anzsco/.json",
        detail_source_url="https://example.test/anzsco.json",
        anzsco_link_template="https://example.test/anzsco/{code}",
        openai_api_key="sk-test-key",
        openai_llm_model="gpt-test",
        gcp_project_id="test-project",
        gcp_location_id="us-central1",
        gcp_gemini_model="gemini-test",
        gcloud_path="/usr/bin/gcloud",
        gcp_access_token="",
        https_proxy="",
        query_retention_days=30,
        evict_on_write=False,
        eviction_interval_seconds=3600,
        source_timeout=5,
        llm_timeout=5,
        llm_retries=3,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture(scope="session")
def settings() -> Settings:
    return make_settings()


@pytest.fixture(scope="session")
def settings_factory():
    """make_settings() for tests that need a few fields changed."""
    return make_settings


# ── Clock ──────────────────────────────────────────────────────────────────

class FakeClock:
    """Deterministic UTC clock; time only moves when advance() is called."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


# ── Mock sources ───────────────────────────────────────────────────────────

_OCCUPATIONS: dict[str, str] = {
    "software engineer": "261313",
    "registered nurse (aged care)": "254412",
    "chef": "351311",
}

_DETAILS: dict[str, OccupationDetail] = {
    "261313": OccupationDetail(
        title="Software Engineer",
        unit_group="2613 Software and Applications Programmers",
        skill_level="1",
        tasks=["Design", "Test", "Deploy"],
        source="Australian Bureau of Statistics",
        link="https://example.test/anzsco/261313",
    ),
    "254412": OccupationDetail(
        title="Registered Nurse (Aged Care)",
        unit_group="2544 Registered Nurses",
        skill_level="1",
        tasks=["Assess residents", "Plan care", "Administer medication"],
        source="Australian Bureau of Statistics",
    ),
    "351311": OccupationDetail(
        title="Chef",
        unit_group="3513 Chefs",
        skill_level="2",
        tasks=["Plan menus", "Prepare food"],
        source="Australian Bureau of Statistics",
    ),
}


class MockClassificationSource:
    """In-memory classifier; set ``fail`` to simulate an outage."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.fail = False

    def classify(self, occupation_name: str) -> Classification:
        self.calls.append(occupation_name)
        if self.fail:
            raise ExternalSourceError("classification source down")
        code = _OCCUPATIONS.get(normalize_occupation_name(occupation_name))
        if code is None:
            raise UnknownOccupationError(f"No ANZSCO occupation named {occupation_name!r}")
        return Classification(
            anzsco_code=code,
            direct_link=f"https://example.test/anzsco/{code}",
        )


class MockDetailSource:
    """In-memory detail source; set ``fail`` to simulate an outage."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.fail = False

    def fetch_detail(self, anzsco_code: str) -> OccupationDetail:
        self.calls.append(anzsco_code)
        if self.fail:
            raise ExternalSourceError("detail source down")
        if anzsco_code not in _DETAILS:
            raise UnknownOccupationError(f"No ANZSCO unit group for {anzsco_code}")
        return _DETAILS[anzsco_code].model_copy(deep=True)


class MockGenerationSource:
    """Echoes the triple back as the answer; set ``fail`` to simulate an outage."""

    model_name = "mock-llm"

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, Section]] = []
        self.fail = False

    def generate(self, query: str, occupation_name: str, section: Section) -> GeneratedResponse:
        self.calls.append((query, occupation_name, section))
        if self.fail:
            raise ExternalSourceError("generation source down")
        return GeneratedResponse(
            response=f"[{section.value}] {occupation_name}: answer to {query!r}",
            source=self.model_name,
        )


class MockLLMAdapter:
    """Returns a canned answer and records the prompts it was sent."""

    model_name = "mock-llm"

    def __init__(self) -> None:
        self.prompts: list[tuple[str, str]] = []

    def generate_text(self, system_prompt: str, user_message: str) -> str:
        self.prompts.append((system_prompt, user_message))
        return "Software engineers usually need a relevant degree."


# ── pytest fixtures ────────────────────────────────────────────────────────

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def mock_classifier():
    return MockClassificationSource()


@pytest.fixture
def mock_detail_source():
    return MockDetailSource()


@pytest.fixture
def mock_generator():
    return MockGenerationSource()


@pytest.fixture
def mock_llm():
    return MockLLMAdapter()


@pytest.fixture
def index(store):
    return OccupationIndex(store)


@pytest.fixture
def details(store):
    return OccupationDetailStore(store)


@pytest.fixture
def queries(store, clock):
    return QueryCache(store, clock=clock)


@pytest.fixture
def make_facade(index, details, queries, mock_classifier, mock_detail_source,
                mock_generator, clock):
    """Build a CacheFacade over the shared mocks with overridden settings."""
    def _make(**overrides) -> CacheFacade:
        return CacheFacade(
            index=index,
            details=details,
            queries=queries,
            classifier=mock_classifier,
            detail_source=mock_detail_source,
            generator=mock_generator,
            settings=make_settings(**overrides),
            clock=clock,
        )
    return _make


@pytest.fixture
def facade(make_facade):
    return make_facade()
