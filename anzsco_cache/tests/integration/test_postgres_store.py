"""
tests/integration/test_postgres_store.py
──────────────────────────────────────────────────────────────────────────────
Integration tests for PostgresDocumentStore.

Requires a running PostgreSQL instance the DB_DSN user can create tables in.
These tests are marked @pytest.mark.integration and are SKIPPED in the
standard test run.

Run with:
  pytest -m integration anzsco_cache/tests/integration/test_postgres_store.py -v

Environment:
  DB_DSN defaults to "dbname=anzsco_cache"
"""
from __future__ import annotations

import uuid
from dataclasses import replace

import pytest

from anzsco_cache.domain.models import OccupationEntry
from anzsco_cache.services.occupation_index import OccupationIndex
from anzsco_cache.services.query_cache import QueryCache

pytestmark = pytest.mark.integration


@pytest.fixture(scope="module")
def pg_store():
    """A real PostgresDocumentStore on a throwaway table."""
    from anzsco_cache.adapters.postgres_store import PostgresDocumentStore
    from anzsco_cache.config.settings import get_settings
    settings = replace(get_settings(), db_table=f"cache_test_{uuid.uuid4().hex[:8]}")
    store = PostgresDocumentStore(settings)
    store.ensure_schema()
    yield store
    store.close()


@pytest.fixture
def collection():
    return f"c_{uuid.uuid4().hex[:8]}"


class TestDocumentStore:
    def test_get_missing_is_none(self, pg_store, collection):
        assert pg_store.get(collection, "nothing") is None

    def test_put_then_get(self, pg_store, collection):
        doc = {"title": "Chef", "tasks": ["Plan menus", "Prepare food"]}
        pg_store.put(collection, "351311", doc)
        assert pg_store.get(collection, "351311") == doc

    def test_put_replaces_whole_document(self, pg_store, collection):
        pg_store.put(collection, "k", {"a": 1, "b": 2})
        pg_store.put(collection, "k", {"a": 3})
        assert pg_store.get(collection, "k") == {"a": 3}

    def test_delete(self, pg_store, collection):
        pg_store.put(collection, "k", {"a": 1})
        pg_store.delete(collection, "k")
        assert pg_store.get(collection, "k") is None

    def test_delete_missing_is_noop(self, pg_store, collection):
        pg_store.delete(collection, "never-written")

    def test_list_is_scoped_to_collection(self, pg_store, collection):
        pg_store.put(collection, "a", {"n": 1})
        pg_store.put(collection, "b", {"n": 2})
        pg_store.put(f"{collection}_other", "c", {"n": 3})
        assert pg_store.list(collection) == {"a": {"n": 1}, "b": {"n": 2}}

    def test_ensure_schema_is_idempotent(self, pg_store):
        pg_store.ensure_schema()


class TestServicesOnPostgres:
    def test_index_round_trip(self, pg_store):
        index = OccupationIndex(pg_store)
        name = f"Test Occupation {uuid.uuid4().hex[:6]}"
        index.insert(OccupationEntry(occupation_name=name, anzsco_code="999999"))
        assert index.lookup(name.upper()).anzsco_code == "999999"
        assert index.has_code("999999")

    def test_query_cache_round_trip(self, pg_store):
        queries = QueryCache(pg_store)
        query = f"question {uuid.uuid4().hex}"
        stored = queries.put(query, "Chef", "visa", "An answer.", "gpt-test")
        hit = queries.get(query, "Chef", "visa")
        assert hit.id == stored.id
        assert hit.accessed_at > stored.accessed_at
