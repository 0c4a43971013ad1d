"""
config/settings.py
──────────────────────────────────────────────────────────────────────────────
Single source of truth for all tuneable parameters.

All values can be overridden via environment variables or a .env file placed
at the project root.  The frozen dataclass ensures settings are never mutated
at runtime.

To swap providers, change the relevant env var — no code edits required:
  STORE_PROVIDER    → memory | postgres | firebase
  LLM_PROVIDER      → vertex | openai
  GCP_GEMINI_MODEL  → swap LLM model
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root (two levels up from this file)
load_dotenv(Path(__file__).parent.parent.parent / ".env")


def _env(key: str, default: str) -> str:
    return os.getenv(key, default)


def _env_int(key: str, default: int) -> int:
    return int(os.getenv(key, str(default)))


def _env_bool(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Immutable application settings loaded from environment variables."""

    # ── Provider selection ──────────────────────────────────────────────────
    # Valid values: "memory" | "postgres" | "firebase"
    store_provider: str = field(
        default_factory=lambda: _env("STORE_PROVIDER", "memory")
    )
    # Valid values: "vertex" | "openai"
    llm_provider: str = field(
        default_factory=lambda: _env("LLM_PROVIDER", "vertex")
    )

    # ── Document store ──────────────────────────────────────────────────────
    db_dsn: str = field(
        default_factory=lambda: _env("DB_DSN", "dbname=anzsco_cache")
    )
    db_table: str = field(
        default_factory=lambda: _env("DB_TABLE", "cache_documents")
    )
    firebase_store_url: str = field(
        default_factory=lambda: _env("FIREBASE_STORE_URL", "")
    )
    firebase_auth_token: str = field(
        default_factory=lambda: _env("FIREBASE_AUTH_TOKEN", "")
    )

    # ── Occupation sources ──────────────────────────────────────────────────
    occupation_source_url: str = field(
        default_factory=lambda: _env(
            "OCCUPATION_SOURCE_URL",
            "https://occupation-search.firebaseio.com/anzsco/.json",
        )
    )
    detail_source_url: str = field(
        default_factory=lambda: _env(
            "DETAIL_SOURCE_URL",
            "https://occupation-search.firebaseio.com/anzsco.json",
        )
    )
    # {code} is replaced with the full ANZSCO code
    anzsco_link_template: str = field(
        default_factory=lambda: _env(
            "ANZSCO_LINK_TEMPLATE",
            "https://www.abs.gov.au/search?query=ANZSCO%20{code}",
        )
    )

    # ── OpenAI ─────────────────────────────────────────────────────────────
    openai_api_key: str = field(
        default_factory=lambda: _env("OPENAI_API_KEY", "")
    )
    openai_llm_model: str = field(
        default_factory=lambda: _env("OPENAI_LLM_MODEL", "gpt-4o")
    )

    # ── GCP / Vertex AI ────────────────────────────────────────────────────
    gcp_project_id: str = field(
        default_factory=lambda: _env("GCP_PROJECT_ID", "")
    )
    gcp_location_id: str = field(
        default_factory=lambda: _env("GCP_LOCATION_ID", "australia-southeast1")
    )
    gcp_gemini_model: str = field(
        default_factory=lambda: _env("GCP_GEMINI_MODEL", "gemini-2.5-flash")
    )
    gcloud_path: str = field(
        default_factory=lambda: _env("GCLOUD_PATH", "gcloud")
    )
    # Pre-issued token (e.g. injected by the runtime); skips gcloud entirely
    gcp_access_token: str = field(
        default_factory=lambda: _env("GCP_ACCESS_TOKEN", "")
    )

    # ── Network ────────────────────────────────────────────────────────────
    https_proxy: str = field(
        default_factory=lambda: _env("HTTPS_PROXY", "")
    )

    # ── Query cache retention ──────────────────────────────────────────────
    query_retention_days: int = field(
        default_factory=lambda: _env_int("QUERY_RETENTION_DAYS", 30)
    )
    evict_on_write: bool = field(
        default_factory=lambda: _env_bool("EVICT_ON_WRITE", False)
    )
    eviction_interval_seconds: int = field(
        default_factory=lambda: _env_int("EVICTION_INTERVAL_SECONDS", 3600)
    )

    # ── HTTP timeouts (seconds) ────────────────────────────────────────────
    source_timeout: int = field(default_factory=lambda: _env_int("SOURCE_TIMEOUT", 10))
    llm_timeout: int    = field(default_factory=lambda: _env_int("LLM_TIMEOUT", 90))
    llm_retries: int    = field(default_factory=lambda: _env_int("LLM_RETRIES", 3))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Returns a cached singleton Settings instance.

    Settings are read-only configuration, so sharing one object per process
    is safe.  Cache state itself is never global: see
    services/container.build_facade().
    """
    return Settings()
