"""
adapters/postgres_store.py
──────────────────────────────────────────────────────────────────────────────
Implements DocumentStorePort using psycopg2 and a single JSONB table.

Database layout (created by ensure_schema()):
  Table : cache_documents          (name configurable via DB_TABLE)
  Cols  : collection text, doc_key text, document jsonb, updated_at timestamptz
  PK    : (collection, doc_key)

Four atomic methods match DocumentStorePort:
  get     → SELECT by primary key
  put     → INSERT … ON CONFLICT DO UPDATE (whole-document replace)
  delete  → DELETE by primary key
  list    → SELECT every row of one collection

Connection management:
  - A single autocommit connection is opened lazily and reused, so every
    statement is its own transaction and a put() is visible to the next
    get() on any connection.
  - On OperationalError the connection is reset and one retry is attempted.
  - For multi-threaded servers, replace with psycopg2.pool.ThreadedConnectionPool
    — change only this file.
"""
from __future__ import annotations

import logging
from typing import Any

import psycopg2
import psycopg2.extras
from psycopg2 import sql

from anzsco_cache.config.settings import Settings
from anzsco_cache.domain.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)


class PostgresDocumentStore:
    """psycopg2 + JSONB implementation of DocumentStorePort.

    Injected into the cache stores via services/container.py.
    """

    def __init__(self, settings: Settings) -> None:
        self._dsn = settings.db_dsn
        self._table = sql.Identifier(settings.db_table)
        self._conn: Any = None
        logger.debug(
            "PostgresDocumentStore ready | dsn=%s table=%s",
            self._dsn,
            settings.db_table,
        )

    # ── DocumentStorePort implementation ───────────────────────────────────

    def get(self, collection: str, key: str) -> dict | None:
        query = sql.SQL(
            "SELECT document FROM {} WHERE collection = %s AND doc_key = %s"
        ).format(self._table)
        rows = self._execute(query, (collection, key), "get")
        return rows[0]["document"] if rows else None

    def put(self, collection: str, key: str, document: dict) -> None:
        query = sql.SQL(
            """
            INSERT INTO {} (collection, doc_key, document, updated_at)
            VALUES (%s, %s, %s, now())
            ON CONFLICT (collection, doc_key)
            DO UPDATE SET document = EXCLUDED.document,
                          updated_at = EXCLUDED.updated_at
            """
        ).format(self._table)
        self._execute(query, (collection, key, psycopg2.extras.Json(document)), "put")

    def delete(self, collection: str, key: str) -> None:
        query = sql.SQL(
            "DELETE FROM {} WHERE collection = %s AND doc_key = %s"
        ).format(self._table)
        self._execute(query, (collection, key), "delete")

    def list(self, collection: str) -> dict[str, dict]:
        query = sql.SQL(
            "SELECT doc_key, document FROM {} WHERE collection = %s ORDER BY doc_key"
        ).format(self._table)
        rows = self._execute(query, (collection,), "list")
        return {row["doc_key"]: row["document"] for row in rows}

    # ── Schema ─────────────────────────────────────────────────────────────

    def ensure_schema(self) -> None:
        """Create the document table if it does not exist (idempotent)."""
        query = sql.SQL(
            """
            CREATE TABLE IF NOT EXISTS {} (
                collection  text        NOT NULL,
                doc_key     text        NOT NULL,
                document    jsonb       NOT NULL,
                updated_at  timestamptz NOT NULL DEFAULT now(),
                PRIMARY KEY (collection, doc_key)
            )
            """
        ).format(self._table)
        self._execute(query, (), "ensure_schema")
        logger.info("PostgresDocumentStore: schema ensured")

    # ── Connection helpers ─────────────────────────────────────────────────

    def _get_conn(self) -> Any:
        """Return an open connection, creating or reusing one."""
        if self._conn is None or self._conn.closed:
            self._conn = self._new_conn()
        return self._conn

    def _new_conn(self) -> Any:
        try:
            conn = psycopg2.connect(self._dsn)
            conn.autocommit = True
            logger.debug("PostgresDocumentStore: new connection opened")
            return conn
        except psycopg2.Error as exc:
            raise StorageUnavailableError(f"Cannot connect to database: {exc}") from exc

    def _execute(self, query: sql.Composable, params: tuple, op: str) -> list[dict]:
        """Execute a statement and return rows as dicts, with one auto-reconnect."""
        for attempt in (1, 2):
            conn = self._get_conn()
            try:
                with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
                    cur.execute(query, params)
                    if cur.description is None:
                        return []
                    return list(cur.fetchall())
            except psycopg2.OperationalError as exc:
                if attempt == 1:
                    logger.warning("DB OperationalError during %s — reconnecting: %s", op, exc)
                    self._conn = None
                else:
                    raise StorageUnavailableError(
                        f"{op} failed after reconnect: {exc}"
                    ) from exc
            except psycopg2.Error as exc:
                raise StorageUnavailableError(f"{op} failed: {exc}") from exc
        return []  # unreachable

    def close(self) -> None:
        """Explicitly close the connection (optional — GC handles it otherwise)."""
        if self._conn and not self._conn.closed:
            self._conn.close()
            logger.debug("PostgresDocumentStore: connection closed")
