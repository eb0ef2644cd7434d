"""
PostgreSQL storage backend.

Entries live as JSONB rows in ``ledger_entries`` and counters in
``ledger_counters``, both partitioned by namespace. Each transaction takes a
transaction-scoped advisory lock on its namespace, so writers against the same
registry are serialized while different registries proceed independently.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator, Iterator, List, Optional, Tuple

import psycopg
from psycopg import Connection
from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool

from equipment_ledger.storage.abstract import (
    COUNTER_START,
    AbstractLedgerStorage,
    Payload,
    StorageError,
)
from equipment_ledger.utils.logging import get_logger

log = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS ledger_entries (
    namespace  TEXT   NOT NULL,
    collection TEXT   NOT NULL,
    key        BIGINT NOT NULL,
    payload    JSONB  NOT NULL,
    PRIMARY KEY (namespace, collection, key)
);
CREATE INDEX IF NOT EXISTS ledger_entries_payload_idx
    ON ledger_entries USING GIN (payload jsonb_path_ops);
CREATE TABLE IF NOT EXISTS ledger_counters (
    namespace TEXT   NOT NULL,
    name      TEXT   NOT NULL,
    value     BIGINT NOT NULL,
    PRIMARY KEY (namespace, name)
);
"""


class _PostgresTransaction:
    def __init__(self, conn: Connection, namespace: str) -> None:
        self._conn = conn
        self._namespace = namespace

    def get(self, collection: str, key: int) -> Optional[Payload]:
        return _select_entry(self._conn, self._namespace, collection, key)

    def put(self, collection: str, key: int, value: Payload) -> None:
        self._conn.execute(
            """
            INSERT INTO ledger_entries (namespace, collection, key, payload)
            VALUES (%s, %s, %s, %s)
            ON CONFLICT (namespace, collection, key)
            DO UPDATE SET payload = EXCLUDED.payload
            """,
            (self._namespace, collection, key, Jsonb(value)),
        )

    def peek_counter(self, name: str) -> int:
        row = self._conn.execute(
            "SELECT value FROM ledger_counters WHERE namespace = %s AND name = %s",
            (self._namespace, name),
        ).fetchone()
        return int(row[0]) if row else COUNTER_START

    def set_counter(self, name: str, value: int) -> None:
        self._conn.execute(
            """
            INSERT INTO ledger_counters (namespace, name, value)
            VALUES (%s, %s, %s)
            ON CONFLICT (namespace, name) DO UPDATE SET value = EXCLUDED.value
            """,
            (self._namespace, name, value),
        )


def _select_entry(
    conn: Connection, namespace: str, collection: str, key: int
) -> Optional[Payload]:
    row = conn.execute(
        "SELECT payload FROM ledger_entries WHERE namespace = %s AND collection = %s AND key = %s",
        (namespace, collection, key),
    ).fetchone()
    return dict(row[0]) if row else None


class PostgresStorage(AbstractLedgerStorage):
    """
    Namespace-scoped storage on top of a psycopg connection pool.

    Parameters
    ----------
    namespace : str
        Registry name partitioning rows in the shared tables.
    pool : ConnectionPool
        Pool handing out connections; typically from ``get_sync_pool()``.
    """

    def __init__(self, namespace: str, pool: ConnectionPool) -> None:
        self.namespace = namespace
        self._pool = pool

    def initialize(self) -> None:
        """Create the ledger tables if they do not exist yet."""
        try:
            with self._pool.connection() as conn:
                conn.execute(SCHEMA_SQL)
        except psycopg.Error as exc:
            raise StorageError(f"schema setup failed for '{self.namespace}': {exc}") from exc
        log.debug("ledger schema ready", extra={"namespace": self.namespace})

    def get(self, collection: str, key: int) -> Optional[Payload]:
        try:
            with self._pool.connection() as conn:
                return _select_entry(conn, self.namespace, collection, key)
        except psycopg.Error as exc:
            raise StorageError(f"read failed for {collection}[{key}]: {exc}") from exc

    def scan(
        self, collection: str, where: Optional[Payload] = None
    ) -> Iterator[Tuple[int, Payload]]:
        sql = "SELECT key, payload FROM ledger_entries WHERE namespace = %s AND collection = %s"
        params: List[Any] = [self.namespace, collection]
        if where:
            # JSONB containment; served by the GIN index on payload.
            sql += " AND payload @> %s"
            params.append(Jsonb(where))
        try:
            with self._pool.connection() as conn:
                rows = conn.execute(sql + " ORDER BY key", params).fetchall()
        except psycopg.Error as exc:
            raise StorageError(f"scan failed for {collection}: {exc}") from exc
        for key, payload in rows:
            yield int(key), dict(payload)

    def count(self, collection: str) -> int:
        try:
            with self._pool.connection() as conn:
                row = conn.execute(
                    "SELECT COUNT(*) FROM ledger_entries WHERE namespace = %s AND collection = %s",
                    (self.namespace, collection),
                ).fetchone()
        except psycopg.Error as exc:
            raise StorageError(f"count failed for {collection}: {exc}") from exc
        return int(row[0])

    @contextmanager
    def transaction(self) -> Generator[_PostgresTransaction, None, None]:
        try:
            with self._pool.connection() as conn:
                with conn.transaction():
                    conn.execute(
                        "SELECT pg_advisory_xact_lock(hashtext(%s))", (self.namespace,)
                    )
                    yield _PostgresTransaction(conn, self.namespace)
        except psycopg.Error as exc:
            raise StorageError(f"transaction failed for '{self.namespace}': {exc}") from exc


__all__ = ["PostgresStorage", "SCHEMA_SQL"]
