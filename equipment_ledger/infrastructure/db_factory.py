"""
Database connection factory utilities for the equipment ledger.

Provides centralized management of the PostgreSQL connection pool used by the
postgres storage backend. The PoolManager singleton ensures the pool is closed
on application exit.

Includes retry logic for transient connection failures using tenacity.
"""

from __future__ import annotations

import atexit
import threading
from typing import Optional

import psycopg
from psycopg_pool import ConnectionPool, PoolTimeout
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from equipment_ledger.config import get_settings
from equipment_ledger.utils.logging import get_logger

log = get_logger(__name__)

POOL_WAIT_SECONDS = 5.0


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
    retry=retry_if_exception_type(PoolTimeout),
    reraise=True,
)
def _open_pool(dsn: str, min_size: int, max_size: int) -> ConnectionPool:
    """
    Open a pool and wait until ``min_size`` connections are established.

    Retries up to 3 times with exponential backoff while the server is
    unreachable; the half-open pool is closed before each retry.

    Raises
    ------
    PoolTimeout
        If the pool cannot fill after all retry attempts.
    """
    pool = ConnectionPool(conninfo=dsn, min_size=min_size, max_size=max_size, open=True)
    try:
        pool.wait(timeout=POOL_WAIT_SECONDS)
    except PoolTimeout:
        log.warning("database not ready, pool closed", extra={"min_size": min_size})
        pool.close()
        raise
    return pool


class PoolManager:
    """
    Thread-safe singleton for managing the database connection pool.

    Handles lifecycle management with automatic cleanup via atexit hook.
    """

    _instance: Optional["PoolManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "PoolManager":
        """Create or return the singleton instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._sync_pool = None
                atexit.register(cls._instance.close_all)
            return cls._instance

    def get_sync_pool(self, min_size: int = 1, max_size: int = 10) -> ConnectionPool:
        """
        Get or create the synchronous connection pool.

        Parameters
        ----------
        min_size : int
            Minimum number of idle connections to keep.
        max_size : int
            Maximum total connections in the pool.

        Returns
        -------
        ConnectionPool
            The managed sync pool instance.
        """
        with self._lock:
            if self._sync_pool is None:
                self._sync_pool = _open_pool(_dsn(), min_size=min_size, max_size=max_size)
            return self._sync_pool

    def close_all(self) -> None:
        """
        Close the managed pool and release resources.

        This is called automatically on exit via atexit hook.
        """
        with self._lock:
            if self._sync_pool is not None:
                try:
                    self._sync_pool.close()
                except psycopg.Error as exc:
                    log.warning("pool close failed", extra={"error": str(exc)})
                finally:
                    self._sync_pool = None


def _dsn() -> str:
    """Compose a DSN string from settings."""
    return get_settings().dsn


def get_sync_pool(min_size: int = 1, max_size: int = 10) -> ConnectionPool:
    """
    Get or create a synchronous connection pool via PoolManager.
    """
    manager = PoolManager()
    return manager.get_sync_pool(min_size=min_size, max_size=max_size)


__all__ = [
    "PoolManager",
    "get_sync_pool",
]
