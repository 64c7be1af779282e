"""
Database connection factory utilities for the Marketplace Monitor.

Provides centralized management of the PostgreSQL connection pool shared by
the record stores, with lifecycle management: the PoolManager singleton closes
the pool on application exit.

Includes retry logic for transient connection failures at startup using
tenacity. Per-record writes are never retried.
"""

from __future__ import annotations

import atexit
import threading
from typing import Optional

import psycopg
from psycopg import Connection
from psycopg_pool import ConnectionPool
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from marketplace_monitor.config import Settings, get_settings
from marketplace_monitor.utils.logging import get_logger

log = get_logger(__name__)


def build_dsn(settings: Optional[Settings] = None) -> str:
    """
    Compose a DSN string from settings; DATABASE_URL wins when present.
    """
    settings = settings or get_settings()
    if settings.database_url:
        return settings.database_url
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


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
                cls._instance._sync_pool: Optional[ConnectionPool] = None
                atexit.register(cls._instance.close_all)
            return cls._instance

    def get_sync_pool(
        self,
        min_size: int = 1,
        max_size: int = 10,
        dsn: Optional[str] = None,
    ) -> ConnectionPool:
        """
        Get or create the synchronous connection pool.

        Parameters
        ----------
        min_size : int
            Minimum number of idle connections to keep.
        max_size : int
            Maximum total connections in the pool.
        dsn : str | None
            Connection string; defaults to the one built from settings.

        Returns
        -------
        ConnectionPool
            The managed sync pool instance.
        """
        with self._lock:
            if self._sync_pool is None:
                self._sync_pool = ConnectionPool(
                    conninfo=dsn or build_dsn(),
                    min_size=min_size,
                    max_size=max_size,
                    open=True,
                )
                log.info(
                    "Opened connection pool",
                    extra={"pool_min_size": min_size, "pool_max_size": max_size},
                )
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
                    log.warning("Error while closing connection pool", extra={"error": str(exc)})
                finally:
                    self._sync_pool = None


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_sync_connection(dsn: Optional[str] = None) -> Connection:
    """
    Acquire a dedicated synchronous connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection
    errors. Used for one-off operations such as schema creation; the stores
    go through the pool.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    return psycopg.connect(dsn or build_dsn())


def get_sync_pool(
    min_size: int = 1,
    max_size: int = 10,
    dsn: Optional[str] = None,
) -> ConnectionPool:
    """
    Get or create the synchronous connection pool via PoolManager.
    """
    manager = PoolManager()
    return manager.get_sync_pool(min_size=min_size, max_size=max_size, dsn=dsn)


def close_pools() -> None:
    PoolManager().close_all()


__all__ = [
    "PoolManager",
    "build_dsn",
    "close_pools",
    "get_sync_connection",
    "get_sync_pool",
]
