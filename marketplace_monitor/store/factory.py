"""
Record store registry.

Maps STORE_BACKEND values to store constructors so the server, the CLI and
the seeding script build stores the same way.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from marketplace_monitor.config import Settings, get_settings
from marketplace_monitor.exceptions import ConfigurationError
from marketplace_monitor.infrastructure.db_factory import build_dsn, get_sync_pool
from marketplace_monitor.store.abstract import RecordStore
from marketplace_monitor.store.memory import MemoryRecordStore
from marketplace_monitor.store.postgres import PostgresRecordStore


def _postgres(settings: Settings) -> RecordStore:
    pool = get_sync_pool(
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        dsn=build_dsn(settings),
    )
    return PostgresRecordStore(pool=pool)


def _memory(settings: Settings) -> RecordStore:
    del settings
    return MemoryRecordStore()


def _store_factories() -> Dict[str, Callable[[Settings], RecordStore]]:
    """Registry of available store backends."""
    return {
        "postgres": _postgres,
        "memory": _memory,
    }


def available_backends() -> List[str]:
    return sorted(_store_factories().keys())


def create_record_store(settings: Optional[Settings] = None) -> RecordStore:
    """Build the marketplace record store selected by STORE_BACKEND."""
    settings = settings or get_settings()
    factories = _store_factories()
    if settings.store_backend not in factories:
        raise ConfigurationError(
            f"Unknown store backend '{settings.store_backend}'. Available: {', '.join(factories)}"
        )
    return factories[settings.store_backend](settings)


__all__ = ["available_backends", "create_record_store"]
