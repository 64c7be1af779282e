"""
Record store package for the Marketplace Monitor.

Re-exports the store interfaces, the concrete backends and the backend
registry so callers can import from `marketplace_monitor.store` directly.
"""

from marketplace_monitor.store.abstract import (
    DEFAULT_LIMIT,
    DEFAULT_OFFSET,
    AbstractRecordStore,
    OutcomeStore,
    RecordStore,
    normalize_pagination,
    parse_record_id,
)
from marketplace_monitor.store.factory import available_backends, create_record_store
from marketplace_monitor.store.memory import MemoryRecordStore
from marketplace_monitor.store.postgres import (
    PostgresOutcomeStore,
    PostgresRecordStore,
    ensure_schema,
)

__all__ = [
    # Interfaces
    "AbstractRecordStore",
    "OutcomeStore",
    "RecordStore",
    "DEFAULT_LIMIT",
    "DEFAULT_OFFSET",
    "normalize_pagination",
    "parse_record_id",
    # Backends
    "MemoryRecordStore",
    "PostgresOutcomeStore",
    "PostgresRecordStore",
    "ensure_schema",
    # Registry
    "available_backends",
    "create_record_store",
]
