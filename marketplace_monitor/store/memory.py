"""
In-process record store.

Keeps records in a list guarded by a lock. Used with STORE_BACKEND=memory for
local development and by the test suite; history is lost on restart.
"""

from __future__ import annotations

import itertools
import threading
from typing import Any, List, Optional

from marketplace_monitor.domain.models import MarketplaceRecord, ResponseStats
from marketplace_monitor.domain.stats import summarize
from marketplace_monitor.store.abstract import (
    DEFAULT_LIMIT,
    DEFAULT_OFFSET,
    AbstractRecordStore,
    normalize_pagination,
    parse_record_id,
)


def _recency_key(record: MarketplaceRecord) -> tuple:
    return (record.timestamp, record.id or 0)


class MemoryRecordStore(AbstractRecordStore):
    """Thread-safe list-backed store for marketplace records."""

    name: str = "memory"

    def __init__(self) -> None:
        self._records: List[MarketplaceRecord] = []
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def create(self, record: MarketplaceRecord) -> MarketplaceRecord:
        with self._lock:
            stored = record.model_copy(update={"id": next(self._ids)})
            self._records.append(stored)
        return stored

    def _newest_first(self) -> List[MarketplaceRecord]:
        with self._lock:
            snapshot = list(self._records)
        return sorted(snapshot, key=_recency_key, reverse=True)

    def find_all(self, limit: Any = DEFAULT_LIMIT, offset: Any = DEFAULT_OFFSET) -> List[MarketplaceRecord]:
        limit, offset = normalize_pagination(limit, offset)
        return self._newest_first()[offset : offset + limit]

    def find_by_id(self, record_id: Any) -> Optional[MarketplaceRecord]:
        wanted = parse_record_id(record_id)
        if wanted is None:
            return None
        with self._lock:
            return next((r for r in self._records if r.id == wanted), None)

    def find_failed(self, limit: Any = DEFAULT_LIMIT, offset: Any = DEFAULT_OFFSET) -> List[MarketplaceRecord]:
        limit, offset = normalize_pagination(limit, offset)
        failed = [r for r in self._newest_first() if r.status_code == 0 or r.is_failed]
        return failed[offset : offset + limit]

    def get_stats(self) -> ResponseStats:
        with self._lock:
            snapshot = list(self._records)
        return summarize(snapshot)


__all__ = ["MemoryRecordStore"]
