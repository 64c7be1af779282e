"""
Record store interfaces for the Marketplace Monitor.

Concrete stores (PostgreSQL, in-memory) implement the RecordStore protocol for
marketplace records; the legacy generic-record collection implements the
narrower OutcomeStore protocol. Both order history newest-first by timestamp.
"""

from __future__ import annotations

import abc
import re
from typing import Any, List, Optional, Protocol, Tuple, runtime_checkable

from marketplace_monitor.domain.models import MarketplaceRecord, OutcomeRecord, ResponseStats

DEFAULT_LIMIT = 100
DEFAULT_OFFSET = 0

# PostgreSQL BIGINT ceiling; LIMIT, OFFSET and ids beyond it are rejected by the server.
MAX_BIGINT = 2**63 - 1

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _leading_int(value: Any) -> Optional[int]:
    """Read the integer prefix of a value: `"12abc"` -> 12, `"3.5"` -> 3, `"abc"` -> None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    text = match.group(1)
    if len(text.lstrip("+-").lstrip("0")) > len(str(MAX_BIGINT)):
        return -(MAX_BIGINT + 1) if text.startswith("-") else MAX_BIGINT + 1
    return int(text)


def _strict_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def normalize_pagination(limit: Any = None, offset: Any = None) -> Tuple[int, int]:
    """
    Resolve raw pagination inputs to `(limit, offset)`.

    Each value is read by its leading integer, so `"20abc"` means 20.
    Missing, non-numeric, zero or negative limits fall back to 100, as does a
    limit too large for the database. Missing, non-numeric or negative offsets
    fall back to 0; oversized offsets are capped.
    """
    parsed_limit = _leading_int(limit)
    parsed_offset = _leading_int(offset)
    if parsed_limit is None or parsed_limit <= 0 or parsed_limit > MAX_BIGINT:
        parsed_limit = DEFAULT_LIMIT
    if parsed_offset is None or parsed_offset < 0:
        parsed_offset = DEFAULT_OFFSET
    return parsed_limit, min(parsed_offset, MAX_BIGINT)


def parse_record_id(record_id: Any) -> Optional[int]:
    """Store ids are positive integers; anything else cannot match a record."""
    parsed = _strict_int(record_id)
    if parsed is None or parsed <= 0 or parsed > MAX_BIGINT:
        return None
    return parsed


@runtime_checkable
class OutcomeStore(Protocol):
    """
    Operations offered by the generic outcome-record collection.
    """

    def create(self, record: OutcomeRecord) -> OutcomeRecord:
        """Persist a record and return it with its assigned id."""
        ...

    def find_all(self, limit: Any = DEFAULT_LIMIT, offset: Any = DEFAULT_OFFSET) -> List[OutcomeRecord]:
        ...

    def find_latest(self) -> Optional[OutcomeRecord]:
        ...

    def get_stats(self) -> ResponseStats:
        ...


@runtime_checkable
class RecordStore(Protocol):
    """
    Common interface all marketplace record stores must implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier of the backend.
    """

    name: str

    def create(self, record: MarketplaceRecord) -> MarketplaceRecord:
        """
        Persist a record and return a copy carrying its assigned id.

        Raises
        ------
        StorageError
            If the store is unreachable or rejects the write.
        """
        ...

    def find_all(self, limit: Any = DEFAULT_LIMIT, offset: Any = DEFAULT_OFFSET) -> List[MarketplaceRecord]:
        """Newest-first page of records."""
        ...

    def find_by_id(self, record_id: Any) -> Optional[MarketplaceRecord]:
        ...

    def find_latest(self) -> Optional[MarketplaceRecord]:
        ...

    def find_failed(self, limit: Any = DEFAULT_LIMIT, offset: Any = DEFAULT_OFFSET) -> List[MarketplaceRecord]:
        """Newest-first page of attempts with no response or a status >= 400."""
        ...

    def get_stats(self) -> ResponseStats:
        ...

    def close(self) -> None:
        ...


class AbstractRecordStore(abc.ABC):
    """
    Optional ABC helper for class-based store implementations.
    """

    name: str

    @abc.abstractmethod
    def create(self, record: MarketplaceRecord) -> MarketplaceRecord:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def find_all(self, limit: Any = DEFAULT_LIMIT, offset: Any = DEFAULT_OFFSET) -> List[MarketplaceRecord]:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def find_by_id(self, record_id: Any) -> Optional[MarketplaceRecord]:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def find_failed(self, limit: Any = DEFAULT_LIMIT, offset: Any = DEFAULT_OFFSET) -> List[MarketplaceRecord]:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def get_stats(self) -> ResponseStats:  # pragma: no cover
        raise NotImplementedError

    def find_latest(self) -> Optional[MarketplaceRecord]:
        page = self.find_all(limit=1, offset=0)
        return page[0] if page else None

    def close(self) -> None:
        """Release resources held by the store (no-op by default)."""


__all__ = [
    "DEFAULT_LIMIT",
    "DEFAULT_OFFSET",
    "MAX_BIGINT",
    "AbstractRecordStore",
    "OutcomeStore",
    "RecordStore",
    "normalize_pagination",
    "parse_record_id",
]
