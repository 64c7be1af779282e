"""
PostgreSQL record stores.

Records live in two tables: `marketplace_responses` (current shape) and the
legacy `responses` table of generic outcome records. Opaque payloads are
stored as JSONB. All access goes through a psycopg ConnectionPool; every
psycopg or validation failure surfaces as StorageError.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Type

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool
from pydantic import ValidationError

from marketplace_monitor.domain.models import MarketplaceRecord, OutcomeRecord, ResponseStats
from marketplace_monitor.domain.stats import build_stats
from marketplace_monitor.exceptions import StorageError
from marketplace_monitor.infrastructure.db_factory import get_sync_connection, get_sync_pool
from marketplace_monitor.store.abstract import (
    DEFAULT_LIMIT,
    DEFAULT_OFFSET,
    AbstractRecordStore,
    normalize_pagination,
    parse_record_id,
)
from marketplace_monitor.utils.logging import get_logger

log = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS public.marketplace_responses (
    id BIGSERIAL PRIMARY KEY,
    url TEXT NOT NULL,
    method TEXT NOT NULL,
    marketplace_data JSONB NOT NULL,
    status_code INTEGER NOT NULL CHECK (status_code >= 0),
    response_data JSONB,
    response_time INTEGER NOT NULL CHECK (response_time >= 0),
    recorded_at TIMESTAMPTZ NOT NULL,
    error TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);
CREATE INDEX IF NOT EXISTS marketplace_responses_recorded_at_idx
    ON public.marketplace_responses (recorded_at DESC, id DESC);

CREATE TABLE IF NOT EXISTS public.responses (
    id BIGSERIAL PRIMARY KEY,
    url TEXT NOT NULL,
    method TEXT NOT NULL,
    request_payload JSONB,
    status_code INTEGER NOT NULL CHECK (status_code >= 0),
    response_data JSONB,
    response_time INTEGER NOT NULL CHECK (response_time >= 0),
    recorded_at TIMESTAMPTZ NOT NULL,
    error TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);
CREATE INDEX IF NOT EXISTS responses_recorded_at_idx
    ON public.responses (recorded_at DESC, id DESC);
"""


def ensure_schema(dsn: Optional[str] = None) -> None:
    """Create both tables and their indexes if they do not exist."""
    conn = get_sync_connection(dsn)
    try:
        with conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)
        conn.commit()
    finally:
        conn.close()
    log.info("Record store schema ready")


def _jsonb(value: Any) -> Optional[Jsonb]:
    return None if value is None else Jsonb(value)


class _PostgresTableStore:
    """
    Shared query logic for one outcome-record table.

    Subclasses name the table, the JSONB payload column and the model that
    rows are parsed into.
    """

    table: str
    payload_column: str
    payload_field: str
    _payload_attr: str
    model: Type[OutcomeRecord]

    def __init__(self, pool: Optional[ConnectionPool] = None, dsn_override: Optional[str] = None) -> None:
        self._dsn_override = dsn_override
        self._pool_instance: Optional[ConnectionPool] = pool
        self._owns_pool = False

    def _get_pool(self) -> ConnectionPool:
        if self._pool_instance is not None:
            return self._pool_instance
        if self._dsn_override:
            self._pool_instance = ConnectionPool(
                conninfo=self._dsn_override, min_size=1, max_size=4, open=True
            )
            self._owns_pool = True
        else:
            self._pool_instance = get_sync_pool()
        return self._pool_instance

    @property
    def _columns(self) -> str:
        return (
            f"id, url, method, {self.payload_column}, status_code, response_data, "
            "response_time, recorded_at, error"
        )

    def _to_record(self, row: Dict[str, Any]) -> OutcomeRecord:
        return self.model.model_validate(
            {
                "id": row["id"],
                "url": row["url"],
                "method": row["method"],
                self.payload_field: row[self.payload_column],
                "statusCode": row["status_code"],
                "responseData": row["response_data"],
                "responseTime": row["response_time"],
                "timestamp": row["recorded_at"],
                "error": row["error"],
            }
        )

    def _query(self, operation: str, sql: str, params: tuple = ()) -> List[Dict[str, Any]]:
        try:
            with self._get_pool().connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(sql, params)
                    return cur.fetchall()
        except psycopg.Error as exc:
            log.error(f"[STORE] {operation} on {self.table} failed", extra={"error": str(exc)})
            raise StorageError(operation, exc) from exc

    def _records(self, operation: str, sql: str, params: tuple = ()) -> List[OutcomeRecord]:
        rows = self._query(operation, sql, params)
        try:
            return [self._to_record(row) for row in rows]
        except ValidationError as exc:
            raise StorageError(operation, exc) from exc

    def create(self, record: OutcomeRecord) -> OutcomeRecord:
        sql = (
            f"INSERT INTO public.{self.table} "
            f"(url, method, {self.payload_column}, status_code, response_data, "
            "response_time, recorded_at, error) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s) RETURNING id;"
        )
        payload = getattr(record, self._payload_attr)
        if hasattr(payload, "to_payload"):
            payload = payload.to_payload()
        params = (
            record.url,
            record.method,
            _jsonb(payload),
            record.status_code,
            _jsonb(record.response_data),
            record.response_time,
            record.timestamp,
            record.error,
        )
        rows = self._query("create", sql, params)
        if not rows:
            raise StorageError("create", RuntimeError("insert returned no id"))
        return record.model_copy(update={"id": rows[0]["id"]})

    def find_all(self, limit: Any = DEFAULT_LIMIT, offset: Any = DEFAULT_OFFSET) -> List[OutcomeRecord]:
        limit, offset = normalize_pagination(limit, offset)
        sql = (
            f"SELECT {self._columns} FROM public.{self.table} "
            "ORDER BY recorded_at DESC, id DESC LIMIT %s OFFSET %s;"
        )
        return self._records("find_all", sql, (limit, offset))

    def find_latest(self) -> Optional[OutcomeRecord]:
        sql = (
            f"SELECT {self._columns} FROM public.{self.table} "
            "ORDER BY recorded_at DESC, id DESC LIMIT 1;"
        )
        records = self._records("find_latest", sql)
        return records[0] if records else None

    def get_stats(self) -> ResponseStats:
        sql = (
            "SELECT COUNT(*) AS total, "
            "COUNT(*) FILTER (WHERE status_code >= 200 AND status_code < 400) AS successful, "
            "COUNT(*) FILTER (WHERE status_code >= 400) AS failed, "
            "AVG(response_time) AS average_response_time "
            f"FROM public.{self.table};"
        )
        row = self._query("get_stats", sql)[0]
        average = row["average_response_time"]
        return build_stats(
            int(row["total"]),
            int(row["successful"]),
            int(row["failed"]),
            float(average) if average is not None else None,
        )

    def close(self) -> None:
        if self._owns_pool and self._pool_instance is not None:
            self._pool_instance.close()
            self._pool_instance = None


class PostgresOutcomeStore(_PostgresTableStore):
    """Legacy collection of generic outcome records."""

    name: str = "postgres"
    table = "responses"
    payload_column = "request_payload"
    payload_field = "requestPayload"
    model = OutcomeRecord
    _payload_attr = "request_payload"


class PostgresRecordStore(_PostgresTableStore, AbstractRecordStore):
    """Marketplace records in `marketplace_responses`."""

    name: str = "postgres"
    table = "marketplace_responses"
    payload_column = "marketplace_data"
    payload_field = "marketplaceData"
    model = MarketplaceRecord
    _payload_attr = "marketplace_data"

    def find_by_id(self, record_id: Any) -> Optional[MarketplaceRecord]:
        wanted = parse_record_id(record_id)
        if wanted is None:
            return None
        sql = f"SELECT {self._columns} FROM public.{self.table} WHERE id = %s;"
        records = self._records("find_by_id", sql, (wanted,))
        return records[0] if records else None

    def find_failed(self, limit: Any = DEFAULT_LIMIT, offset: Any = DEFAULT_OFFSET) -> List[MarketplaceRecord]:
        limit, offset = normalize_pagination(limit, offset)
        sql = (
            f"SELECT {self._columns} FROM public.{self.table} "
            "WHERE status_code = 0 OR status_code >= 400 "
            "ORDER BY recorded_at DESC, id DESC LIMIT %s OFFSET %s;"
        )
        return self._records("find_failed", sql, (limit, offset))


__all__ = ["SCHEMA_SQL", "PostgresOutcomeStore", "PostgresRecordStore", "ensure_schema"]
