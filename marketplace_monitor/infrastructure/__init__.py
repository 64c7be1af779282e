"""
Infrastructure package for the Marketplace Monitor.

Centralizes I/O concerns: PostgreSQL connectivity (pooling, retrying
connects) and the outbound HTTP transport. Keep this layer decoupled from the
pipeline/notifier logic.
"""

from marketplace_monitor.infrastructure.db_factory import (
    build_dsn,
    close_pools,
    get_sync_connection,
    get_sync_pool,
)
from marketplace_monitor.infrastructure.transport import (
    HttpTransport,
    RequestsTransport,
    TransportResponse,
    default_headers,
)

__all__ = [
    "build_dsn",
    "close_pools",
    "get_sync_connection",
    "get_sync_pool",
    "HttpTransport",
    "RequestsTransport",
    "TransportResponse",
    "default_headers",
]
