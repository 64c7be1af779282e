"""
Marketplace Monitor - scheduled marketplace pings with history and live updates.

Every minute (configurable) the monitor generates a synthetic marketplace
observation, POSTs it to an external endpoint, and records the outcome:

- successful and failed attempts are persisted alike (status 0 = no response)
- history, statistics and the latest observation are served over REST
- connected Socket.IO clients receive each new observation and fresh stats

The web server lives in `marketplace_monitor.server`; the CLI entry point is
`marketplace_monitor.main`.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from marketplace_monitor.config import Settings, get_settings
from marketplace_monitor.domain import (
    MarketplaceObservation,
    MarketplaceRecord,
    OutcomeRecord,
    ResponseStats,
    generate_observation,
)
from marketplace_monitor.exceptions import (
    ConfigurationError,
    MonitorError,
    StorageError,
    TransportError,
)
from marketplace_monitor.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "MarketplaceObservation",
    "MarketplaceRecord",
    "OutcomeRecord",
    "ResponseStats",
    "generate_observation",
    # Errors
    "ConfigurationError",
    "MonitorError",
    "StorageError",
    "TransportError",
    # Logging
    "configure_logging",
    "get_logger",
]
