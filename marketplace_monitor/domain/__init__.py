"""
Domain package for the Marketplace Monitor.

Exports the observation/record models, the payload generator and the stats
aggregator. Keep this package free of I/O.
"""

from marketplace_monitor.domain.generator import generate_observation
from marketplace_monitor.domain.models import (
    CATEGORIES,
    MarketplaceObservation,
    MarketplaceRecord,
    OutcomeRecord,
    ResponseStats,
)
from marketplace_monitor.domain.stats import build_stats, summarize

__all__ = [
    "CATEGORIES",
    "MarketplaceObservation",
    "MarketplaceRecord",
    "OutcomeRecord",
    "ResponseStats",
    "build_stats",
    "generate_observation",
    "summarize",
]
