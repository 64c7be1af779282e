"""
Utilities package for the Marketplace Monitor.

Exports shared logging helpers. Keep this package free of domain logic.
"""

from marketplace_monitor.utils.logging import JsonFormatter, configure_logging, get_logger

__all__ = [
    "JsonFormatter",
    "configure_logging",
    "get_logger",
]
