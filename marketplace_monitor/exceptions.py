"""
Exception hierarchy for the Marketplace Monitor.

Transport and storage failures are the two error classes the ping pipeline
normalizes; everything raised by this package derives from MonitorError.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class MonitorError(Exception):
    """Base exception for all marketplace monitor errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}


class ConfigurationError(MonitorError):
    """Settings cannot be turned into a working component."""


class TransportError(MonitorError):
    """
    Outbound HTTP call failed.

    When the remote answered (e.g. with a 4xx/5xx status), `status_code` and
    `body` carry that response. Timeouts, DNS and connection failures leave
    both as None.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Any = None,
        url: Optional[str] = None,
    ) -> None:
        super().__init__(message, context={"url": url, "status_code": status_code})
        self.status_code = status_code
        self.body = body
        self.url = url

    @property
    def has_response(self) -> bool:
        return self.status_code is not None


class StorageError(MonitorError):
    """Record store unreachable or write rejected."""

    def __init__(self, operation: str, original_error: Optional[BaseException] = None) -> None:
        detail = f": {original_error}" if original_error is not None else ""
        super().__init__(
            f"Record store {operation} failed{detail}",
            context={"operation": operation},
        )
        self.operation = operation
        self.original_error = original_error


__all__ = ["MonitorError", "ConfigurationError", "TransportError", "StorageError"]
