"""
Stats aggregation for outcome records.

Successful means `200 <= status < 400`, failed means `status >= 400`. Anything
else (the `0` no-response sentinel, 1xx) counts toward `total` only, so
`successful + failed <= total`.
"""

from __future__ import annotations

from typing import Iterable, Optional

from marketplace_monitor.domain.models import (
    OutcomeRecord,
    ResponseStats,
    is_failed_status,
    is_successful_status,
)


def build_stats(
    total: int,
    successful: int,
    failed: int,
    average_response_time: Optional[float],
) -> ResponseStats:
    """
    Assemble a ResponseStats from raw counts, guarding the empty population.
    """
    if total <= 0:
        return ResponseStats()
    return ResponseStats(
        total=total,
        successful=successful,
        failed=failed,
        success_rate=(successful / total) * 100,
        average_response_time=float(average_response_time or 0.0),
    )


def summarize(records: Iterable[OutcomeRecord]) -> ResponseStats:
    """Compute stats by scanning records in memory."""
    total = successful = failed = 0
    elapsed = 0
    for record in records:
        total += 1
        elapsed += record.response_time
        if record.is_successful:
            successful += 1
        elif record.is_failed:
            failed += 1
    average = elapsed / total if total else 0.0
    return build_stats(total, successful, failed, average)


__all__ = ["build_stats", "summarize", "is_successful_status", "is_failed_status"]
