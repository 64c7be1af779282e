"""
Seed the record store with synthetic ping history.

Builds records from the real observation generator with a weighted mix of
outcomes (mostly 200s, some 4xx/5xx, some no-response failures) so dashboards
and the stats endpoint have something to show before the scheduler has run.
"""

from __future__ import annotations

import random
import sys
import time
from datetime import datetime, timedelta, timezone
from typing import List

import typer

from marketplace_monitor.config import get_settings
from marketplace_monitor.domain.generator import generate_observation
from marketplace_monitor.domain.models import MarketplaceRecord
from marketplace_monitor.store.factory import create_record_store

app = typer.Typer(help="Generate synthetic ping history and insert it into the record store.")

# (status_code, error, weight)
OUTCOMES = [
    (200, None, 80),
    (429, "Request failed with status code 429", 4),
    (500, "Request failed with status code 500", 4),
    (503, "Request failed with status code 503", 4),
    (0, "Request timed out after 10s", 8),
]


def _generate_records(
    rows: int, seed: int, interval_seconds: int, url: str, end: datetime
) -> List[MarketplaceRecord]:
    rng = random.Random(seed)
    statuses = [o[:2] for o in OUTCOMES]
    weights = [o[2] for o in OUTCOMES]
    records: List[MarketplaceRecord] = []
    for i in range(rows):
        recorded_at = end - timedelta(seconds=interval_seconds * (rows - 1 - i))
        observation = generate_observation(
            rng=rng, clock=lambda ts=recorded_at: int(ts.timestamp() * 1000)
        )
        status_code, error = rng.choices(statuses, weights=weights, k=1)[0]
        if status_code == 0:
            response_data = None
            response_time = 10_000
        elif error is None:
            response_data = {"success": True, "raw": {"json": observation.to_payload()}}
            response_time = rng.randint(80, 900)
        else:
            response_data = {"error": error}
            response_time = rng.randint(80, 2_500)
        records.append(
            MarketplaceRecord(
                url=url,
                method="POST",
                marketplace_data=observation,
                status_code=status_code,
                response_data=response_data,
                response_time=response_time,
                timestamp=recorded_at,
                error=error,
            )
        )
    return records


@app.command()
def main(
    rows: int = typer.Option(500, "--rows", "-r", help="Number of records to generate."),
    seed: int = typer.Option(42, "--seed", help="Deterministic RNG seed."),
    interval: int = typer.Option(
        60, "--interval", help="Seconds between consecutive synthetic pings."
    ),
) -> None:
    """
    Generate synthetic ping records ending now and insert them one by one.
    """
    settings = get_settings()
    start = time.perf_counter()
    records = _generate_records(
        rows, seed, interval, settings.ping_url, datetime.now(timezone.utc)
    )
    typer.echo(f"Generated {len(records):,} records (seed={seed}, interval={interval}s)")

    store = create_record_store(settings)
    try:
        for record in records:
            store.create(record)
        summary = store.get_stats()
    finally:
        store.close()

    duration = time.perf_counter() - start
    typer.echo(
        f"Inserted into {store.name} store in {duration:.2f}s. "
        f"total={summary.total} successRate={summary.success_rate:.1f}%"
    )


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
