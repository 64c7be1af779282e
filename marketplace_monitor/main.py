from __future__ import annotations

import json
import sys
from typing import Optional

import typer

from marketplace_monitor.config import get_settings
from marketplace_monitor.exceptions import MonitorError
from marketplace_monitor.infrastructure.db_factory import build_dsn
from marketplace_monitor.infrastructure.transport import RequestsTransport
from marketplace_monitor.pipeline import PingPipeline
from marketplace_monitor.reporter import print_history, print_stats
from marketplace_monitor.store.factory import create_record_store
from marketplace_monitor.store.postgres import PostgresOutcomeStore, ensure_schema
from marketplace_monitor.utils.logging import configure_logging

app = typer.Typer(help="Marketplace Monitor CLI.")


def _setup_logging() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


def _fail(exc: MonitorError) -> None:
    typer.echo(f"Error: {exc.message}", err=True)
    raise typer.Exit(code=1)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    cadence = f"cron='{settings.ping_cron}'" if settings.ping_cron else f"every {settings.ping_interval_seconds}s"
    store = settings.store_backend
    if store == "postgres":
        store = f"postgres {settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name}"
        if settings.database_url:
            store = "postgres (DATABASE_URL)"
    typer.echo(
        f"STORE={store} | PING={settings.ping_url} {cadence} timeout={settings.ping_timeout_ms}ms | "
        f"HTTP={settings.host}:{settings.port}"
    )


@app.command("init-db")
def init_db() -> None:
    """
    Create the record tables in PostgreSQL (idempotent).
    """
    _setup_logging()
    ensure_schema(build_dsn())
    typer.echo("Schema ready.")


@app.command()
def ping() -> None:
    """
    Run the ping pipeline once and print the stored record.
    """
    _setup_logging()
    settings = get_settings()
    store = create_record_store(settings)
    transport = RequestsTransport()
    try:
        record = PingPipeline(store, transport, settings=settings).run()
    finally:
        transport.close()
        store.close()
    if record is None:
        typer.echo("Ping outcome could not be stored (see logs).", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(record.to_payload(), indent=2))


@app.command()
def stats() -> None:
    """
    Print success/failure statistics for the stored history.
    """
    _setup_logging()
    store = create_record_store()
    try:
        print_stats(store.get_stats())
    except MonitorError as exc:
        _fail(exc)
    finally:
        store.close()


@app.command()
def history(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of records to show."),
    offset: int = typer.Option(0, "--offset", help="Records to skip (newest first)."),
    failed: bool = typer.Option(False, "--failed", help="Only failed attempts."),
    legacy: bool = typer.Option(
        False, "--legacy", help="Read the legacy generic `responses` table instead."
    ),
) -> None:
    """
    Print recent outcome records, newest first.
    """
    if failed and legacy:
        raise typer.BadParameter("--failed cannot be combined with --legacy")
    _setup_logging()
    store = PostgresOutcomeStore(dsn_override=build_dsn()) if legacy else create_record_store()
    try:
        if failed:
            records = store.find_failed(limit, offset)
        else:
            records = store.find_all(limit, offset)
        print_history(records)
    except MonitorError as exc:
        _fail(exc)
    finally:
        store.close()


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default from settings)."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port (default from settings)."),
) -> None:
    """
    Run the REST + Socket.IO server with the ping scheduler.
    """
    _setup_logging()
    from marketplace_monitor.server import MonitorServer

    MonitorServer().run(host=host, port=port)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
