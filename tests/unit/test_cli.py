from __future__ import annotations

import pytest
from rich.console import Console
from typer.testing import CliRunner

from marketplace_monitor import config
from marketplace_monitor.main import app
from marketplace_monitor.reporter import _status_style, build_history_table, build_stats_table, print_history
from marketplace_monitor.store.abstract import RecordStore

runner = CliRunner()


@pytest.fixture
def memory_env(monkeypatch):
    monkeypatch.setenv("STORE_BACKEND", "memory")
    monkeypatch.setenv("PING_CRON", "")
    config.get_settings.cache_clear()
    yield
    config.get_settings.cache_clear()


def test_info_reports_store_and_cadence(memory_env, monkeypatch) -> None:
    monkeypatch.setenv("PING_INTERVAL_SECONDS", "30")
    config.get_settings.cache_clear()

    result = runner.invoke(app, ["info"])

    assert result.exit_code == 0
    assert "STORE=memory" in result.output
    assert "every 30s" in result.output


def test_stats_on_empty_memory_store(memory_env) -> None:
    result = runner.invoke(app, ["stats"])
    assert result.exit_code == 0
    assert "Total attempts" in result.output


def test_history_rejects_failed_with_legacy(memory_env) -> None:
    result = runner.invoke(app, ["history", "--failed", "--legacy"])
    assert result.exit_code != 0


def test_ping_prints_stored_record(memory_env, monkeypatch, fake_transport) -> None:
    monkeypatch.setattr("marketplace_monitor.main.RequestsTransport", lambda: fake_transport)

    result = runner.invoke(app, ["ping"])

    assert result.exit_code == 0
    assert '"statusCode": 200' in result.output
    assert len(fake_transport.calls) == 1


def test_memory_store_satisfies_protocol(memory_store) -> None:
    assert isinstance(memory_store, RecordStore)


def test_history_table_has_observation_columns(record_factory) -> None:
    table = build_history_table([record_factory(), record_factory(status_code=0, error="Request timed out after 10s")])
    headers = [column.header for column in table.columns]
    assert "Category" in headers
    assert headers[-1] == "Error"
    assert table.row_count == 2


def test_stats_table_rows(memory_store, record_factory) -> None:
    memory_store.create(record_factory(status_code=200))
    memory_store.create(record_factory(status_code=0, error="Request timed out after 10s"))
    table = build_stats_table(memory_store.get_stats())
    assert table.row_count == 6


def test_print_history_empty() -> None:
    console = Console(record=True, width=120)
    print_history([], console=console)
    assert "No records to display." in console.export_text()


@pytest.mark.parametrize(
    "status_code, style",
    [(0, "dim red"), (101, "yellow"), (200, "green"), (302, "green"), (404, "bold red")],
)
def test_status_style_follows_outcome_classification(status_code, style) -> None:
    assert _status_style(status_code) == style
