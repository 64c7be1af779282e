from __future__ import annotations

from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from marketplace_monitor.domain.models import MarketplaceRecord, OutcomeRecord, ResponseStats
from marketplace_monitor.domain.stats import is_failed_status, is_successful_status


def _status_style(status_code: int) -> str:
    if status_code == 0:
        return "dim red"
    if is_successful_status(status_code):
        return "green"
    if is_failed_status(status_code):
        return "bold red"
    return "yellow"


def build_stats_table(stats: ResponseStats, title: str = "Marketplace Ping Statistics") -> Table:
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right", style="magenta")

    table.add_row("Total attempts", f"{stats.total:,}")
    table.add_row("Successful", f"[green]{stats.successful:,}[/green]")
    table.add_row("Failed", f"[red]{stats.failed:,}[/red]")
    table.add_row("Other (no response / 1xx)", f"{stats.total - stats.successful - stats.failed:,}")
    table.add_row("Success rate", f"{stats.success_rate:.1f}%")
    table.add_row("Avg response time", f"{stats.average_response_time:,.0f} ms")
    return table


def build_history_table(
    records: Sequence[OutcomeRecord],
    title: str = "Recent Marketplace Pings",
) -> Table:
    """
    One row per outcome record, newest first.

    Marketplace records get their observation columns; generic records show
    only the outcome.
    """
    with_observation = bool(records) and all(isinstance(r, MarketplaceRecord) for r in records)
    table = Table(title=title, box=box.ROUNDED, caption="Newest first")

    table.add_column("ID", justify="right", style="dim")
    table.add_column("Recorded (UTC)", no_wrap=True)
    table.add_column("Status", justify="right")
    table.add_column("Time (ms)", justify="right", style="blue")
    if with_observation:
        table.add_column("Category", style="cyan")
        table.add_column("Active", justify="right")
        table.add_column("New", justify="right")
        table.add_column("Avg Deal (USD)", justify="right", style="bold green")
        table.add_column("Offers", justify="right")
        table.add_column("Views", justify="right")
    table.add_column("Error", style="red", overflow="fold")

    for record in records:
        status = f"[{_status_style(record.status_code)}]{record.status_code}[/]"
        row = [
            str(record.id or ""),
            record.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            status,
            f"{record.response_time:,}",
        ]
        if with_observation:
            data = record.marketplace_data  # type: ignore[attr-defined]
            row.extend(
                [
                    data.category,
                    str(data.active_deals),
                    str(data.new_deals),
                    f"{data.average_deal_value_usd:,}",
                    str(data.offers_submitted),
                    str(data.user_views),
                ]
            )
        row.append(record.error or "")
        table.add_row(*row)

    return table


def print_stats(stats: ResponseStats, console: Optional[Console] = None) -> None:
    (console or Console()).print(build_stats_table(stats))


def print_history(records: Sequence[OutcomeRecord], console: Optional[Console] = None) -> None:
    """Render outcome records as a rich table."""
    console = console or Console()
    if not records:
        console.print("[yellow]No records to display.[/yellow]")
        return
    console.print(build_history_table(records))


__all__ = ["build_history_table", "build_stats_table", "print_history", "print_stats"]
