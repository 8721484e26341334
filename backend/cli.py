#!/usr/bin/env python3
"""
WIP Planner CLI - operator tasks outside the web app

Usage:
    python cli.py init-db
    python cli.py windows
    python cli.py split <event-id>
    python cli.py export-window <window-id> --output ledger.csv
"""

import asyncio
import sys
from pathlib import Path
from uuid import UUID

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# Add the backend directory to Python path
backend_path = Path(__file__).parent
sys.path.insert(0, str(backend_path))

from wip_planner.services.cost_sharing import calculate_equal_split
from wip_planner.services.database_manager import close_engine, create_all_tables
from wip_planner.services.database_manager.operations import EventOperations, WipWindowOperations
from wip_planner.services.reports import export_window_ledger, format_money, summarize_ledger
from wip_planner.utils.logger import get_logger
from wip_planner.utils.settings import get_settings

logger = get_logger(__name__)
console = Console()


def _run(coro):
    """Run a coroutine and dispose the engine before the loop closes"""
    async def runner():
        try:
            return await coro
        finally:
            await close_engine()

    return asyncio.run(runner())


def _parse_uuid(value: str, label: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise click.BadParameter(f"{value!r} is not a valid {label} id")


@click.group()
@click.version_option(version="1.0.0")
def cli():
    """
    🗓️  WIP Planner CLI

    Manage WIP windows, inspect cost splits and export window ledgers.
    """
    pass


@cli.command("init-db")
def init_db():
    """
    🛠️  Create all database tables

    Tables that already exist are left untouched.
    """
    try:
        _run(create_all_tables())
        console.print("[green]✅ Database tables are ready[/green]")
    except Exception as e:
        logger.error(f"init-db failed: {e}")
        console.print(f"[red]❌ Error: {e}[/red]")
        sys.exit(1)


@cli.command()
def windows():
    """📊 List WIP windows with event and participant counts"""
    try:
        rows = _run(WipWindowOperations.list_windows_with_stats())
    except Exception as e:
        console.print(f"[red]❌ Error: {e}[/red]")
        sys.exit(1)

    if not rows:
        console.print("[yellow]No WIP windows yet[/yellow]")
        return

    table = Table(title="WIP Windows", show_header=True)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Start", style="green")
    table.add_column("End", style="green")
    table.add_column("Active", justify="center")
    table.add_column("Events", justify="right")
    table.add_column("Participants", justify="right")

    for window, event_count, participant_count in rows:
        table.add_row(
            str(window.id),
            window.name,
            window.start_date.date().isoformat(),
            window.end_date.date().isoformat(),
            "✅" if window.is_active else "",
            str(event_count),
            str(participant_count),
        )
    console.print(table)


@cli.command("activate-window")
@click.argument("window_id")
def activate_window(window_id: str):
    """
    🎯 Make a window the active one

    Every other window is deactivated and the org settings point at it.
    """
    window_uuid = _parse_uuid(window_id, "window")
    try:
        window = _run(WipWindowOperations.update_window(window_uuid, {"is_active": True}))
    except Exception as e:
        console.print(f"[red]❌ Error: {e}[/red]")
        sys.exit(1)

    if window is None:
        console.print(f"[red]❌ WIP window {window_id} not found[/red]")
        sys.exit(1)
    console.print(f"[green]✅ {window.name} is now the active WIP window[/green]")


@cli.command()
@click.argument("event_id")
def split(event_id: str):
    """💰 Show the equal split of an event's bills"""
    event_uuid = _parse_uuid(event_id, "event")
    try:
        event = _run(EventOperations.get_event(event_uuid))
    except Exception as e:
        console.print(f"[red]❌ Error: {e}[/red]")
        sys.exit(1)

    if event is None:
        console.print(f"[red]❌ Event {event_id} not found[/red]")
        sys.exit(1)

    currency = event.bills[0].currency if event.bills else get_settings().DEFAULT_CURRENCY
    result = calculate_equal_split(event, currency)

    console.print(Panel.fit(
        f"[bold cyan]{event.title}[/bold cyan]\n"
        f"Total: {format_money(result.total_cents, currency)}  "
        f"Confirmed attendees: {result.attendee_count}  "
        f"Per person: {format_money(result.per_person_cents, currency)}",
        border_style="cyan",
    ))

    if not result.shares:
        console.print("[yellow]No confirmed attendees to split between[/yellow]")
        return

    table = Table(show_header=True)
    table.add_column("Attendee", style="cyan")
    table.add_column("Share", justify="right")
    table.add_column("%", justify="right")
    table.add_column("Paid", justify="right")
    table.add_column("Net", justify="right")
    for share in result.shares:
        net_style = "green" if share.net_cents >= 0 else "red"
        table.add_row(
            share.name or share.email or share.user_id,
            format_money(share.share_cents, currency),
            f"{share.percentage:.1f}",
            format_money(share.paid_cents, currency),
            f"[{net_style}]{format_money(share.net_cents, currency)}[/{net_style}]",
        )
    console.print(table)


@cli.command("export-window")
@click.argument("window_id")
@click.option(
    "--output",
    type=click.Path(dir_okay=False, writable=True),
    required=True,
    help="CSV file to write the per-event, per-attendee ledger to",
)
def export_window(window_id: str, output: str):
    """
    📤 Export a window's cost-sharing ledger to CSV

    Writes one row per confirmed attendee per event and prints the
    per-person totals.
    """
    window_uuid = _parse_uuid(window_id, "window")

    async def load():
        window = await WipWindowOperations.get_window(window_uuid)
        if window is None:
            return None, []
        return window, await EventOperations.list_window_events(window_uuid)

    try:
        window, events = _run(load())
    except Exception as e:
        console.print(f"[red]❌ Error: {e}[/red]")
        sys.exit(1)

    if window is None:
        console.print(f"[red]❌ WIP window {window_id} not found[/red]")
        sys.exit(1)

    ledger = export_window_ledger(events, output)
    logger.info(f"Exported {len(ledger)} ledger rows for window {window_id} to {output}")
    console.print(f"[green]✅ Wrote {len(ledger)} rows for {window.name} to {output}[/green]")

    summary = summarize_ledger(ledger)
    if summary.empty:
        return

    currency = get_settings().DEFAULT_CURRENCY
    table = Table(title="Per-person totals", show_header=True)
    table.add_column("Attendee", style="cyan")
    table.add_column("Events", justify="right")
    table.add_column("Share", justify="right")
    table.add_column("Paid", justify="right")
    table.add_column("Net", justify="right")
    for row in summary.itertuples(index=False):
        table.add_row(
            str(row.attendee or row.email),
            str(row.events),
            format_money(row.share_cents, currency),
            format_money(row.paid_cents, currency),
            format_money(row.net_cents, currency),
        )
    console.print(table)


@cli.command()
@click.option("--host", default="0.0.0.0", help="Host to bind to")
@click.option("--port", default=8000, type=int, help="Port to bind to")
@click.option("--reload/--no-reload", default=True, help="Enable auto-reload")
def serve(host: str, port: int, reload: bool):
    """🚀 Start the FastAPI server"""
    import uvicorn

    settings = get_settings()
    console.print(f"[bold green]🚀 Starting {settings.APP_NAME} server on {host}:{port}[/bold green]")
    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info"
    )


if __name__ == "__main__":
    cli()
