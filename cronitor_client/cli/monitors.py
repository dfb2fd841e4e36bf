"""
Monitor CLI Commands

Commands for creating, inspecting and pausing monitors.
"""

from __future__ import annotations

import json
from typing import Annotated, Any

import structlog
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from cronitor_client.errors import CronitorError
from cronitor_client.monitor import Monitor

logger = structlog.get_logger(__name__)
console = Console()

app = typer.Typer(
    name="monitors",
    help="Manage cron and heartbeat monitors",
    no_args_is_help=True,
)

_UNIT_SUFFIXES = {
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}

ApiKeyOption = Annotated[
    str,
    typer.Option("--api-key", envvar="CRONITOR_API_KEY", help="Cronitor API key"),
]


def _parse_every(every: str) -> tuple[int, str]:
    """Parse an interval string (e.g., '30s', '5m', '1d') to a (value, unit) pair."""
    every = every.lower().strip()
    suffix = every[-1:]
    if suffix in _UNIT_SUFFIXES:
        return int(every[:-1]), _UNIT_SUFFIXES[suffix]
    # Assume minutes
    return int(every), "minutes"


def _client(api_key: str) -> Monitor:
    try:
        return Monitor(api_key=api_key or None)
    except CronitorError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def _fail(error: CronitorError) -> None:
    logger.error(
        "Monitor command failed",
        error=str(error),
        status_code=getattr(error, "status_code", None),
    )
    console.print(f"[red]Error:[/red] {error}")
    body = getattr(error, "body", None)
    if body:
        console.print(f"[dim]{json.dumps(body) if not isinstance(body, str) else body}[/dim]")
    raise typer.Exit(1)


def _print_created(monitor: dict[str, Any]) -> None:
    console.print(Panel(
        f"[green]✓ Monitor created successfully[/green]\n\n"
        f"[cyan]Code:[/cyan] {monitor.get('code')}\n"
        f"[cyan]Name:[/cyan] {monitor.get('name')}\n"
        f"[cyan]Type:[/cyan] {monitor.get('type')}",
        title="New Monitor",
        border_style="green",
    ))


@app.command("list")
def list_monitors(
    api_key: ApiKeyOption = "",
    page: Annotated[int, typer.Option("--page", "-p", help="Page of results")] = 1,
) -> None:
    """
    List monitors on the account.

    Example:
        cronitor monitors list --page 2
    """
    monitor = _client(api_key)
    try:
        data = monitor.filter(page=page)
    except CronitorError as e:
        _fail(e)
    finally:
        monitor.close()

    monitors = data.get("monitors", []) if isinstance(data, dict) else (data or [])
    if not monitors:
        console.print("[dim]No monitors found.[/dim]")
        return

    table = Table(title="Monitors", border_style="cyan")
    table.add_column("Code", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Status", justify="center")

    for item in monitors:
        if item.get("paused"):
            status = "[yellow]◐[/yellow] paused"
        elif item.get("passing", True):
            status = "[green]●[/green] passing"
        else:
            status = "[red]✗[/red] failing"
        table.add_row(
            str(item.get("code", "")),
            str(item.get("name", ""))[:40],
            str(item.get("type", "")),
            status,
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(monitors)} monitors[/dim]")


@app.command("get")
def get_monitor(
    monitor_id: Annotated[str, typer.Argument(help="Monitor code")],
    api_key: ApiKeyOption = "",
) -> None:
    """Show a monitor as JSON."""
    monitor = _client(api_key)
    try:
        data = monitor.get(monitor_id)
    except CronitorError as e:
        _fail(e)
    finally:
        monitor.close()

    console.print_json(data=data)


@app.command("delete")
def delete_monitor(
    monitor_id: Annotated[str, typer.Argument(help="Monitor code")],
    api_key: ApiKeyOption = "",
    force: Annotated[bool, typer.Option("--force", "-f", help="Skip confirmation")] = False,
) -> None:
    """Delete a monitor."""
    if not force and not typer.confirm(f"Delete monitor {monitor_id}?"):
        raise typer.Exit(0)

    monitor = _client(api_key)
    try:
        monitor.delete(monitor_id)
    except CronitorError as e:
        _fail(e)
    finally:
        monitor.close()

    console.print(f"[green]✓ Monitor {monitor_id} deleted[/green]")


@app.command("pause")
def pause_monitor(
    monitor_id: Annotated[str, typer.Argument(help="Monitor code")],
    hours: Annotated[int, typer.Argument(help="Hours to pause alerting for")],
    api_key: ApiKeyOption = "",
) -> None:
    """Pause alerting for a monitor."""
    monitor = _client(api_key)
    try:
        monitor.pause(monitor_id, hours)
    except CronitorError as e:
        _fail(e)
    finally:
        monitor.close()

    console.print(f"[yellow]Monitor {monitor_id} paused for {hours}h[/yellow]")


@app.command("unpause")
def unpause_monitor(
    monitor_id: Annotated[str, typer.Argument(help="Monitor code")],
    api_key: ApiKeyOption = "",
) -> None:
    """Resume alerting for a paused monitor."""
    monitor = _client(api_key)
    try:
        monitor.unpause(monitor_id)
    except CronitorError as e:
        _fail(e)
    finally:
        monitor.close()

    console.print(f"[green]✓ Monitor {monitor_id} resumed[/green]")


@app.command("create-cron")
def create_cron(
    name: Annotated[str, typer.Argument(help="Monitor name")],
    expression: Annotated[str, typer.Argument(help="Cron expression, e.g. '0 0 * * *'")],
    notify: Annotated[
        list[str],
        typer.Option("--notify", "-n", help="Notification list key (repeatable)"),
    ] = [],
    grace_seconds: Annotated[int, typer.Option(help="Grace period before alerting")] = 0,
    api_key: ApiKeyOption = "",
) -> None:
    """
    Create a monitor that alerts when a cron job misses its schedule.

    Example:
        cronitor monitors create-cron "Nightly backup" "0 0 * * *" -n site-emergency
    """
    monitor = _client(api_key)
    try:
        created = monitor.create_cron(
            name=name,
            expression=expression,
            notification_lists=notify or None,
            grace_seconds=grace_seconds or None,
        )
    except CronitorError as e:
        _fail(e)
    finally:
        monitor.close()

    _print_created(created)


@app.command("create-heartbeat")
def create_heartbeat(
    name: Annotated[str, typer.Argument(help="Monitor name")],
    every: Annotated[
        str,
        typer.Option("--every", "-e", help="Expected ping interval (e.g., 30s, 5m, 1h)"),
    ] = "",
    at: Annotated[str, typer.Option("--at", help="Daily deadline as HH:MM")] = "",
    notify: Annotated[
        list[str],
        typer.Option("--notify", "-n", help="Notification list key (repeatable)"),
    ] = [],
    grace_seconds: Annotated[int, typer.Option(help="Grace period before alerting")] = 0,
    api_key: ApiKeyOption = "",
) -> None:
    """
    Create a monitor that alerts when heartbeat pings stop arriving.

    Examples:
        cronitor monitors create-heartbeat "Queue worker" --every 5m
        cronitor monitors create-heartbeat "Daily report" --at 06:30
    """
    try:
        every_pair = _parse_every(every) if every else None
    except ValueError:
        console.print(f"[red]Invalid interval: {every}[/red]")
        raise typer.Exit(1)

    monitor = _client(api_key)
    try:
        created = monitor.create_heartbeat(
            name=name,
            every=every_pair,
            at=at or None,
            notification_lists=notify or None,
            grace_seconds=grace_seconds or None,
        )
    except CronitorError as e:
        _fail(e)
    finally:
        monitor.close()

    _print_created(created)
