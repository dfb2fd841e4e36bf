"""
Cronitor CLI Main Entry Point

The main Typer application that assembles all command groups.
"""

from typing import Annotated

import structlog
import typer
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from cronitor_client import __version__
from cronitor_client.errors import CronitorError
from cronitor_client.ping import ENDPOINTS, Ping

# Configure structlog
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(colors=True),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)
console = Console()

app = typer.Typer(
    name="cronitor",
    help="Cronitor - send job pings and manage monitors",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(
            Panel(
                Text.from_markup(f"[bold cyan]cronitor-client[/bold cyan] v{__version__}"),
                title="Version",
                border_style="cyan",
            )
        )
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
) -> None:
    """
    Cronitor command line client.

    Report job events to the ping API and manage monitor definitions.
    """
    if verbose:
        import logging

        logging.basicConfig(level=logging.DEBUG)


from cronitor_client.cli.monitors import app as monitors_app

app.add_typer(monitors_app, name="monitors", help="Manage cron and heartbeat monitors")


@app.command()
def ping(
    monitor_id: Annotated[str, typer.Argument(help="Monitor code")],
    endpoint: Annotated[str, typer.Argument(help="Event: run, complete, fail, ok or tick")],
    message: Annotated[str, typer.Option("--message", "-m", help="Message attached to the ping")] = "",
    count: Annotated[int, typer.Option(help="Number of units completed")] = 0,
    error_count: Annotated[int, typer.Option(help="Number of units failed")] = 0,
    env: Annotated[str, typer.Option(help="Environment tag, e.g. production")] = "",
    duration: Annotated[float, typer.Option(help="Run duration in seconds")] = 0.0,
    host: Annotated[str, typer.Option(help="Host the job ran on")] = "",
    series: Annotated[str, typer.Option(help="Series id pairing run and complete pings")] = "",
    api_key: Annotated[
        str,
        typer.Option("--api-key", envvar="CRONITOR_PING_API_KEY", help="Ping auth key"),
    ] = "",
) -> None:
    """
    Send a single ping for a monitor.

    Examples:
        cronitor ping d3x0c1 run
        cronitor ping d3x0c1 complete --duration 12.5 --host worker-1
        cronitor ping d3x0c1 fail -m "disk full"
    """
    if endpoint not in ENDPOINTS:
        console.print(f"[red]Invalid endpoint: {endpoint}[/red]")
        console.print(f"Valid endpoints: {', '.join(ENDPOINTS)}")
        raise typer.Exit(1)

    try:
        with Ping(monitor_id, api_key=api_key or None) as client:
            client.send(
                endpoint,
                message or None,
                count=count,
                error_count=error_count,
                env=env,
                duration=duration,
                host=host,
                series=series,
            )
    except CronitorError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]✓ {endpoint} ping sent for {monitor_id}[/green]")


if __name__ == "__main__":
    app()
