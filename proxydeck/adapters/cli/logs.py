"""
Activity log and timeline CLI commands
"""
import typer

from ...core.constants import DEFAULT_RECENT_LOG_LIMIT, LOG_LEVELS, LOG_SOURCES
from ...core.logging import get_logger, get_stdout_console
from ...orchestrator import Orchestrator
from .render import log_table, timeline_table
from .session import fail, run_command

logger = get_logger(__name__)
stdout_console = get_stdout_console()


def register_logs_app(app: typer.Typer) -> None:
    """Register logs subcommand app"""
    logs_app = typer.Typer(
        name="logs",
        help="Inspect engine logs and the activity timeline",
        add_completion=False,
        no_args_is_help=True,
    )

    logs_app.command(name="recent")(logs_recent)
    logs_app.command(name="clear")(logs_clear)
    logs_app.command(name="timeline")(logs_timeline)

    app.add_typer(logs_app, name="logs")


def logs_recent(
    ctx: typer.Context,
    limit: int = typer.Option(DEFAULT_RECENT_LOG_LIMIT, "--limit", "-n", help="Maximum entries to fetch"),
    level: str = typer.Option("all", "--level", help=f"Level filter: all, {', '.join(LOG_LEVELS)}"),
    source: str = typer.Option("all", "--source", help=f"Source filter: all, {', '.join(LOG_SOURCES)}"),
    search: str = typer.Option("", "--search", "-s", help="Only messages containing this text"),
):
    """
    Show recent log entries

    Examples:
        proxydeck logs recent --level error
        proxydeck logs recent -n 20 -s timeout
        proxydeck logs recent --source gost
    """
    async def handler(deck: Orchestrator):
        await deck.activity.recent_logs(limit)
        return deck.activity.filter_logs(level, search, source), deck.state.activity_error

    logs, error = run_command(ctx, handler, "fetch logs")
    if error:
        fail(error, "Failed to fetch logs")
    if not logs:
        stdout_console.print("[yellow]No log entries[/yellow]")
        return
    stdout_console.print(log_table(logs))


def logs_clear(ctx: typer.Context):
    """Clear stored log entries"""
    async def handler(deck: Orchestrator):
        return await deck.activity.clear_logs(), deck.state.activity_error

    ok, error = run_command(ctx, handler, "clear logs")
    if not ok:
        fail(error, "Failed to clear logs")
    stdout_console.print("[green]✓[/green] Logs cleared")


def logs_timeline(ctx: typer.Context):
    """Show the activity timeline"""
    async def handler(deck: Orchestrator):
        return await deck.activity.timeline(), deck.state.activity_error

    events, error = run_command(ctx, handler, "fetch timeline")
    if error:
        fail(error, "Failed to fetch timeline")
    if not events:
        stdout_console.print("[yellow]No activity yet[/yellow]")
        return
    stdout_console.print(timeline_table(events))
