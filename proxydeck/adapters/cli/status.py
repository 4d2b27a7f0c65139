"""
Engine status and live watch CLI commands
"""
import asyncio
from typing import Set

import typer

from ...core.logging import get_logger, get_stdout_console
from ...orchestrator import Orchestrator
from .render import connection_summary, notice_markup, router_summary, service_table
from .session import run_command

logger = get_logger(__name__)
stdout_console = get_stdout_console()


def register_status_commands(app: typer.Typer) -> None:
    """Register status and watch directly on the main app"""
    app.command(name="status")(status)
    app.command(name="watch")(watch)


def status(ctx: typer.Context):
    """
    Show engine availability, service status and profile summary

    Examples:
        proxydeck status
        proxydeck --headless status
    """
    async def handler(deck: Orchestrator):
        await deck.poller.poll_once()
        return deck.state.service, deck.state.connection

    service, connection = run_command(ctx, handler, "check engine status")
    stdout_console.print(service_table(service, connection))


def watch(
    ctx: typer.Context,
    seconds: float = typer.Option(
        0,
        "--seconds", "-s",
        help="Stop after this many seconds (0 = until Ctrl+C)",
    ),
):
    """
    Keep polling engine and router state, printing every change

    Examples:
        proxydeck watch
        proxydeck watch --seconds 30
    """
    async def handler(deck: Orchestrator):
        def on_change(fields: Set[str]) -> None:
            state = deck.state
            if "service" in fields:
                service = state.service
                engine = "available" if service.available else "unavailable"
                running = "running" if service.running else "stopped"
                stdout_console.print(f"Engine {engine}, service {running}")
            if "connection" in fields:
                stdout_console.print(connection_summary(state.connection))
            if "router" in fields and not state.router.busy:
                stdout_console.print(router_summary(state.router))
            if "notice" in fields and state.notice is not None:
                stdout_console.print(notice_markup(state.notice))
            if "error" in fields and state.error:
                stdout_console.print(f"[yellow]Warning:[/yellow] {state.error}")

        unsubscribe = deck.state.subscribe(on_change)
        stdout_console.print(connection_summary(deck.state.connection))
        try:
            await deck.show_host_mappings()
            if seconds > 0:
                await asyncio.sleep(seconds)
            else:
                await asyncio.Event().wait()
        finally:
            unsubscribe()
            await deck.hide_host_mappings()

    try:
        run_command(ctx, handler, "watch", poll=True)
    except KeyboardInterrupt:
        stdout_console.print("\n[yellow]Stopped watching[/yellow]")
