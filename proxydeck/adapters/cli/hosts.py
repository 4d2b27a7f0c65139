"""
Host mapping and host router CLI commands
"""
from typing import Optional

import typer

from ...core.constants import DEFAULT_HOST_MAPPING_PORT, DEFAULT_ROUTER_ADDR, HOST_MAPPING_PROTOCOLS
from ...core.exceptions import ValidationError
from ...core.logging import get_logger, get_stdout_console, get_stderr_console
from ...domain.hostmap.models import HostMapping
from ...orchestrator import Orchestrator
from .prompts import RichPromptProvider
from .render import mapping_table, router_summary
from .session import fail, run_command

logger = get_logger(__name__)
stdout_console = get_stdout_console()
stderr_console = get_stderr_console()
prompt_provider = RichPromptProvider()


def register_hosts_app(app: typer.Typer) -> None:
    """Register host mapping subcommand app"""
    hosts_app = typer.Typer(
        name="hosts",
        help="Manage host mappings and the host router",
        add_completion=False,
        no_args_is_help=True,
    )
    hosts_app.command(name="list")(hosts_list)
    hosts_app.command(name="add")(hosts_add)
    hosts_app.command(name="remove")(hosts_remove)

    router_app = typer.Typer(
        name="router",
        help="Control the host router",
        add_completion=False,
        no_args_is_help=True,
    )
    router_app.command(name="status")(router_status)
    router_app.command(name="start")(router_start)
    router_app.command(name="stop")(router_stop)
    hosts_app.add_typer(router_app, name="router")

    app.add_typer(hosts_app, name="hosts")


def hosts_list(ctx: typer.Context):
    """List host mappings and the router state"""
    async def handler(deck: Orchestrator):
        mappings = await deck.host_mappings.list()
        await deck.router.is_running()
        return mappings, deck.state.router, deck.state.hostmap_error

    mappings, router, error = run_command(ctx, handler, "list host mappings")

    if error:
        stderr_console.print(f"[yellow]Warning:[/yellow] {error}")
    stdout_console.print(router_summary(router))
    if not mappings:
        stdout_console.print("[yellow]No host mappings[/yellow]")
        return
    stdout_console.print(mapping_table(mappings))


def hosts_add(
    ctx: typer.Context,
    hostname: str = typer.Option(..., "--hostname", "-H", help="Hostname to route"),
    ip: str = typer.Option(..., "--ip", help="Destination IP address"),
    port: int = typer.Option(DEFAULT_HOST_MAPPING_PORT, "--port", "-p", help="Destination port"),
    protocol: str = typer.Option(
        "HTTP",
        "--protocol",
        help=f"Protocol: {', '.join(HOST_MAPPING_PROTOCOLS)}",
    ),
    inactive: bool = typer.Option(False, "--inactive", help="Create the mapping disabled"),
    mapping_id: Optional[int] = typer.Option(None, "--id", help="Replace the mapping with this ID"),
):
    """
    Create or replace a host mapping

    Examples:
        proxydeck hosts add -H app.local --ip 127.0.0.1 -p 3000
        proxydeck hosts add --id 2 -H api.local --ip 10.0.0.5 --protocol HTTPS -p 443
    """
    mapping = HostMapping(
        hostname=hostname,
        ip=ip,
        port=port,
        protocol=protocol.upper(),
        active=not inactive,
        id=mapping_id,
    )
    try:
        mapping.validate()
    except ValidationError as e:
        fail(e.message, "Invalid host mapping")

    async def handler(deck: Orchestrator):
        await deck.host_mappings.list()
        return await deck.host_mappings.upsert(mapping), deck.state.hostmap_error

    saved, error = run_command(ctx, handler, "save host mapping")
    if saved is None:
        fail(error, "Failed to save host mapping")
    stdout_console.print(f"[green]✓[/green] Host mapping saved: {saved.hostname} -> {saved.target} (id {saved.id})")


def hosts_remove(
    ctx: typer.Context,
    mapping_id: int = typer.Argument(..., help="Host mapping ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
):
    """Delete a host mapping after confirmation"""
    async def handler(deck: Orchestrator):
        await deck.host_mappings.list()
        pending = deck.request_host_mapping_removal(mapping_id)
        if pending is None:
            return "missing", f"Host mapping {mapping_id} not found"
        if not yes and not prompt_provider.confirm(pending.prompt):
            deck.cancel()
            return "cancelled", None
        if await deck.confirm():
            return "deleted", pending.target_label
        return "failed", deck.state.hostmap_error

    outcome, detail = run_command(ctx, handler, "remove host mapping")
    if outcome == "cancelled":
        stdout_console.print("[yellow]Cancelled[/yellow]")
        return
    if outcome != "deleted":
        fail(detail, "Failed to delete host mapping")
    stdout_console.print(f"[green]✓[/green] Deleted host mapping '{detail}'")


def router_status(ctx: typer.Context):
    """Show whether the host router is running"""
    async def handler(deck: Orchestrator):
        await deck.router.is_running()
        return deck.state.router

    router = run_command(ctx, handler, "query host router")
    stdout_console.print(router_summary(router))


def router_start(
    ctx: typer.Context,
    addr: str = typer.Argument(DEFAULT_ROUTER_ADDR, help="Listen address, e.g. :8080"),
):
    """
    Start the host router

    Examples:
        proxydeck hosts router start :8080
    """
    async def handler(deck: Orchestrator):
        ok = await deck.router.start(addr)
        router = deck.state.router
        return ok, router.field_error or router.error

    ok, error = run_command(ctx, handler, "start host router")
    if not ok:
        fail(error, "Failed to start host router")
    stdout_console.print(f"[green]✓[/green] Host router started on {addr}")


def router_stop(ctx: typer.Context):
    """Stop the host router"""
    async def handler(deck: Orchestrator):
        ok = await deck.router.stop()
        return ok, deck.state.router.error

    ok, error = run_command(ctx, handler, "stop host router")
    if not ok:
        fail(error, "Failed to stop host router")
    stdout_console.print("[green]✓[/green] Host router stopped")
