"""
Rich renderables shared by the CLI commands
"""
from typing import List, Optional

from rich.table import Table

from ...domain.activity.models import LogEntry, TimelineEvent
from ...domain.engine.models import ServiceStatus
from ...domain.hostmap.models import HostMapping, RouterState
from ...domain.notify import Notice
from ...domain.profile.aggregator import ConnectionStatus
from ...domain.profile.models import Profile

LEVEL_STYLES = {
    "DEBUG": "dim",
    "INFO": "cyan",
    "WARN": "yellow",
    "WARNING": "yellow",
    "ERROR": "red",
}

NOTICE_STYLES = {
    "success": "[green]✓[/green]",
    "error": "[red]✗[/red]",
    "info": "[cyan]ℹ[/cyan]",
}


def status_markup(running: bool) -> str:
    return "[green]Running[/green]" if running else "[dim]Stopped[/dim]"


def profile_table(profiles: List[Profile], title: str = "Proxy Profiles") -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("ID", style="yellow")
    table.add_column("Name", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Listen", style="blue")
    table.add_column("Remote", style="blue")
    table.add_column("Auth", style="dim")
    table.add_column("Status")

    for profile in profiles:
        table.add_row(
            str(profile.id),
            profile.name,
            profile.type,
            profile.listen,
            profile.remote or "-",
            profile.username or "-",
            status_markup(profile.running),
        )
    return table


def connection_summary(connection: ConnectionStatus) -> str:
    state = "[green]connected[/green]" if connection.is_connected else "[yellow]idle[/yellow]"
    return f"{connection.active_profiles}/{connection.total_profiles} profiles active ({state})"


def service_table(service: ServiceStatus, connection: Optional[ConnectionStatus] = None) -> Table:
    table = Table(title="Engine Status", show_header=True, header_style="bold cyan")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Available", "[green]Yes[/green]" if service.available else "[red]No[/red]")
    table.add_row("Engine Version", service.engine_version or "-")
    table.add_row("Service", status_markup(service.running))
    table.add_row("Version", service.version or "-")
    table.add_row("Uptime", service.uptime or "-")
    if service.last_check is not None:
        table.add_row("Last Check", service.last_check.strftime("%Y-%m-%d %H:%M:%S"))
    if connection is not None:
        table.add_row("Profiles", connection_summary(connection))
    return table


def mapping_table(mappings: List[HostMapping]) -> Table:
    table = Table(title="Host Mappings", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="yellow")
    table.add_column("Hostname", style="cyan")
    table.add_column("Target", style="blue")
    table.add_column("Protocol", style="magenta")
    table.add_column("Active")

    for mapping in mappings:
        table.add_row(
            str(mapping.id) if mapping.id is not None else "-",
            mapping.hostname,
            f"{mapping.ip}:{mapping.port}",
            mapping.protocol,
            "[green]Yes[/green]" if mapping.active else "[dim]No[/dim]",
        )
    return table


def router_summary(router: RouterState) -> str:
    if router.running:
        addr = f" on [cyan]{router.listen_addr}[/cyan]" if router.listen_addr else ""
        return f"Host router: [green]running[/green]{addr}"
    return "Host router: [dim]stopped[/dim]"


def log_table(logs: List[LogEntry]) -> Table:
    table = Table(title="Recent Logs", show_header=True, header_style="bold cyan")
    table.add_column("Time", style="dim")
    table.add_column("Level")
    table.add_column("Source", style="magenta")
    table.add_column("Profile", style="cyan")
    table.add_column("Message")

    for entry in logs:
        style = LEVEL_STYLES.get(entry.level, "white")
        table.add_row(
            entry.timestamp,
            f"[{style}]{entry.level}[/{style}]",
            entry.source,
            entry.profile_name or "-",
            entry.message,
        )
    return table


def timeline_table(events: List[TimelineEvent]) -> Table:
    table = Table(title="Activity Timeline", show_header=True, header_style="bold cyan")
    table.add_column("Time", style="dim")
    table.add_column("Type", style="magenta")
    table.add_column("Action", style="cyan")
    table.add_column("Details")
    table.add_column("Status")

    for event in events:
        status_style = "green" if event.status == "success" else "red" if event.status == "error" else "yellow"
        table.add_row(
            event.timestamp,
            event.type,
            event.action,
            event.details,
            f"[{status_style}]{event.status}[/{status_style}]",
        )
    return table


def notice_markup(notice: Notice) -> str:
    return f"{NOTICE_STYLES.get(notice.level, '•')} {notice.message}"
