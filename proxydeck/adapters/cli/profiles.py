"""
Profile CLI commands
"""
from dataclasses import replace
from typing import Optional

import typer

from ...core.constants import DEFAULT_PROFILE_TYPE, PROFILE_TYPES
from ...core.exceptions import ValidationError
from ...core.logging import get_logger, get_stdout_console, get_stderr_console
from ...domain.profile.models import ProfileDraft
from ...orchestrator import Orchestrator
from .prompts import RichPromptProvider
from .render import connection_summary, profile_table
from .session import fail, run_command

logger = get_logger(__name__)
stdout_console = get_stdout_console()
stderr_console = get_stderr_console()
prompt_provider = RichPromptProvider()


def register_profile_app(app: typer.Typer) -> None:
    """Register profile subcommand app"""
    profile_app = typer.Typer(
        name="profile",
        help="Manage proxy profiles",
        add_completion=False,
        no_args_is_help=True,
    )

    profile_app.command(name="list")(profile_list)
    profile_app.command(name="add")(profile_add)
    profile_app.command(name="update")(profile_update)
    profile_app.command(name="start")(profile_start)
    profile_app.command(name="stop")(profile_stop)
    profile_app.command(name="remove")(profile_remove)

    app.add_typer(profile_app, name="profile")


def profile_list(
    ctx: typer.Context,
    search: str = typer.Option("", "--search", "-s", help="Filter by name, listen or remote address"),
):
    """
    List proxy profiles

    Examples:
        proxydeck profile list
        proxydeck profile list --search socks
    """
    async def handler(deck: Orchestrator):
        return deck.profiles.filter(search), deck.state.connection, deck.state.error

    profiles, connection, error = run_command(ctx, handler, "list profiles")

    if error:
        stderr_console.print(f"[yellow]Warning:[/yellow] {error}")
    if not profiles:
        stdout_console.print("[yellow]No profiles[/yellow]")
        return
    stdout_console.print(profile_table(profiles))
    stdout_console.print(connection_summary(connection))


def profile_add(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", "-n", help="Profile name"),
    listen: str = typer.Option(..., "--listen", "-L", help="Listen address, e.g. :1080"),
    remote: str = typer.Option(..., "--remote", "-F", help="Forward (remote) address"),
    profile_type: str = typer.Option(
        DEFAULT_PROFILE_TYPE,
        "--type", "-t",
        help=f"Profile type: {', '.join(PROFILE_TYPES)}",
    ),
    username: str = typer.Option("", "--username", "-u", help="Proxy auth username"),
    password: str = typer.Option("", "--password", "-p", help="Proxy auth password"),
):
    """
    Create a proxy profile

    Examples:
        proxydeck profile add -n "Local SOCKS5" -L :1080 -F 127.0.0.1:1080 -t forward
        proxydeck profile add -n upstream -L :8080 -F 10.0.0.2:3128 -t http -u alice
    """
    if username and not password:
        password = prompt_provider.prompt(f"Password for {username}", default="", password=True)

    draft = ProfileDraft(
        name=name,
        listen=listen,
        remote=remote,
        type=profile_type,
        username=username,
        password=password,
    )
    try:
        draft.validate()
    except ValidationError as e:
        fail(e.message, "Invalid profile")

    async def handler(deck: Orchestrator):
        return await deck.profiles.add(draft), deck.state.error

    profile, error = run_command(ctx, handler, "add profile")
    if profile is None:
        fail(error, "Failed to add profile")
    stdout_console.print(f"[green]✓[/green] Added profile '{profile.name}' (id {profile.id})")


def profile_update(
    ctx: typer.Context,
    profile_id: int = typer.Argument(..., help="Profile ID"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="New name"),
    listen: Optional[str] = typer.Option(None, "--listen", "-L", help="New listen address"),
    remote: Optional[str] = typer.Option(None, "--remote", "-F", help="New forward address"),
    profile_type: Optional[str] = typer.Option(None, "--type", "-t", help="New profile type"),
    username: Optional[str] = typer.Option(None, "--username", "-u", help="New auth username"),
    password: Optional[str] = typer.Option(None, "--password", "-p", help="New auth password"),
):
    """
    Update a stopped profile

    Examples:
        proxydeck profile update 3 --listen :1081
    """
    changes = {
        key: value
        for key, value in {
            "name": name,
            "listen": listen,
            "remote": remote,
            "type": profile_type,
            "username": username,
            "password": password,
        }.items()
        if value is not None
    }
    if not changes:
        fail("Nothing to update", "Nothing to update")

    async def handler(deck: Orchestrator):
        current = deck.state.find_profile(profile_id)
        if current is None:
            return None, f"Profile {profile_id} not found"
        updated = replace(current, **changes)
        try:
            updated.to_draft().validate()
        except ValidationError as e:
            return None, e.message
        if not await deck.profiles.update(updated):
            return None, deck.state.error
        return updated, None

    profile, error = run_command(ctx, handler, "update profile")
    if profile is None:
        fail(error, "Failed to update profile")
    stdout_console.print(f"[green]✓[/green] Updated profile '{profile.name}'")


def _toggle(ctx: typer.Context, profile_id: int, start: bool) -> None:
    verb = "start" if start else "stop"

    async def handler(deck: Orchestrator):
        if deck.state.find_profile(profile_id) is None:
            return False, f"Profile {profile_id} not found"
        if await deck.profiles.toggle(profile_id, start):
            return True, None
        return False, deck.state.error

    ok, error = run_command(ctx, handler, f"{verb} profile")
    if not ok:
        fail(error, f"Failed to {verb} profile")
    stdout_console.print(f"[green]✓[/green] Profile {profile_id} {'started' if start else 'stopped'}")


def profile_start(
    ctx: typer.Context,
    profile_id: int = typer.Argument(..., help="Profile ID"),
):
    """Start a profile"""
    _toggle(ctx, profile_id, start=True)


def profile_stop(
    ctx: typer.Context,
    profile_id: int = typer.Argument(..., help="Profile ID"),
):
    """Stop a profile"""
    _toggle(ctx, profile_id, start=False)


def profile_remove(
    ctx: typer.Context,
    profile_id: int = typer.Argument(..., help="Profile ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
):
    """
    Delete a profile after confirmation

    Examples:
        proxydeck profile remove 3
        proxydeck profile remove 3 --yes
    """
    async def handler(deck: Orchestrator):
        pending = deck.request_profile_removal(profile_id)
        if pending is None:
            return "missing", f"Profile {profile_id} not found"
        if not yes and not prompt_provider.confirm(pending.prompt):
            deck.cancel()
            return "cancelled", None
        if await deck.confirm():
            return "deleted", pending.target_label
        return "failed", deck.state.error

    outcome, detail = run_command(ctx, handler, "remove profile")
    if outcome == "cancelled":
        stdout_console.print("[yellow]Cancelled[/yellow]")
        return
    if outcome != "deleted":
        fail(detail, "Failed to delete profile")
    stdout_console.print(f"[green]✓[/green] Deleted profile '{detail}'")
