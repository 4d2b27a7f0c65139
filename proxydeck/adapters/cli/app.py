"""
Main CLI application
"""
import typer
from pathlib import Path
from typing import Optional

from ...config import OrchestratorConfig
from ...core.exceptions import ConfigError
from ...core.logging import setup_logging, get_logger, get_stderr_console
from ..config.loader import ConfigLoader
from .hosts import register_hosts_app
from .logs import register_logs_app
from .profiles import register_profile_app
from .status import register_status_commands

logger = get_logger(__name__)
stderr_console = get_stderr_console()

# Create main app
app = typer.Typer(
    name="proxydeck",
    add_completion=False,
    help="Profile and service management for the GOST proxy engine",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

register_profile_app(app)
register_hosts_app(app)
register_logs_app(app)
register_status_commands(app)


@app.callback()
def main(
    ctx: typer.Context,
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Log file path",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file path (TOML)",
    ),
    state_dir: Optional[Path] = typer.Option(
        None,
        "--state-dir",
        help="Directory holding profiles, host mappings and logs",
    ),
    headless: Optional[bool] = typer.Option(
        None,
        "--headless/--no-headless",
        help="Run without a backend, on built-in demo data",
    ),
):
    """
    ProxyDeck - manage GOST proxy profiles and services

    Use subcommands to perform different operations:
    - profile: Create, start, stop and delete proxy profiles
    - hosts: Manage host mappings and the host router
    - logs: Inspect engine logs and the activity timeline
    - status: Show engine availability and service state
    - watch: Follow engine and router state live
    """
    cli_overrides = {
        "log_level": log_level,
        "log_file": str(log_file) if log_file else None,
        "state_dir": str(state_dir) if state_dir else None,
        "headless": headless,
    }
    try:
        cfg = ConfigLoader().load(toml_path=config_file, cli_overrides=cli_overrides)
        config = OrchestratorConfig.from_dict(cfg)
    except ConfigError as e:
        stderr_console.print(f"[red]Config Error:[/red] {e}")
        raise typer.Exit(1)

    # Setup logging
    setup_logging(level=config.log_level, log_file=config.log_file)
    logger.debug(f"Configuration: {config}")
    ctx.obj = config


def run():
    """CLI entry point"""
    app()


if __name__ == "__main__":
    run()
