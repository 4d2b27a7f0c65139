"""
Builds the bridge and orchestrator for one CLI invocation
"""
import asyncio
from typing import Awaitable, Callable, NoReturn, Optional, TypeVar

import typer

from ...config import OrchestratorConfig
from ...core.exceptions import ProxyDeckError
from ...core.interfaces import BackendBridge
from ...core.logging import get_logger, get_stderr_console
from ...infrastructure.bridge.local import LocalBridge
from ...infrastructure.state.file_store import FileStateStore
from ...orchestrator import Orchestrator

logger = get_logger(__name__)
stderr_console = get_stderr_console()

T = TypeVar("T")


def get_config(ctx: Optional[typer.Context]) -> OrchestratorConfig:
    """Settings stored by the main callback, or defaults"""
    while ctx is not None:
        if isinstance(ctx.obj, OrchestratorConfig):
            return ctx.obj
        ctx = ctx.parent
    return OrchestratorConfig()


def create_bridge(config: OrchestratorConfig) -> Optional[BackendBridge]:
    """LocalBridge on the state directory, or None when headless"""
    if config.headless:
        return None
    return LocalBridge(
        FileStateStore(config.state_dir),
        engine_path=config.engine_path,
        require_engine=config.require_engine,
    )


class OrchestratorSession:
    """Async context manager starting and closing an orchestrator"""

    def __init__(self, config: OrchestratorConfig, poll: bool = False):
        self.deck = Orchestrator(create_bridge(config), config)
        self.poll = poll

    async def __aenter__(self) -> Orchestrator:
        await self.deck.start(poll=self.poll)
        return self.deck

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.deck.close()


def run_with_orchestrator(
    ctx: Optional[typer.Context],
    handler: Callable[[Orchestrator], Awaitable[T]],
    poll: bool = False,
) -> T:
    """
    Run ``handler`` against a started orchestrator on a fresh event loop.

    Profiles are loaded before ``handler`` runs; the orchestrator is
    closed afterwards whatever happens.
    """
    config = get_config(ctx)

    async def main() -> T:
        async with OrchestratorSession(config, poll) as deck:
            return await handler(deck)

    return asyncio.run(main())


def run_command(
    ctx: Optional[typer.Context],
    handler: Callable[[Orchestrator], Awaitable[T]],
    action: str,
    poll: bool = False,
) -> T:
    """Run a command handler, turning failures into an error message and exit code 1"""
    try:
        return run_with_orchestrator(ctx, handler, poll=poll)
    except ProxyDeckError as e:
        stderr_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except Exception as e:
        logger.exception(f"Failed to {action}")
        stderr_console.print(f"[red]Error:[/red] Failed to {action}: {e}")
        raise typer.Exit(1)


def fail(message: Optional[str], fallback: str) -> NoReturn:
    """Print an error and exit with code 1"""
    stderr_console.print(f"[red]Error:[/red] {message or fallback}")
    raise typer.Exit(1)
