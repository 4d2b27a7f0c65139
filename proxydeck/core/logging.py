"""
Rich-based logging for the orchestrator and CLI
"""
import logging
from typing import Optional
from pathlib import Path

from rich.logging import RichHandler
from rich.console import Console


ROOT_LOGGER = "proxydeck"
FILE_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Streams are resolved at write time so redirected stdout/stderr is honoured
_stdout_console = Console()
_stderr_console = Console(stderr=True)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    rich_tracebacks: bool = True,
) -> logging.Logger:
    """
    Configure the ``proxydeck`` logger hierarchy.

    Records go to stderr through a RichHandler, and additionally to
    ``log_file`` in plain text when given. Handlers are replaced on
    every call, so repeated CLI invocations in one process do not
    duplicate output. The root logger is left untouched.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path, ``~`` is expanded
        rich_tracebacks: Render exception tracebacks with rich

    Returns:
        The configured package logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    package_logger = logging.getLogger(ROOT_LOGGER)
    package_logger.setLevel(log_level)
    package_logger.propagate = False
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    rich_handler = RichHandler(
        console=_stderr_console,
        show_time=True,
        show_path=False,
        rich_tracebacks=rich_tracebacks,
        markup=False,
    )
    rich_handler.setLevel(log_level)
    package_logger.addHandler(rich_handler)

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
        package_logger.addHandler(file_handler)

    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger; pass ``__name__`` so it nests under ``proxydeck``"""
    return logging.getLogger(name)


def get_stdout_console() -> Console:
    """Console for tables and command results"""
    return _stdout_console


def get_stderr_console() -> Console:
    """Console for warnings, errors and log records"""
    return _stderr_console
