"""
Core infrastructure layer
"""
from .constants import *
from .exceptions import *
from .logging import setup_logging, get_logger, get_stdout_console, get_stderr_console
from .interfaces import BackendBridge, StateStore, PromptProvider
from .telemetry import Telemetry, get_telemetry
from .timer import RepeatingTimer
from .utils import (
    extract_error_message,
    parse_listen_port,
    is_valid_listen_addr,
    synthetic_id,
    with_timeout,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "get_stdout_console",
    "get_stderr_console",
    "BackendBridge",
    "StateStore",
    "PromptProvider",
    "Telemetry",
    "get_telemetry",
    "RepeatingTimer",
    "extract_error_message",
    "parse_listen_port",
    "is_valid_listen_addr",
    "synthetic_id",
    "with_timeout",
]
