"""
Core utility functions
"""
import asyncio
import json
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Iterable, Optional, TypeVar

from .constants import MIN_PORT, MAX_PORT
from .exceptions import BridgeTimeoutError, ValidationError

T = TypeVar("T")


# ============================================================
# Error Messages
# ============================================================

def extract_error_message(err: Any, fallback: str = "Unknown error") -> str:
    """
    Normalize a bridge rejection into a display string.

    Prefers a ``message`` attribute or key, then ``error``, then the
    string form of an exception, then a JSON rendering, then ``fallback``.
    """
    if err is None:
        return fallback

    for key in ("message", "error"):
        if isinstance(err, dict):
            value = err.get(key)
        else:
            value = getattr(err, key, None)
        if isinstance(value, str) and value:
            return value

    if isinstance(err, str):
        return err or fallback

    if isinstance(err, BaseException):
        text = str(err)
        if text:
            return text
        return f"{fallback} ({type(err).__name__})"

    try:
        text = json.dumps(err)
    except (TypeError, ValueError):
        return fallback
    if text in ("{}", "[]", "null", '""'):
        return fallback
    return text


# ============================================================
# Address Validation
# ============================================================

def parse_listen_port(addr: str) -> int:
    """
    Validate a router listen address of the form ``:PORT``.

    Args:
        addr: Listen address, e.g. ``":8080"``

    Returns:
        The port number

    Raises:
        ValidationError: If the address does not start with ``:`` or the
            port is not an integer in [1, 65535]
    """
    if not isinstance(addr, str) or not addr.startswith(":"):
        raise ValidationError("Listen address must look like :8080", field="listen_addr")

    port_text = addr[1:]
    if not (port_text.isascii() and port_text.isdigit()):
        raise ValidationError("Listen address must look like :8080", field="listen_addr")

    port = int(port_text)
    if not (MIN_PORT <= port <= MAX_PORT):
        raise ValidationError(
            f"Port must be between {MIN_PORT} and {MAX_PORT}", field="listen_addr"
        )
    return port


def is_valid_listen_addr(addr: str) -> bool:
    """Check a router listen address without raising"""
    try:
        parse_listen_port(addr)
    except ValidationError:
        return False
    return True


# ============================================================
# Time & Ids
# ============================================================

def utc_now() -> datetime:
    """Timezone-aware current time"""
    return datetime.now(timezone.utc)


def iso_now() -> str:
    """Current time as an ISO 8601 string"""
    return utc_now().isoformat()


def synthetic_id(existing: Iterable[int]) -> int:
    """
    Generate a temporary id from the current time in milliseconds.

    The result is strictly greater than every id in ``existing`` so
    rapid successive calls never collide.
    """
    candidate = int(time.time() * 1000)
    highest = max(existing, default=0)
    return max(candidate, highest + 1)


# ============================================================
# Async Helpers
# ============================================================

async def with_timeout(awaitable: Awaitable[T], timeout: Optional[float], operation: str) -> T:
    """
    Await ``awaitable`` for at most ``timeout`` seconds.

    Raises:
        BridgeTimeoutError: If the deadline passes first
    """
    if timeout is None:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError as e:
        raise BridgeTimeoutError(
            f"{operation} timeout after {int(timeout * 1000)}ms"
        ) from e
