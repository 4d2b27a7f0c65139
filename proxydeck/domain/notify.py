"""
Transient operator notices
"""
import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.constants import DEFAULT_NOTICE_TTL
from ..core.logging import get_logger
from ..core.utils import utc_now

logger = get_logger(__name__)

WRITER = "notifier"


@dataclass(frozen=True)
class Notice:
    """One short-lived success/error/info message"""
    level: str
    message: str
    created_at: datetime = field(default_factory=utc_now)


class Notifier:
    """
    Publishes notices into the canonical state.

    A notice replaces the previous one and is cleared after ``ttl``
    seconds, unless a newer notice replaced it first.
    """

    def __init__(self, state, ttl: float = DEFAULT_NOTICE_TTL):
        self.state = state
        self.ttl = ttl
        self._expiry: Optional[asyncio.TimerHandle] = None

    def success(self, message: str) -> Notice:
        return self.notify("success", message)

    def error(self, message: str) -> Notice:
        return self.notify("error", message)

    def info(self, message: str) -> Notice:
        return self.notify("info", message)

    def notify(self, level: str, message: str) -> Notice:
        notice = Notice(level=level, message=message)
        self.state.apply(WRITER, "notice", notice)

        log = logger.error if level == "error" else logger.info
        log(f"[{level}] {message}")

        self._schedule_expiry(notice)
        return notice

    def dismiss(self) -> None:
        self._cancel_expiry()
        if self.state.notice is not None:
            self.state.apply(WRITER, "notice", None)

    def close(self) -> None:
        self._cancel_expiry()

    def _schedule_expiry(self, notice: Notice) -> None:
        self._cancel_expiry()
        if self.ttl <= 0:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._expiry = loop.call_later(self.ttl, self._expire, notice)

    def _expire(self, notice: Notice) -> None:
        self._expiry = None
        if self.state.notice is notice:
            self.state.apply(WRITER, "notice", None)

    def _cancel_expiry(self) -> None:
        if self._expiry is not None:
            self._expiry.cancel()
            self._expiry = None
