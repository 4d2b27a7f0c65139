"""
Activity service: timeline events and engine/system logs
"""
from typing import Any, Callable, List, Optional, TypeVar

from ...core.constants import DEFAULT_RECENT_LOG_LIMIT
from ...core.interfaces import BackendBridge
from ...core.logging import get_logger
from ...core.telemetry import Telemetry, get_telemetry
from ...core.utils import extract_error_message
from .fallback import mock_logs, mock_timeline
from .models import LogEntry, TimelineEvent

logger = get_logger(__name__)

WRITER = "activity"

T = TypeVar("T")


class ActivityService:
    """Reads the activity timeline and recent logs; clears logs"""

    def __init__(
        self,
        state,
        bridge: Optional[BackendBridge],
        backend_available: bool,
        telemetry: Optional[Telemetry] = None,
    ):
        self.state = state
        self.bridge = bridge
        self.backend_available = backend_available and bridge is not None
        self.telemetry = telemetry or get_telemetry()

    async def timeline(self) -> List[TimelineEvent]:
        if not self.backend_available:
            events = mock_timeline()
        else:
            try:
                raw = await self.bridge.list_timeline_events()
            except Exception as e:
                self._fail("fetch timeline", e)
                events = []
            else:
                events = _decode(raw, TimelineEvent.from_dict)
        self.state.apply(WRITER, "timeline", events)
        return events

    async def recent_logs(self, limit: int = DEFAULT_RECENT_LOG_LIMIT) -> List[LogEntry]:
        if not self.backend_available:
            logs = mock_logs()[-limit:] if limit > 0 else []
        else:
            try:
                raw = await self.bridge.list_recent_logs(limit)
            except Exception as e:
                self._fail("fetch logs", e)
                logs = []
            else:
                logs = _decode(raw, LogEntry.from_dict)
        self.state.apply(WRITER, "logs", logs)
        return logs

    async def clear_logs(self) -> bool:
        if self.backend_available:
            try:
                await self.bridge.clear_logs()
            except Exception as e:
                self._fail("clear logs", e)
                return False
        self.state.apply(WRITER, "logs", [])
        self.telemetry.record_event("logs.cleared")
        logger.info("Logs cleared")
        return True

    def filter_logs(self, level: str = "all", query: str = "", source: str = "all") -> List[LogEntry]:
        return filter_logs(self.state.logs, level, query, source)

    def _fail(self, action: str, err: Exception) -> None:
        message = extract_error_message(err, f"Failed to {action}")
        logger.error(f"Failed to {action}: {message}")
        self.telemetry.record_event("activity.error", {"action": action, "error": message})
        self.state.apply(WRITER, "activity_error", message)


def filter_logs(
    logs: List[LogEntry],
    level: str = "all",
    query: str = "",
    source: str = "all",
) -> List[LogEntry]:
    """
    Keep entries at ``level`` from ``source`` whose message contains
    ``query``. ``all`` disables the level or source check.
    """
    wanted = (level or "all").upper()
    origin = (source or "all").lower()
    needle = (query or "").lower()
    return [
        entry for entry in logs
        if (wanted == "ALL" or entry.level == wanted)
        and (origin == "all" or entry.source == origin)
        and (not needle or needle in entry.message.lower())
    ]


def _decode(raw: Any, factory: Callable[[dict], T]) -> List[T]:
    if not isinstance(raw, list):
        return []
    items = []
    for item in raw:
        try:
            items.append(factory(item))
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed activity record {item!r}: {e}")
    return items
