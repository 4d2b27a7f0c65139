"""
Telemetry: in-process event and counter collection
"""
from collections import Counter, deque
from typing import Dict, Any, Optional
from dataclasses import dataclass, field
import time


MAX_EVENTS = 500


@dataclass
class Event:
    """Event record"""
    name: str
    timestamp: float = field(default_factory=time.time)
    metadata: Dict[str, Any] = field(default_factory=dict)


class Telemetry:
    """
    Telemetry collector.

    Keeps the most recent events (bounded) and a running counter per
    event name, e.g. ``poll.status.failed`` or ``profile.started``.
    """

    def __init__(self, max_events: int = MAX_EVENTS):
        self._events: deque[Event] = deque(maxlen=max_events)
        self._counts: Counter[str] = Counter()

    def record_event(self, name: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """Record an event"""
        self._events.append(Event(name=name, metadata=metadata or {}))
        self._counts[name] += 1

    def count(self, name: str) -> int:
        """Number of times an event was recorded"""
        return self._counts[name]

    def get_events(self, name: Optional[str] = None) -> list[Event]:
        """Get recorded events, optionally filtered by name"""
        if name is None:
            return list(self._events)
        return [e for e in self._events if e.name == name]

    def clear(self) -> None:
        """Clear all events and counters"""
        self._events.clear()
        self._counts.clear()


# Global telemetry instance
_telemetry = Telemetry()


def get_telemetry() -> Telemetry:
    """Get global telemetry instance"""
    return _telemetry
