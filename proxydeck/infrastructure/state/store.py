"""
Canonical orchestration state.

One object owns every mutable field the controllers work on. Writes go
through ``apply``/``update`` (or the profile-specific ``commit_*``
methods), which check that the writing component owns the field, and
notify subscribers once per transition.

Profile writes carry tickets from ``issue()``. A result is applied only
if its ticket is not older than the newest one already applied to the
same entity (or, for collection snapshots, to the collection), so a
slow response can never overwrite a newer one.
"""
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from ...core.exceptions import StateOwnershipError
from ...core.logging import get_logger
from ...domain.activity.models import LogEntry, TimelineEvent
from ...domain.engine.models import ServiceStatus
from ...domain.hostmap.models import RouterState
from ...domain.profile.aggregator import ConnectionStatus, aggregate, status_signature
from ...domain.profile.models import Profile

logger = get_logger(__name__)

Listener = Callable[[Set[str]], None]

# field -> the only component allowed to write it
FIELD_OWNERS: Dict[str, str] = {
    "profiles": "profiles",
    "error": "profiles",
    "connection": "aggregator",
    "service": "poller",
    "router": "router",
    "host_mappings": "hostmap",
    "hostmap_error": "hostmap",
    "pending": "confirm",
    "timeline": "activity",
    "logs": "activity",
    "activity_error": "activity",
    "notice": "notifier",
}


def _initial_values() -> Dict[str, Any]:
    return {
        "profiles": [],
        "error": None,
        "connection": ConnectionStatus(),
        "service": ServiceStatus(),
        "router": RouterState(),
        "host_mappings": [],
        "hostmap_error": None,
        "pending": None,
        "timeline": [],
        "logs": [],
        "activity_error": None,
        "notice": None,
    }


class _Field:
    """Read-only view of one state field"""

    def __set_name__(self, owner, name):
        self.name = name

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        return obj._values[self.name]

    def __set__(self, obj, value):
        raise StateOwnershipError(
            f"'{self.name}' is read-only; write it through OrchestrationState.apply()"
        )


class OrchestrationState:
    """Single owner of the orchestration layer's mutable state"""

    profiles: List[Profile] = _Field()
    error: Optional[str] = _Field()
    connection: ConnectionStatus = _Field()
    service: ServiceStatus = _Field()
    router: RouterState = _Field()
    host_mappings: list = _Field()
    hostmap_error: Optional[str] = _Field()
    pending: Any = _Field()
    timeline: List[TimelineEvent] = _Field()
    logs: List[LogEntry] = _Field()
    activity_error: Optional[str] = _Field()
    notice: Any = _Field()

    def __init__(self):
        self._values: Dict[str, Any] = _initial_values()
        self._version = 0
        self._sequence = 0
        self._snapshot_ticket = 0
        self._entity_tickets: Dict[int, int] = {}
        self._aggregated_signature: Optional[tuple] = None
        self._aggregate_count = 0
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------

    @property
    def version(self) -> int:
        """Bumped once per applied transition"""
        return self._version

    @property
    def aggregate_count(self) -> int:
        """How many times the connection aggregate was recomputed"""
        return self._aggregate_count

    def find_profile(self, profile_id: int) -> Optional[Profile]:
        for profile in self._values["profiles"]:
            if profile.id == profile_id:
                return profile
        return None

    # ------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a change listener.

        The listener receives the set of field names changed by one
        transition. Returns a callable that unsubscribes.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------
    # Generic writes
    # ------------------------------------------------------------

    def issue(self) -> int:
        """Next request ticket"""
        self._sequence += 1
        return self._sequence

    def apply(
        self,
        writer: str,
        field: str,
        value: Any,
        expected_version: Optional[int] = None,
    ) -> bool:
        """
        Write one field.

        Args:
            writer: Component name; must own ``field``
            field: Field name
            value: New value
            expected_version: If given, the write only happens when the
                state is still at this version

        Returns:
            True if the write was applied
        """
        self._check_writer(writer, field)
        if field == "profiles":
            return self.commit_snapshot(writer, value, self.issue(), expected_version)
        if expected_version is not None and expected_version != self._version:
            return False
        self._values[field] = value
        self._transition({field})
        return True

    def update(self, writer: str, field: str, fn: Callable[[Any], Any]) -> bool:
        """Write ``fn(current)`` to a field"""
        self._check_writer(writer, field)
        return self.apply(writer, field, fn(self._values[field]))

    # ------------------------------------------------------------
    # Profile writes
    # ------------------------------------------------------------

    def commit_snapshot(
        self,
        writer: str,
        profiles: Iterable[Profile],
        ticket: int,
        expected_version: Optional[int] = None,
    ) -> bool:
        """
        Replace the profile collection with a listing.

        Dropped entirely if a newer listing was already applied. Entities
        touched by an entity-level write newer than ``ticket`` keep their
        local value (or stay removed).
        """
        self._check_writer(writer, "profiles")
        if ticket < self._snapshot_ticket:
            logger.debug(f"Dropping stale profile snapshot (ticket {ticket} < {self._snapshot_ticket})")
            return False
        if expected_version is not None and expected_version != self._version:
            return False

        current = {p.id: p for p in self._values["profiles"]}
        merged: List[Profile] = []
        seen: Set[int] = set()
        for profile in profiles:
            if profile.id in seen:
                continue
            seen.add(profile.id)
            if self._entity_tickets.get(profile.id, 0) > ticket:
                local = current.get(profile.id)
                if local is not None:
                    merged.append(local)
                continue
            merged.append(profile)

        newer_locals = [
            p for p in self._values["profiles"]
            if p.id not in seen and self._entity_tickets.get(p.id, 0) > ticket
        ]

        self._snapshot_ticket = ticket
        self._set_profiles(newer_locals + merged)
        return True

    def commit_entity(
        self,
        writer: str,
        profile_id: int,
        fn: Callable[[Optional[Profile]], Optional[Profile]],
        ticket: int,
    ) -> bool:
        """
        Apply an entity-level result for one profile.

        ``fn`` receives the current profile (or None) and returns the new
        one, or None to remove it. Existing entries are replaced in
        place; new entries are prepended.
        """
        self._check_writer(writer, "profiles")
        if ticket < self._entity_tickets.get(profile_id, 0):
            logger.debug(f"Dropping stale result for profile {profile_id} (ticket {ticket})")
            return False

        profiles = list(self._values["profiles"])
        index = next((i for i, p in enumerate(profiles) if p.id == profile_id), None)
        current = profiles[index] if index is not None else None
        result = fn(current)

        self._entity_tickets[profile_id] = ticket
        if result is None:
            if index is None:
                return True
            del profiles[index]
        elif index is None:
            profiles.insert(0, result)
        else:
            profiles[index] = result

        self._set_profiles(profiles)
        return True

    # ------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------

    def _set_profiles(self, profiles: List[Profile]) -> None:
        self._values["profiles"] = profiles
        changed = {"profiles"}

        signature = status_signature(profiles)
        if signature != self._aggregated_signature:
            self._values["connection"] = aggregate(profiles)
            self._aggregated_signature = signature
            self._aggregate_count += 1
            changed.add("connection")

        self._transition(changed)

    def _transition(self, changed: Set[str]) -> None:
        self._version += 1
        for listener in list(self._listeners):
            try:
                listener(set(changed))
            except Exception as e:
                logger.error(f"State listener failed: {e}", exc_info=True)

    @staticmethod
    def _owner_of(field: str) -> str:
        try:
            return FIELD_OWNERS[field]
        except KeyError:
            raise StateOwnershipError(f"Unknown state field: {field}") from None

    def _check_writer(self, writer: str, field: str) -> None:
        owner = self._owner_of(field)
        if writer != owner:
            raise StateOwnershipError(
                f"Component '{writer}' cannot write '{field}' (owned by '{owner}')"
            )
