"""
Profile lifecycle service - business logic
"""
from typing import Any, List, Optional

from ...core.constants import DEFAULT_LIST_TIMEOUT
from ...core.exceptions import BridgeTimeoutError
from ...core.interfaces import BackendBridge
from ...core.logging import get_logger
from ...core.telemetry import Telemetry, get_telemetry
from ...core.utils import extract_error_message, synthetic_id, with_timeout
from .fallback import mock_profiles
from .models import Profile, ProfileDraft, ProfileStatus

logger = get_logger(__name__)

WRITER = "profiles"


class ProfileService:
    """
    Profile lifecycle controller.

    Handles list, add, update, remove and start/stop of proxy profiles
    against the backend bridge, writing results into the canonical
    state. Every operation catches bridge failures at its boundary and
    records the message in the state's ``error`` slot; nothing is
    retried.

    ``add`` without a backend is the only optimistic write. ``toggle``
    changes a profile's status only after the backend acknowledged it.
    """

    def __init__(
        self,
        state,
        bridge: Optional[BackendBridge],
        backend_available: bool,
        list_timeout: Optional[float] = DEFAULT_LIST_TIMEOUT,
        telemetry: Optional[Telemetry] = None,
    ):
        """
        Initialize profile service.

        Args:
            state: Canonical OrchestrationState
            bridge: Backend bridge, or None when running headless
            backend_available: Whether a live backend is attached
            list_timeout: Seconds to wait for a listing before falling back
            telemetry: Telemetry collector
        """
        self.state = state
        self.bridge = bridge
        self.backend_available = backend_available and bridge is not None
        self.list_timeout = list_timeout
        self.telemetry = telemetry or get_telemetry()
        self._last_known: Optional[List[Profile]] = None

    # ------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------

    async def list(self) -> List[Profile]:
        """
        Refresh the profile collection from the backend.

        A timeout loads the fallback snapshot (last successful listing,
        else the demo profiles) and records the timeout message. Other
        failures leave the collection as it was.

        Returns:
            The profile collection after the refresh
        """
        ticket = self.state.issue()

        if not self.backend_available:
            self.state.commit_snapshot(WRITER, self._fallback_snapshot(), ticket)
            return self.state.profiles

        try:
            raw = await with_timeout(self.bridge.list_profiles(), self.list_timeout, "ListProfiles")
        except BridgeTimeoutError as e:
            logger.warning(f"Profile listing timed out, using fallback snapshot: {e}")
            self.telemetry.record_event("profiles.list.timeout")
            self.state.commit_snapshot(WRITER, self._fallback_snapshot(), ticket)
            self._set_error(extract_error_message(e))
            return self.state.profiles
        except Exception as e:
            self._fail("fetch profiles", e)
            return self.state.profiles

        profiles = self._decode_profiles(raw)
        self._last_known = list(profiles)
        self.state.commit_snapshot(WRITER, profiles, ticket)
        logger.debug(f"Loaded {len(profiles)} profiles")
        return self.state.profiles

    async def add(self, draft: ProfileDraft) -> Optional[Profile]:
        """
        Create a profile.

        Without a backend the profile gets a synthetic id and is stored
        immediately. With a backend the returned id is merged and the
        collection is re-listed.

        Returns:
            The new profile, or None if the backend rejected it
        """
        ticket = self.state.issue()

        if not self.backend_available:
            profile_id = synthetic_id(p.id for p in self.state.profiles)
            profile = Profile.from_draft(draft, profile_id)
            self.state.commit_entity(WRITER, profile_id, lambda _: profile, ticket)
            self.telemetry.record_event("profile.added", {"id": profile_id, "synthetic": True})
            logger.info(f"Profile '{draft.name}' added locally (id {profile_id})")
            return profile

        try:
            result = await self.bridge.add_profile(draft.to_dict())
        except Exception as e:
            self._fail("add profile", e)
            return None

        profile_id = self._decode_id(result)
        if profile_id is not None:
            profile = Profile.from_draft(draft, profile_id)
            self.state.commit_entity(WRITER, profile_id, lambda _: profile, ticket)
            self.telemetry.record_event("profile.added", {"id": profile_id, "synthetic": False})
            logger.info(f"Profile '{draft.name}' created (id {profile_id})")
        else:
            logger.warning(f"Backend returned no id for new profile '{draft.name}': {result!r}")

        await self.list()

        if profile_id is None:
            return None
        return self.state.find_profile(profile_id)

    async def update(self, profile: Profile) -> bool:
        """Send the full profile, then replace the matching entry by id"""
        ticket = self.state.issue()

        if self.backend_available:
            try:
                await self.bridge.update_profile(profile.to_dict())
            except Exception as e:
                self._fail("update profile", e)
                return False

        self.state.commit_entity(
            WRITER,
            profile.id,
            lambda current: profile if current is not None else None,
            ticket,
        )
        self.telemetry.record_event("profile.updated", {"id": profile.id})
        logger.info(f"Profile '{profile.name}' updated")
        return True

    async def remove(self, profile_id: int) -> bool:
        """
        Delete a profile.

        Only the confirmation gate calls this; on rejection the
        collection is left unchanged.
        """
        ticket = self.state.issue()

        if self.backend_available:
            try:
                await self.bridge.delete_profile(profile_id)
            except Exception as e:
                self._fail("delete profile", e)
                return False

        self.state.commit_entity(WRITER, profile_id, lambda _: None, ticket)
        self.telemetry.record_event("profile.removed", {"id": profile_id})
        logger.info(f"Profile {profile_id} removed")
        return True

    async def toggle(self, profile_id: int, start: bool) -> bool:
        """
        Start or stop a profile.

        The status changes only once the backend acknowledged the call;
        a failed call leaves the previous status in place.
        """
        ticket = self.state.issue()
        status = ProfileStatus.RUNNING if start else ProfileStatus.STOPPED

        if self.backend_available:
            call = self.bridge.start_profile if start else self.bridge.stop_profile
            try:
                await call(profile_id)
            except Exception as e:
                self._fail("start profile" if start else "stop profile", e)
                return False

        applied = self.state.commit_entity(
            WRITER,
            profile_id,
            lambda current: current.with_status(status) if current is not None else None,
            ticket,
        )
        event = "profile.started" if start else "profile.stopped"
        self.telemetry.record_event(event, {"id": profile_id, "applied": applied})
        logger.info(f"Profile {profile_id} {status.value}")
        return True

    def filter(self, query: str) -> List[Profile]:
        """Case-insensitive search over name, type, listen and remote"""
        return filter_profiles(self.state.profiles, query)

    def clear_error(self) -> None:
        self._set_error(None)

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    def _fallback_snapshot(self) -> List[Profile]:
        if self._last_known is not None:
            return list(self._last_known)
        return mock_profiles()

    def _fail(self, action: str, err: Exception) -> None:
        message = extract_error_message(err, f"Failed to {action}")
        logger.error(f"Failed to {action}: {message}")
        self.telemetry.record_event("profile.error", {"action": action, "error": message})
        self._set_error(message)

    def _set_error(self, message: Optional[str]) -> None:
        if self.state.error != message:
            self.state.apply(WRITER, "error", message)

    @staticmethod
    def _decode_profiles(raw: Any) -> List[Profile]:
        if not isinstance(raw, list):
            logger.warning(f"Profile listing is not a list: {type(raw).__name__}")
            return []
        profiles = []
        for item in raw:
            try:
                profiles.append(Profile.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed profile {item!r}: {e}")
        return profiles

    @staticmethod
    def _decode_id(result: Any) -> Optional[int]:
        """Accepts ``{"id": n}``, an object with ``.id``, or a bare int"""
        if isinstance(result, dict):
            value = result.get("id")
        elif isinstance(result, int):
            value = result
        else:
            value = getattr(result, "id", None)
        if isinstance(value, bool) or not value:
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None


def filter_profiles(profiles: List[Profile], query: str) -> List[Profile]:
    """Case-insensitive search over name, type, listen and remote"""
    if not query:
        return list(profiles)
    needle = query.lower()
    return [
        p for p in profiles
        if needle in p.name.lower()
        or needle in p.type.lower()
        or needle in p.listen.lower()
        or needle in p.remote.lower()
    ]
