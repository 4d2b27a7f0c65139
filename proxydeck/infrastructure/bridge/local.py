"""
Local backend bridge backed by JSON documents
"""
import asyncio
import time
from typing import Any, Callable, Dict, List, Optional, TypeVar

from ...core.constants import MAX_LOCAL_LOG_ENTRIES, UNKNOWN_VERSION
from ...core.exceptions import BridgeError, BridgeUnavailableError
from ...core.interfaces import BackendBridge, StateStore
from ...core.logging import get_logger
from ...core.utils import iso_now
from .engine import engine_version, find_engine

logger = get_logger(__name__)

PROFILES_DOC = "profiles"
HOST_MAPPINGS_DOC = "host_mappings"
RUNTIME_DOC = "runtime"
ACTIVITY_DOC = "activity"

T = TypeVar("T")


def format_uptime(seconds: float) -> str:
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes = rest // 60
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


class LocalBridge(BackendBridge):
    """
    Backend bridge for local use.

    Persists profiles, host mappings, desired runtime state, timeline
    events and logs as documents in a ``StateStore``, and detects the
    engine binary on this machine. It records which profiles and router
    should be running; launching engine processes is left to the engine
    host.

    Rules mirror the engine service: running profiles cannot be updated
    or deleted, a profile cannot be started twice or stopped when idle,
    and starting requires an available engine unless ``require_engine``
    is off.

    Each call runs as one document transaction on a worker thread.
    Transactions are serialized, so concurrent calls never interleave
    their read-modify-write of a document.
    """

    def __init__(
        self,
        store: StateStore,
        engine_path: Optional[str] = None,
        require_engine: bool = True,
    ):
        """
        Initialize local bridge.

        Args:
            store: Document storage
            engine_path: Engine binary; detected when omitted
            require_engine: Refuse to start profiles without an engine
        """
        self.store = store
        self.engine_path = engine_path
        self.require_engine = require_engine
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------
    # BackendBridge
    # ------------------------------------------------------------

    async def list_profiles(self) -> List[Dict[str, Any]]:
        return await self._transaction(self._list_profiles)

    async def add_profile(self, draft: Dict[str, Any]) -> Dict[str, Any]:
        return await self._transaction(self._add_profile, draft)

    async def update_profile(self, profile: Dict[str, Any]) -> None:
        await self._transaction(self._update_profile, profile)

    async def delete_profile(self, profile_id: int) -> None:
        await self._transaction(self._delete_profile, profile_id)

    async def start_profile(self, profile_id: int) -> None:
        await self._transaction(self._start_profile, profile_id)

    async def stop_profile(self, profile_id: int) -> None:
        await self._transaction(self._stop_profile, profile_id)

    async def is_engine_available(self) -> bool:
        return await asyncio.to_thread(self._engine) is not None

    async def get_engine_version(self) -> str:
        path = await asyncio.to_thread(self._engine)
        if path is None:
            raise BridgeUnavailableError("GOST not found in any common location")
        return await engine_version(path)

    async def get_service_status(self) -> Dict[str, Any]:
        runtime = await self._transaction(self._runtime)
        started = list(runtime["running"].values())
        version = UNKNOWN_VERSION
        try:
            version = await self.get_engine_version()
        except BridgeError as e:
            logger.debug(f"Engine version unavailable: {e}")
        return {
            "running": bool(started),
            "version": version,
            "uptime": format_uptime(time.time() - min(started)) if started else "",
        }

    async def list_timeline_events(self) -> List[Dict[str, Any]]:
        return await self._transaction(self._list_timeline_events)

    async def list_recent_logs(self, limit: int) -> List[Dict[str, Any]]:
        return await self._transaction(self._list_recent_logs, limit)

    async def clear_logs(self) -> None:
        await self._transaction(self._clear_logs)

    async def list_host_mappings(self) -> List[Dict[str, Any]]:
        return await self._transaction(self._list_host_mappings)

    async def upsert_host_mapping(self, mapping: Dict[str, Any]) -> None:
        await self._transaction(self._upsert_host_mapping, mapping)

    async def delete_host_mapping(self, mapping_id: int) -> None:
        await self._transaction(self._delete_host_mapping, mapping_id)

    async def is_host_router_running(self) -> List[Any]:
        return await self._transaction(self._is_host_router_running)

    async def start_host_router(self, addr: str) -> None:
        await self._transaction(self._start_host_router, addr)

    async def stop_host_router(self) -> None:
        await self._transaction(self._stop_host_router)

    async def _transaction(self, fn: Callable[..., T], *args: Any) -> T:
        async with self._lock:
            return await asyncio.to_thread(fn, *args)

    # ------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------

    def _list_profiles(self) -> List[Dict[str, Any]]:
        running = self._runtime()["running"]
        return [
            {**item, "status": "running" if str(item["id"]) in running else "stopped"}
            for item in self._doc(PROFILES_DOC)["items"]
        ]

    def _add_profile(self, draft: Dict[str, Any]) -> Dict[str, Any]:
        doc = self._doc(PROFILES_DOC)
        profile_id = doc["next_id"]
        item = {key: draft.get(key, "") for key in ("name", "type", "listen", "remote", "username", "password")}
        item["id"] = profile_id
        doc["items"].append(item)
        doc["next_id"] = profile_id + 1
        self.store.save(PROFILES_DOC, doc)

        self._log("INFO", "api", f"Profile created successfully: {item['name']} (ID: {profile_id})", profile_id, item["name"])
        self._event(
            "configuration", "Profile Created",
            f"New proxy profile '{item['name']}' created ({item['type']} on {item['listen']})",
            profile_name=item["name"],
        )
        return {"id": profile_id}

    def _update_profile(self, profile: Dict[str, Any]) -> None:
        profile_id = int(profile["id"])
        name = profile.get("name", "")
        if self._is_running(profile_id):
            self._log("WARN", "api", f"Cannot update running profile {name} (ID: {profile_id})", profile_id, name)
            raise BridgeError("cannot update a running profile, stop it first")

        doc = self._doc(PROFILES_DOC)
        index = self._index_of(doc, profile_id)
        fields = ("name", "type", "listen", "remote", "username", "password")
        doc["items"][index] = {"id": profile_id, **{key: profile.get(key, "") for key in fields}}
        self.store.save(PROFILES_DOC, doc)

        self._log("INFO", "api", f"Profile updated successfully: {name} (ID: {profile_id})", profile_id, name)
        self._event("configuration", "Profile Updated", f"Proxy profile '{name}' updated", profile_name=name)

    def _delete_profile(self, profile_id: int) -> None:
        doc = self._doc(PROFILES_DOC)
        index = self._index_of(doc, profile_id)
        name = doc["items"][index].get("name", "")
        if self._is_running(profile_id):
            self._log("WARN", "api", f"Cannot delete running profile {name} (ID: {profile_id})", profile_id, name)
            raise BridgeError("cannot delete a running profile, stop it first")

        del doc["items"][index]
        self.store.save(PROFILES_DOC, doc)

        self._log("INFO", "api", f"Profile deleted successfully: {name} (ID: {profile_id})", profile_id, name)
        self._event("configuration", "Profile Deleted", f"Proxy profile '{name}' deleted", profile_name=name)

    def _start_profile(self, profile_id: int) -> None:
        if self.require_engine and self._engine() is None:
            self._log("ERROR", "api", f"Cannot start profile {profile_id}: engine is not available", profile_id)
            raise BridgeUnavailableError("GOST is not available. Please install GOST and try again")

        if self._is_running(profile_id):
            self._log("WARN", "api", f"Profile {profile_id} is already running", profile_id)
            raise BridgeError("profile is already running")

        doc = self._doc(PROFILES_DOC)
        name = doc["items"][self._index_of(doc, profile_id)].get("name", "")

        runtime = self._runtime()
        runtime["running"][str(profile_id)] = time.time()
        self.store.save(RUNTIME_DOC, runtime)

        self._log("INFO", "api", f"Profile {profile_id} started successfully", profile_id, name)
        self._event("proxy_action", "Profile Started", f"Proxy profile '{name}' started", profile_name=name)

    def _stop_profile(self, profile_id: int) -> None:
        runtime = self._runtime()
        if str(profile_id) not in runtime["running"]:
            self._log("WARN", "api", f"Profile {profile_id} is not running", profile_id)
            raise BridgeError("profile is not running")

        del runtime["running"][str(profile_id)]
        self.store.save(RUNTIME_DOC, runtime)

        self._log("INFO", "api", f"Profile {profile_id} stopped successfully", profile_id)
        self._event("proxy_action", "Profile Stopped", f"Proxy profile {profile_id} stopped")

    # ------------------------------------------------------------
    # Activity
    # ------------------------------------------------------------

    def _list_timeline_events(self) -> List[Dict[str, Any]]:
        return list(reversed(self._doc(ACTIVITY_DOC)["events"]))

    def _list_recent_logs(self, limit: int) -> List[Dict[str, Any]]:
        logs = self._doc(ACTIVITY_DOC)["logs"]
        if limit <= 0:
            return []
        return logs[-limit:]

    def _clear_logs(self) -> None:
        doc = self._doc(ACTIVITY_DOC)
        doc["logs"] = []
        self.store.save(ACTIVITY_DOC, doc)

    # ------------------------------------------------------------
    # Host mapping
    # ------------------------------------------------------------

    def _list_host_mappings(self) -> List[Dict[str, Any]]:
        return list(self._doc(HOST_MAPPINGS_DOC)["items"])

    def _upsert_host_mapping(self, mapping: Dict[str, Any]) -> None:
        doc = self._doc(HOST_MAPPINGS_DOC)
        item = {key: mapping.get(key) for key in ("hostname", "ip", "port", "protocol", "active")}

        mapping_id = mapping.get("id")
        existing = next(
            (i for i, m in enumerate(doc["items"])
             if (mapping_id and m["id"] == mapping_id) or (not mapping_id and m["hostname"] == item["hostname"])),
            None,
        )
        if existing is None:
            item["id"] = doc["next_id"]
            doc["next_id"] += 1
            doc["items"].append(item)
            action = "Host Mapping Added"
        else:
            item["id"] = doc["items"][existing]["id"]
            doc["items"][existing] = item
            action = "Host Mapping Updated"
        self.store.save(HOST_MAPPINGS_DOC, doc)

        self._event(
            "host_mapping", action,
            f"Host mapping: {item['hostname']} -> {item['ip']}:{item['port']} ({item['protocol']})",
        )

    def _delete_host_mapping(self, mapping_id: int) -> None:
        doc = self._doc(HOST_MAPPINGS_DOC)
        remaining = [m for m in doc["items"] if m["id"] != mapping_id]
        if len(remaining) == len(doc["items"]):
            raise BridgeError(f"host mapping {mapping_id} not found")
        doc["items"] = remaining
        self.store.save(HOST_MAPPINGS_DOC, doc)
        self._event("host_mapping", "Host Mapping Deleted", f"Host mapping removed (ID: {mapping_id})")

    def _is_host_router_running(self) -> List[Any]:
        router = self._runtime()["router"]
        return [router["running"], router["addr"]]

    def _start_host_router(self, addr: str) -> None:
        runtime = self._runtime()
        if runtime["router"]["running"]:
            self._log("INFO", "api", "Stopping existing host router before starting new one")
        runtime["router"] = {"running": True, "addr": addr}
        self.store.save(RUNTIME_DOC, runtime)

        self._log("INFO", "api", f"Custom host router started on {addr}")
        self._event("host_mapping", "Host Router Started", f"Custom host mapping router started on {addr}")

    def _stop_host_router(self) -> None:
        runtime = self._runtime()
        if not runtime["router"]["running"]:
            raise BridgeError("host router not running")
        runtime["router"] = {"running": False, "addr": ""}
        self.store.save(RUNTIME_DOC, runtime)

        self._log("INFO", "api", "Host router stopped")
        self._event("host_mapping", "Host Router Stopped", "Custom host mapping router stopped")

    # ------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------

    def _engine(self) -> Optional[str]:
        if self.engine_path:
            return self.engine_path
        return find_engine()

    def _doc(self, name: str) -> Dict[str, Any]:
        doc = self.store.load(name) or {}
        if name == ACTIVITY_DOC:
            doc.setdefault("next_event_id", 1)
            doc.setdefault("next_log_id", 1)
            doc.setdefault("events", [])
            doc.setdefault("logs", [])
        else:
            doc.setdefault("next_id", 1)
            doc.setdefault("items", [])
        return doc

    def _runtime(self) -> Dict[str, Any]:
        runtime = self.store.load(RUNTIME_DOC) or {}
        runtime.setdefault("running", {})
        runtime.setdefault("router", {"running": False, "addr": ""})
        return runtime

    def _is_running(self, profile_id: int) -> bool:
        return str(profile_id) in self._runtime()["running"]

    @staticmethod
    def _index_of(doc: Dict[str, Any], profile_id: int) -> int:
        for index, item in enumerate(doc["items"]):
            if item["id"] == profile_id:
                return index
        raise BridgeError(f"profile {profile_id} not found")

    def _log(
        self,
        level: str,
        source: str,
        message: str,
        profile_id: Optional[int] = None,
        profile_name: str = "",
    ) -> None:
        doc = self._doc(ACTIVITY_DOC)
        doc["logs"].append({
            "id": doc["next_log_id"],
            "timestamp": iso_now(),
            "level": level,
            "source": source,
            "message": message,
            "profile_id": profile_id,
            "profile_name": profile_name,
        })
        doc["next_log_id"] += 1
        doc["logs"] = doc["logs"][-MAX_LOCAL_LOG_ENTRIES:]
        self.store.save(ACTIVITY_DOC, doc)

    def _event(
        self,
        event_type: str,
        action: str,
        details: str,
        status: str = "success",
        profile_name: str = "",
    ) -> None:
        doc = self._doc(ACTIVITY_DOC)
        doc["events"].append({
            "id": doc["next_event_id"],
            "type": event_type,
            "action": action,
            "details": details,
            "timestamp": iso_now(),
            "profile_name": profile_name,
            "status": status,
            "user": "admin",
        })
        doc["next_event_id"] += 1
        doc["events"] = doc["events"][-MAX_LOCAL_LOG_ENTRIES:]
        self.store.save(ACTIVITY_DOC, doc)
