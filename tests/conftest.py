"""Shared fixtures: an in-memory backend bridge and fresh state."""

import asyncio
from typing import Any, Dict, List, Optional, Set

import pytest

from proxydeck.core.exceptions import BridgeError
from proxydeck.core.interfaces import BackendBridge
from proxydeck.core.telemetry import Telemetry
from proxydeck.domain.notify import Notifier
from proxydeck.infrastructure.state.store import OrchestrationState


def profile_dict(profile_id: int, name: str = "", status: str = "stopped", **extra) -> Dict[str, Any]:
    """Backend-shaped profile payload."""
    data = {
        "id": profile_id,
        "name": name or f"profile-{profile_id}",
        "type": "forward",
        "listen": f":{1000 + profile_id}",
        "remote": "127.0.0.1:1080",
        "username": "",
        "password": "",
        "status": status,
    }
    data.update(extra)
    return data


async def settle(rounds: int = 10) -> None:
    """Let pending tasks run up to their next suspension point."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeBridge(BackendBridge):
    """
    In-memory bridge that records every call.

    - ``failures[name]``: exception raised by that call
    - ``holds[name]``: event the next call waits on (consumed by one call)
    - ``hang``: names of calls that never return
    - ``results[name]``: value returned instead of the default
    """

    def __init__(self):
        self.profiles: List[Dict[str, Any]] = []
        self.host_mappings: List[Dict[str, Any]] = []
        self.timeline: List[Dict[str, Any]] = []
        self.logs: List[Dict[str, Any]] = []
        self.engine_available = True
        self.engine_version = "v3.0.0"
        self.service = {"running": True, "version": "v3.0.0", "uptime": "1h 5m"}
        self.router: Any = [False, ""]

        self.calls: List[tuple] = []
        self.failures: Dict[str, BaseException] = {}
        self.holds: Dict[str, asyncio.Event] = {}
        self.hang: Set[str] = set()
        self.results: Dict[str, Any] = {}
        self._next_id = 100

    def hold(self, name: str) -> asyncio.Event:
        event = asyncio.Event()
        self.holds[name] = event
        return event

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    async def _call(self, name: str, *args) -> None:
        self.calls.append((name, args))
        if name in self.hang:
            await asyncio.Event().wait()
        hold = self.holds.pop(name, None)
        if hold is not None:
            await hold.wait()
        failure = self.failures.get(name)
        if failure is not None:
            raise failure

    def _find(self, profile_id: int) -> Dict[str, Any]:
        for item in self.profiles:
            if item["id"] == profile_id:
                return item
        raise BridgeError(f"profile {profile_id} not found")

    async def list_profiles(self) -> List[Dict[str, Any]]:
        snapshot = [dict(p) for p in self.profiles]
        await self._call("list_profiles")
        return self.results.get("list_profiles", snapshot)

    async def add_profile(self, draft: Dict[str, Any]) -> Any:
        await self._call("add_profile", draft)
        if "add_profile" in self.results:
            return self.results["add_profile"]
        self._next_id += 1
        self.profiles.append({**draft, "id": self._next_id, "status": "stopped"})
        return {"id": self._next_id}

    async def update_profile(self, profile: Dict[str, Any]) -> None:
        await self._call("update_profile", profile)
        item = self._find(profile["id"])
        item.update(profile)

    async def delete_profile(self, profile_id: int) -> None:
        await self._call("delete_profile", profile_id)
        self.profiles.remove(self._find(profile_id))

    async def start_profile(self, profile_id: int) -> None:
        await self._call("start_profile", profile_id)
        self._find(profile_id)["status"] = "running"

    async def stop_profile(self, profile_id: int) -> None:
        await self._call("stop_profile", profile_id)
        self._find(profile_id)["status"] = "stopped"

    async def is_engine_available(self) -> bool:
        await self._call("is_engine_available")
        return self.engine_available

    async def get_engine_version(self) -> str:
        await self._call("get_engine_version")
        return self.engine_version

    async def get_service_status(self) -> Dict[str, Any]:
        await self._call("get_service_status")
        return self.results.get("get_service_status", dict(self.service))

    async def list_timeline_events(self) -> List[Dict[str, Any]]:
        await self._call("list_timeline_events")
        return list(self.timeline)

    async def list_recent_logs(self, limit: int) -> List[Dict[str, Any]]:
        await self._call("list_recent_logs", limit)
        return self.logs[-limit:]

    async def clear_logs(self) -> None:
        await self._call("clear_logs")
        self.logs = []

    async def list_host_mappings(self) -> List[Dict[str, Any]]:
        await self._call("list_host_mappings")
        return [dict(m) for m in self.host_mappings]

    async def upsert_host_mapping(self, mapping: Dict[str, Any]) -> None:
        await self._call("upsert_host_mapping", mapping)
        mapping = dict(mapping)
        if mapping.get("id") is None:
            self._next_id += 1
            mapping["id"] = self._next_id
            self.host_mappings.append(mapping)
        else:
            self.host_mappings = [mapping if m["id"] == mapping["id"] else m for m in self.host_mappings]

    async def delete_host_mapping(self, mapping_id: int) -> None:
        await self._call("delete_host_mapping", mapping_id)
        self.host_mappings = [m for m in self.host_mappings if m["id"] != mapping_id]

    async def is_host_router_running(self) -> Any:
        await self._call("is_host_router_running")
        return self.router

    async def start_host_router(self, addr: str) -> None:
        await self._call("start_host_router", addr)
        self.router = [True, addr]

    async def stop_host_router(self) -> None:
        await self._call("stop_host_router")
        self.router = [False, ""]


@pytest.fixture
def bridge() -> FakeBridge:
    return FakeBridge()


@pytest.fixture
def state() -> OrchestrationState:
    return OrchestrationState()


@pytest.fixture
def telemetry() -> Telemetry:
    return Telemetry()


@pytest.fixture
def notifier(state: OrchestrationState) -> Notifier:
    return Notifier(state, ttl=0)
