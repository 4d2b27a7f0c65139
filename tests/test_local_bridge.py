"""Tests for the JSON-document backed local bridge and its storage."""

import asyncio
from pathlib import Path

import pytest

from proxydeck.core.exceptions import BridgeError, BridgeUnavailableError
from proxydeck.infrastructure.bridge import local
from proxydeck.infrastructure.bridge.local import LocalBridge, format_uptime
from proxydeck.infrastructure.state.file_store import FileStateStore


@pytest.fixture(autouse=True)
def no_engine(monkeypatch):
    monkeypatch.setattr(local, "find_engine", lambda: None)


@pytest.fixture
def store(tmp_path: Path) -> FileStateStore:
    return FileStateStore(tmp_path / "state")


@pytest.fixture
def local_bridge(store) -> LocalBridge:
    return LocalBridge(store, require_engine=False)


DRAFT = {"name": "edge", "type": "forward", "listen": ":1080", "remote": "10.0.0.1:1080", "username": "", "password": ""}


class TestFileStateStore:
    def test_save_load_roundtrip(self, store):
        store.save("profiles", {"next_id": 2})
        assert store.load("profiles") == {"next_id": 2}
        assert store.exists("profiles")
        assert store.list() == ["profiles"]

    def test_missing_document(self, store):
        assert store.load("nothing") is None

    def test_unreadable_document_reads_as_missing(self, store):
        (store.state_dir / "broken.json").write_text("{not json")
        assert store.load("broken") is None

    def test_delete(self, store):
        store.save("runtime", {})
        store.delete("runtime")
        assert not store.exists("runtime")
        store.delete("runtime")


class TestProfiles:
    async def test_add_and_list(self, local_bridge):
        result = await local_bridge.add_profile(DRAFT)
        profiles = await local_bridge.list_profiles()
        assert result == {"id": 1}
        assert profiles == [{**DRAFT, "id": 1, "status": "stopped"}]

    async def test_concurrent_adds_do_not_interleave(self, local_bridge):
        results = await asyncio.gather(*(local_bridge.add_profile({**DRAFT, "name": f"edge-{n}"}) for n in range(5)))
        assert sorted(r["id"] for r in results) == [1, 2, 3, 4, 5]
        assert len(await local_bridge.list_profiles()) == 5
        assert len(await local_bridge.list_recent_logs(10)) == 5

    async def test_ids_increase(self, local_bridge):
        await local_bridge.add_profile(DRAFT)
        assert await local_bridge.add_profile(DRAFT) == {"id": 2}

    async def test_start_stop(self, local_bridge):
        await local_bridge.add_profile(DRAFT)
        await local_bridge.start_profile(1)
        assert (await local_bridge.list_profiles())[0]["status"] == "running"
        await local_bridge.stop_profile(1)
        assert (await local_bridge.list_profiles())[0]["status"] == "stopped"

    async def test_start_twice(self, local_bridge):
        await local_bridge.add_profile(DRAFT)
        await local_bridge.start_profile(1)
        with pytest.raises(BridgeError, match="profile is already running"):
            await local_bridge.start_profile(1)

    async def test_stop_idle(self, local_bridge):
        await local_bridge.add_profile(DRAFT)
        with pytest.raises(BridgeError, match="profile is not running"):
            await local_bridge.stop_profile(1)

    async def test_running_profile_cannot_change(self, local_bridge):
        await local_bridge.add_profile(DRAFT)
        await local_bridge.start_profile(1)
        with pytest.raises(BridgeError, match="cannot update a running profile"):
            await local_bridge.update_profile({**DRAFT, "id": 1, "name": "new"})
        with pytest.raises(BridgeError, match="cannot delete a running profile"):
            await local_bridge.delete_profile(1)

    async def test_update_and_delete(self, local_bridge):
        await local_bridge.add_profile(DRAFT)
        await local_bridge.update_profile({**DRAFT, "id": 1, "name": "renamed"})
        assert (await local_bridge.list_profiles())[0]["name"] == "renamed"
        await local_bridge.delete_profile(1)
        assert await local_bridge.list_profiles() == []

    async def test_unknown_profile(self, local_bridge):
        with pytest.raises(BridgeError, match="profile 9 not found"):
            await local_bridge.delete_profile(9)

    async def test_start_requires_engine(self, store):
        strict = LocalBridge(store, require_engine=True)
        await strict.add_profile(DRAFT)
        with pytest.raises(BridgeUnavailableError, match="GOST is not available"):
            await strict.start_profile(1)

    async def test_state_survives_new_bridge(self, store, local_bridge):
        await local_bridge.add_profile(DRAFT)
        await local_bridge.start_profile(1)
        reopened = LocalBridge(store, require_engine=False)
        assert (await reopened.list_profiles())[0]["status"] == "running"


class TestEngineAndService:
    async def test_no_engine(self, local_bridge):
        assert not await local_bridge.is_engine_available()
        with pytest.raises(BridgeUnavailableError):
            await local_bridge.get_engine_version()

    async def test_service_status(self, local_bridge):
        assert await local_bridge.get_service_status() == {"running": False, "version": "Unknown", "uptime": ""}
        await local_bridge.add_profile(DRAFT)
        await local_bridge.start_profile(1)
        status = await local_bridge.get_service_status()
        assert status["running"]
        assert status["uptime"] == "0m"

    @pytest.mark.parametrize("seconds,text", [(0, "0m"), (59, "0m"), (600, "10m"), (3725, "1h 2m"), (-5, "0m")])
    def test_format_uptime(self, seconds, text):
        assert format_uptime(seconds) == text


class TestActivity:
    async def test_actions_are_logged(self, local_bridge):
        await local_bridge.add_profile(DRAFT)
        await local_bridge.start_profile(1)

        logs = await local_bridge.list_recent_logs(10)
        events = await local_bridge.list_timeline_events()

        assert [entry["level"] for entry in logs] == ["INFO", "INFO"]
        assert logs[-1]["message"] == "Profile 1 started successfully"
        assert [event["action"] for event in events] == ["Profile Started", "Profile Created"]

    async def test_limit_and_clear(self, local_bridge):
        await local_bridge.add_profile(DRAFT)
        await local_bridge.add_profile(DRAFT)
        assert len(await local_bridge.list_recent_logs(1)) == 1
        assert await local_bridge.list_recent_logs(0) == []
        await local_bridge.clear_logs()
        assert await local_bridge.list_recent_logs(10) == []


class TestHostRouting:
    async def test_upsert_and_delete_mapping(self, local_bridge):
        await local_bridge.upsert_host_mapping({"hostname": "app.local", "ip": "127.0.0.1", "port": 3000, "protocol": "HTTP", "active": True})
        await local_bridge.upsert_host_mapping({"id": 1, "hostname": "app.local", "ip": "127.0.0.1", "port": 4000, "protocol": "HTTP", "active": True})
        mappings = await local_bridge.list_host_mappings()
        assert [(m["id"], m["port"]) for m in mappings] == [(1, 4000)]

        await local_bridge.delete_host_mapping(1)
        assert await local_bridge.list_host_mappings() == []
        with pytest.raises(BridgeError):
            await local_bridge.delete_host_mapping(1)

    async def test_router_lifecycle(self, local_bridge):
        assert await local_bridge.is_host_router_running() == [False, ""]
        await local_bridge.start_host_router(":8080")
        assert await local_bridge.is_host_router_running() == [True, ":8080"]
        await local_bridge.stop_host_router()
        with pytest.raises(BridgeError, match="host router not running"):
            await local_bridge.stop_host_router()
