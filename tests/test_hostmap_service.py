"""Tests for host mapping CRUD."""

import pytest

from proxydeck.core.exceptions import BridgeError
from proxydeck.domain.hostmap.models import HostMapping
from proxydeck.domain.hostmap.service import HostMappingService


@pytest.fixture
def service(state, bridge, notifier, telemetry) -> HostMappingService:
    return HostMappingService(state, bridge, True, notifier, telemetry=telemetry)


@pytest.fixture
def headless(state, notifier, telemetry) -> HostMappingService:
    return HostMappingService(state, None, False, notifier, telemetry=telemetry)


def mapping(**changes) -> HostMapping:
    data = {"hostname": "app.local", "ip": "127.0.0.1", "port": 3000}
    data.update(changes)
    return HostMapping(**data)


class TestBackend:
    async def test_list(self, service, state, bridge):
        bridge.host_mappings = [{"id": 1, "hostname": "a.local", "ip": "10.0.0.1", "port": 80, "protocol": "HTTP", "active": True}]
        mappings = await service.list()
        assert [m.hostname for m in mappings] == ["a.local"]
        assert state.host_mappings == mappings

    async def test_list_failure_records_error(self, service, state, bridge):
        bridge.failures["list_host_mappings"] = BridgeError("router offline")
        await service.list()
        assert state.hostmap_error == "router offline"

    async def test_invalid_mapping_never_reaches_bridge(self, service, state, bridge):
        assert await service.upsert(mapping(port=0)) is None
        assert state.hostmap_error == "Port must be a positive number"
        assert bridge.count("upsert_host_mapping") == 0

    async def test_upsert_relists_and_notifies(self, service, state, bridge):
        await service.upsert(mapping())
        assert bridge.count("list_host_mappings") == 1
        assert [m.hostname for m in state.host_mappings] == ["app.local"]
        assert state.host_mappings[0].id is not None
        assert state.notice.message == "Host mapping saved: app.local -> http://127.0.0.1:3000"

    async def test_upsert_returns_reloaded_record(self, service, state):
        saved = await service.upsert(mapping())
        assert saved.id is not None
        assert saved == state.host_mappings[0]

    async def test_update_returns_record_by_id(self, service, state):
        first = await service.upsert(mapping())
        await service.upsert(mapping(hostname="api.local"))
        updated = await service.upsert(mapping(id=first.id, port=4000))
        assert updated.id == first.id
        assert updated.port == 4000

    async def test_upsert_rejection(self, service, state, bridge):
        bridge.failures["upsert_host_mapping"] = BridgeError("duplicate hostname")
        assert await service.upsert(mapping()) is None
        assert state.hostmap_error == "duplicate hostname"
        assert state.notice.level == "error"

    async def test_remove(self, service, state, bridge):
        await service.upsert(mapping())
        mapping_id = state.host_mappings[0].id
        assert await service.remove(mapping_id)
        assert state.host_mappings == []
        assert bridge.host_mappings == []

    async def test_remove_rejection_keeps_mapping(self, service, state, bridge):
        await service.upsert(mapping())
        bridge.failures["delete_host_mapping"] = BridgeError("locked")
        assert not await service.remove(state.host_mappings[0].id)
        assert len(state.host_mappings) == 1


class TestHeadless:
    async def test_add_assigns_synthetic_id(self, headless, state):
        saved = await headless.upsert(mapping())
        assert saved.id is not None
        assert state.host_mappings == [saved]

    async def test_update_replaces_by_id(self, headless, state):
        saved = await headless.upsert(mapping())
        await headless.upsert(mapping(id=saved.id, port=4000))
        assert [m.port for m in state.host_mappings] == [4000]

    async def test_remove(self, headless, state):
        saved = await headless.upsert(mapping())
        assert await headless.remove(saved.id)
        assert headless.find(saved.id) is None
