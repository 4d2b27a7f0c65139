"""Tests for timeline and log retrieval."""

import pytest

from proxydeck.core.exceptions import BridgeError
from proxydeck.domain.activity.models import LogEntry
from proxydeck.domain.activity.service import ActivityService, filter_logs


@pytest.fixture
def service(state, bridge, telemetry) -> ActivityService:
    return ActivityService(state, bridge, True, telemetry=telemetry)


def log(entry_id: int, level: str, message: str) -> dict:
    return {"id": entry_id, "timestamp": "2026-01-01T00:00:00", "level": level, "source": "api", "message": message}


class TestActivityService:
    async def test_recent_logs(self, service, state, bridge):
        bridge.logs = [log(1, "info", "started"), log(2, "ERROR", "failed")]
        logs = await service.recent_logs(limit=1)
        assert [entry.id for entry in logs] == [2]
        assert bridge.calls[-1] == ("list_recent_logs", (1,))
        assert state.logs == logs

    async def test_levels_are_upper_cased(self, service, bridge):
        bridge.logs = [log(1, "warn", "slow")]
        logs = await service.recent_logs()
        assert logs[0].level == "WARN"

    async def test_timeline(self, service, state, bridge):
        bridge.timeline = [{"id": 1, "type": "configuration", "action": "Profile Created"}]
        events = await service.timeline()
        assert events[0].action == "Profile Created"
        assert events[0].status == "success"

    async def test_failure_records_error(self, service, state, bridge):
        bridge.failures["list_timeline_events"] = BridgeError("timeline unavailable")
        assert await service.timeline() == []
        assert state.activity_error == "timeline unavailable"

    async def test_clear_logs(self, service, state, bridge):
        bridge.logs = [log(1, "INFO", "x")]
        await service.recent_logs()
        assert await service.clear_logs()
        assert state.logs == []
        assert bridge.logs == []

    async def test_headless_uses_demo_entries(self, state, telemetry):
        service = ActivityService(state, None, False, telemetry=telemetry)
        assert len(await service.timeline()) == 2
        assert len(await service.recent_logs()) == 2


class TestFilterLogs:
    entries = [
        LogEntry(1, "t", "INFO", "api", "Profile created"),
        LogEntry(2, "t", "ERROR", "api", "Profile failed to start"),
        LogEntry(3, "t", "INFO", "system", "API initialized"),
    ]

    def test_all_levels(self):
        assert filter_logs(self.entries) == self.entries

    def test_by_level(self):
        assert [e.id for e in filter_logs(self.entries, "error")] == [2]

    def test_by_query(self):
        assert [e.id for e in filter_logs(self.entries, "all", "PROFILE")] == [1, 2]

    def test_level_and_query(self):
        assert [e.id for e in filter_logs(self.entries, "INFO", "api")] == [3]

    def test_by_source(self):
        assert [e.id for e in filter_logs(self.entries, source="system")] == [3]
        assert [e.id for e in filter_logs(self.entries, source="gost")] == []

    def test_source_and_level(self):
        assert [e.id for e in filter_logs(self.entries, "INFO", source="API")] == [1]

    async def test_service_filters_loaded_logs(self, state, telemetry):
        service = ActivityService(state, None, False, telemetry=telemetry)
        await service.recent_logs()
        assert [e.source for e in service.filter_logs(source="api")] == ["api"]
