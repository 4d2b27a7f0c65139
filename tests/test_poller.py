"""Tests for engine availability and service status polling."""

import asyncio

import pytest

from proxydeck.core.exceptions import BridgeError
from proxydeck.domain.engine.poller import ServiceStatusPoller

from conftest import settle


@pytest.fixture
def poller(state, bridge, telemetry) -> ServiceStatusPoller:
    return ServiceStatusPoller(state, bridge, True, interval=0.01, telemetry=telemetry)


class TestChecks:
    async def test_availability_reads_version(self, poller, state):
        assert await poller.check_availability()
        assert state.service.available
        assert state.service.engine_version == "v3.0.0"

    async def test_unavailable_engine_skips_version(self, poller, state, bridge):
        bridge.engine_available = False
        assert not await poller.check_availability()
        assert state.service.engine_version == ""
        assert bridge.count("get_engine_version") == 0

    async def test_availability_failure_reads_unavailable(self, poller, state, bridge, telemetry):
        bridge.failures["is_engine_available"] = BridgeError("boom")
        assert not await poller.check_availability()
        assert not state.service.available
        assert telemetry.count("poll.availability.failed") == 1

    async def test_status_success(self, poller, state):
        status = await poller.check_status()
        assert status.running
        assert status.version == "v3.0.0"
        assert status.uptime == "1h 5m"
        assert status.last_check is not None

    async def test_status_defaults_for_missing_fields(self, poller, state, bridge):
        bridge.results["get_service_status"] = {"running": True}
        status = await poller.check_status()
        assert status.version == "Unknown"
        assert status.uptime == ""

    async def test_status_failure_reads_not_running_and_stamps_check(self, poller, state, bridge, telemetry):
        await poller.check_status()
        first_check = state.service.last_check
        bridge.failures["get_service_status"] = BridgeError("service down")

        status = await poller.check_status()

        assert not status.running
        assert status.version == "v3.0.0"
        assert status.last_check >= first_check
        assert telemetry.count("poll.status.failed") == 1

    async def test_checks_are_independent(self, poller, state, bridge):
        bridge.failures["get_service_status"] = BridgeError("service down")
        await poller.poll_once()
        assert state.service.available
        assert not state.service.running

    async def test_headless_demo_status(self, state, telemetry):
        poller = ServiceStatusPoller(state, None, False, telemetry=telemetry)
        await poller.poll_once()
        assert state.service.available
        assert state.service.engine_version == "3.2.4"
        assert not state.service.running
        assert state.service.last_check is not None


class TestSchedule:
    """Polling runs immediately, then on an interval, until stopped."""

    async def test_polls_immediately_and_repeatedly(self, poller, bridge):
        poller.start()
        await settle()
        assert bridge.count("get_service_status") >= 1

        await asyncio.sleep(0.05)
        await poller.stop()
        assert bridge.count("get_service_status") >= 3

    async def test_no_polls_after_stop(self, poller, bridge):
        poller.start()
        await asyncio.sleep(0.03)
        await poller.stop()
        calls = bridge.count("get_service_status")

        await asyncio.sleep(0.05)

        assert bridge.count("get_service_status") == calls
        assert not poller.running

    async def test_hanging_probe_does_not_block_next_tick(self, poller, bridge):
        bridge.hang.add("get_service_status")
        poller.start()
        await asyncio.sleep(0.05)
        await poller.stop()
        assert bridge.count("get_service_status") >= 2

    async def test_start_twice_keeps_one_timer(self, poller, bridge):
        poller.start()
        timer = poller._timer
        poller.start()
        assert poller._timer is timer
        await poller.stop()
