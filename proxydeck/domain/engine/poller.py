"""
Engine availability and runtime status polling
"""
import asyncio
from typing import Optional

from ...core.constants import DEFAULT_SERVICE_POLL_INTERVAL, DEMO_ENGINE_VERSION
from ...core.interfaces import BackendBridge
from ...core.logging import get_logger
from ...core.telemetry import Telemetry, get_telemetry
from ...core.timer import RepeatingTimer
from ...core.utils import extract_error_message
from .models import RuntimeReport, ServiceStatus

logger = get_logger(__name__)

WRITER = "poller"


class ServiceStatusPoller:
    """
    Polls two independent facts about the engine.

    - availability: is the engine binary reachable, and which version
    - runtime status: is the managed service running, version, uptime

    Neither check ever raises. A failed availability probe reads as
    unavailable; a failed status probe reads as not running and still
    stamps ``last_check`` so staleness stays visible.
    """

    def __init__(
        self,
        state,
        bridge: Optional[BackendBridge],
        backend_available: bool,
        interval: float = DEFAULT_SERVICE_POLL_INTERVAL,
        telemetry: Optional[Telemetry] = None,
    ):
        self.state = state
        self.bridge = bridge
        self.backend_available = backend_available and bridge is not None
        self.interval = interval
        self.telemetry = telemetry or get_telemetry()
        self._timer: Optional[RepeatingTimer] = None

    @property
    def running(self) -> bool:
        return self._timer is not None and self._timer.running

    async def check_availability(self) -> bool:
        """Probe engine availability, then its version when available"""
        if not self.backend_available:
            self._write(lambda s: s.with_availability(True, DEMO_ENGINE_VERSION))
            return True

        try:
            available = bool(await self.bridge.is_engine_available())
            version = ""
            if available:
                version = str(await self.bridge.get_engine_version() or "")
        except Exception as e:
            logger.warning(f"Engine availability check failed: {extract_error_message(e)}")
            self.telemetry.record_event("poll.availability.failed")
            self._write(lambda s: s.with_availability(False, ""))
            return False

        self._write(lambda s: s.with_availability(available, version))
        return available

    async def check_status(self) -> ServiceStatus:
        """Probe the runtime status of the managed service"""
        if not self.backend_available:
            self._write(lambda s: s.with_runtime(False, DEMO_ENGINE_VERSION, ""))
            return self.state.service

        try:
            payload = await self.bridge.get_service_status()
        except Exception as e:
            logger.warning(f"Engine status check failed: {extract_error_message(e)}")
            self.telemetry.record_event("poll.status.failed")
            self._write(lambda s: s.failed_check())
            return self.state.service

        report = RuntimeReport.decode(payload)
        self._write(lambda s: s.with_runtime(report.running, report.version, report.uptime))
        logger.debug(f"Engine status: running={report.running} version={report.version}")
        return self.state.service

    async def poll_once(self) -> None:
        """Run both checks concurrently"""
        self.telemetry.record_event("poll.tick")
        await asyncio.gather(self.check_status(), self.check_availability())

    def start(self) -> None:
        """Poll immediately, then every ``interval`` seconds"""
        if self.running:
            return
        self._timer = RepeatingTimer(self.interval, self.poll_once, name="service-status")
        self._timer.start()
        logger.info(f"Service status polling every {self.interval}s")

    async def stop(self) -> None:
        if self._timer is None:
            return
        timer, self._timer = self._timer, None
        await timer.stop()

    def _write(self, fn) -> None:
        self.state.update(WRITER, "service", fn)
