"""
Host router control
"""
from dataclasses import replace
from typing import Optional

from ...core.constants import DEFAULT_ROUTER_POLL_INTERVAL
from ...core.exceptions import ValidationError
from ...core.interfaces import BackendBridge
from ...core.logging import get_logger
from ...core.telemetry import Telemetry, get_telemetry
from ...core.timer import RepeatingTimer
from ...core.utils import extract_error_message, parse_listen_port
from .models import RouterState, decode_router_probe

logger = get_logger(__name__)

WRITER = "router"


class HostRouterController:
    """
    Starts, stops and observes the host-mapping router.

    ``start`` validates the listen address locally before anything
    reaches the bridge. While a start or stop is in flight the state is
    ``busy`` and further start/stop calls are refused, not queued.
    Running-state polling is scoped to the host-mapping view through
    ``watch()``/``unwatch()``.
    """

    def __init__(
        self,
        state,
        bridge: Optional[BackendBridge],
        backend_available: bool,
        notifier,
        interval: float = DEFAULT_ROUTER_POLL_INTERVAL,
        telemetry: Optional[Telemetry] = None,
    ):
        self.state = state
        self.bridge = bridge
        self.backend_available = backend_available and bridge is not None
        self.notifier = notifier
        self.interval = interval
        self.telemetry = telemetry or get_telemetry()
        self._timer: Optional[RepeatingTimer] = None

    @property
    def busy(self) -> bool:
        return self.state.router.busy

    @property
    def watching(self) -> bool:
        return self._timer is not None and self._timer.running

    async def is_running(self) -> bool:
        """Query the router and record its running state and address"""
        if not self.backend_available:
            return self.state.router.running

        try:
            raw = await self.bridge.is_host_router_running()
        except Exception as e:
            logger.warning(f"Host router status check failed: {extract_error_message(e)}")
            self.telemetry.record_event("poll.router.failed")
            return self.state.router.running

        probe = decode_router_probe(raw)
        changes = {"running": probe.running}
        if probe.addr:
            changes["listen_addr"] = probe.addr
        self._set(**changes)
        return probe.running

    async def start(self, addr: str) -> bool:
        """
        Start the router on ``addr`` (``:PORT``).

        Returns:
            True if the router was started
        """
        if self.busy:
            logger.warning("Host router is busy, ignoring start request")
            return False

        try:
            parse_listen_port(addr)
        except ValidationError as e:
            self._set(field_error=e.message)
            logger.info(f"Rejected router listen address {addr!r}: {e.message}")
            return False

        self._set(busy=True, field_error=None, error=None)
        try:
            if self.backend_available:
                await self.bridge.start_host_router(addr)
            self._set(running=True, listen_addr=addr)
            self.telemetry.record_event("router.started", {"addr": addr})
            self.notifier.success(f"Host router started on {addr}")
            return True
        except Exception as e:
            message = extract_error_message(e, "Failed to start host router")
            self._set(error=message)
            self.telemetry.record_event("router.error", {"action": "start", "error": message})
            self.notifier.error(f"Failed to start host router: {message}")
            return False
        finally:
            self._set(busy=False)

    async def stop(self) -> bool:
        """
        Stop the router.

        Returns:
            True if the router was stopped
        """
        if self.busy:
            logger.warning("Host router is busy, ignoring stop request")
            return False

        self._set(busy=True, error=None)
        try:
            if self.backend_available:
                await self.bridge.stop_host_router()
            self._set(running=False)
            self.telemetry.record_event("router.stopped")
            self.notifier.success("Host router stopped")
            return True
        except Exception as e:
            message = extract_error_message(e, "Failed to stop host router")
            self._set(error=message)
            self.telemetry.record_event("router.error", {"action": "stop", "error": message})
            self.notifier.error(f"Failed to stop host router: {message}")
            return False
        finally:
            self._set(busy=False)

    def watch(self) -> None:
        """Begin polling the router's running state"""
        if self.watching:
            return
        self._timer = RepeatingTimer(self.interval, self._poll, name="host-router")
        self._timer.start()

    async def unwatch(self) -> None:
        """Stop polling"""
        if self._timer is None:
            return
        timer, self._timer = self._timer, None
        await timer.stop()

    async def _poll(self) -> None:
        await self.is_running()

    def _set(self, **changes) -> None:
        self.state.update(WRITER, "router", lambda current: replace(current, **changes))
