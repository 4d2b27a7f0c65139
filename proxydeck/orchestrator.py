"""
Orchestration root.

Composes the controllers around one canonical state, wires the polling
timers and guarantees their teardown.
"""
from typing import Optional

from .config import OrchestratorConfig
from .core.interfaces import BackendBridge
from .core.logging import get_logger
from .core.telemetry import Telemetry, get_telemetry
from .domain.activity.service import ActivityService
from .domain.confirm.gate import ConfirmationGate, PromptHook
from .domain.confirm.models import PendingConfirmation, TargetKind
from .domain.engine.poller import ServiceStatusPoller
from .domain.hostmap.router import HostRouterController
from .domain.hostmap.service import HostMappingService
from .domain.notify import Notifier
from .domain.profile.service import ProfileService
from .infrastructure.state.store import OrchestrationState

logger = get_logger(__name__)


class Orchestrator:
    """
    Owns all mutable state and the components that write it.

    Whether a live backend is attached is decided once, here, from the
    ``bridge`` argument and handed to every controller. ``start()``
    mounts the dashboard: engine polling begins and profiles are
    loaded. ``close()`` (or leaving ``async with``) stops every timer.

    Usage:
        async with Orchestrator(bridge) as deck:
            await deck.profiles.toggle(42, start=True)
            print(deck.state.connection)
    """

    def __init__(
        self,
        bridge: Optional[BackendBridge] = None,
        config: Optional[OrchestratorConfig] = None,
        telemetry: Optional[Telemetry] = None,
        on_prompt: Optional[PromptHook] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            bridge: Backend bridge, or None to run headless on fallbacks
            config: Timing settings
            telemetry: Telemetry collector
            on_prompt: Called whenever a destructive action awaits confirmation
        """
        self.config = config or OrchestratorConfig()
        self.config.validate()
        self.bridge = bridge
        self.backend_available = bridge is not None
        self.telemetry = telemetry or get_telemetry()

        self.state = OrchestrationState()
        self.notifier = Notifier(self.state, ttl=self.config.notice_ttl)

        self.profiles = ProfileService(
            self.state,
            bridge,
            self.backend_available,
            list_timeout=self.config.list_timeout,
            telemetry=self.telemetry,
        )
        self.poller = ServiceStatusPoller(
            self.state,
            bridge,
            self.backend_available,
            interval=self.config.service_poll_interval,
            telemetry=self.telemetry,
        )
        self.router = HostRouterController(
            self.state,
            bridge,
            self.backend_available,
            self.notifier,
            interval=self.config.router_poll_interval,
            telemetry=self.telemetry,
        )
        self.host_mappings = HostMappingService(
            self.state,
            bridge,
            self.backend_available,
            self.notifier,
            telemetry=self.telemetry,
        )
        self.activity = ActivityService(
            self.state,
            bridge,
            self.backend_available,
            telemetry=self.telemetry,
        )

        self.gate = ConfirmationGate(self.state, on_prompt=on_prompt)
        self.gate.register(TargetKind.PROFILE, self.profiles.remove)
        self.gate.register(TargetKind.HOST_MAPPING, self.host_mappings.remove)

        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    # ------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------

    async def start(self, poll: bool = True) -> None:
        """
        Mount: start engine polling and load profiles.

        If anything fails during setup the timers already started are
        torn down before the error propagates.
        """
        if self._started:
            return
        mode = "live backend" if self.backend_available else "headless"
        logger.info(f"Starting orchestrator ({mode})")
        self._started = True
        try:
            if poll:
                self.poller.start()
            await self.profiles.list()
        except BaseException:
            await self.close()
            raise

    async def close(self) -> None:
        """Stop every timer; safe to call more than once"""
        try:
            await self.router.unwatch()
        finally:
            try:
                await self.poller.stop()
            finally:
                self.notifier.close()
                if self._started:
                    logger.info("Orchestrator stopped")
                self._started = False

    async def __aenter__(self) -> "Orchestrator":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ------------------------------------------------------------
    # Views
    # ------------------------------------------------------------

    async def show_host_mappings(self) -> None:
        """Host-mapping view opened: load mappings and poll the router"""
        self.router.watch()
        await self.host_mappings.list()

    async def hide_host_mappings(self) -> None:
        """Host-mapping view closed: stop router polling"""
        await self.router.unwatch()

    # ------------------------------------------------------------
    # Destructive actions
    # ------------------------------------------------------------

    def request_profile_removal(self, profile_id: int) -> Optional[PendingConfirmation]:
        profile = self.state.find_profile(profile_id)
        if profile is None:
            logger.warning(f"Cannot remove unknown profile {profile_id}")
            return None
        return self.gate.request(profile.id, profile.name, TargetKind.PROFILE)

    def request_host_mapping_removal(self, mapping_id: int) -> Optional[PendingConfirmation]:
        mapping = self.host_mappings.find(mapping_id)
        if mapping is None:
            logger.warning(f"Cannot remove unknown host mapping {mapping_id}")
            return None
        return self.gate.request(mapping.id, mapping.hostname, TargetKind.HOST_MAPPING)

    async def confirm(self) -> bool:
        return await self.gate.confirm()

    def cancel(self) -> None:
        self.gate.cancel()
