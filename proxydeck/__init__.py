"""
proxydeck - profile and service orchestration for the GOST proxy engine

Keeps one canonical view of the proxy profiles, engine health, host
router and activity logs, and reconciles it with a backend bridge:
- Profile CRUD with start/stop and stale-result protection
- Engine availability and service status polling
- Host mappings and host router control
- Confirmation gate for destructive actions
- Headless mode on built-in demo data when no backend is attached
"""

__version__ = "0.1.0"

from .config import OrchestratorConfig
from .orchestrator import Orchestrator

from .domain.profile import (
    ConnectionStatus,
    Profile,
    ProfileDraft,
    ProfileService,
    ProfileStatus,
)
from .domain.engine import ServiceStatus, ServiceStatusPoller
from .domain.hostmap import (
    HostMapping,
    HostMappingService,
    HostRouterController,
    RouterState,
)
from .domain.confirm import ConfirmationGate, PendingConfirmation, TargetKind

__all__ = [
    # Version
    "__version__",
    # Root
    "Orchestrator",
    "OrchestratorConfig",
    # Profiles
    "ConnectionStatus",
    "Profile",
    "ProfileDraft",
    "ProfileService",
    "ProfileStatus",
    # Engine
    "ServiceStatus",
    "ServiceStatusPoller",
    # Host mappings
    "HostMapping",
    "HostMappingService",
    "HostRouterController",
    "RouterState",
    # Confirmation
    "ConfirmationGate",
    "PendingConfirmation",
    "TargetKind",
]
