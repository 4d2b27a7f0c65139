"""
Engine status models
"""
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, Optional

from ...core.constants import UNKNOWN_VERSION
from ...core.utils import utc_now


@dataclass(frozen=True)
class ServiceStatus:
    """
    Engine-level status.

    ``available``/``engine_version`` come from the availability probe,
    ``running``/``version``/``uptime`` from the runtime status probe.
    ``last_check`` is stamped on every status probe, failed or not.
    """
    available: bool = False
    engine_version: str = ""
    running: bool = False
    version: str = ""
    uptime: str = ""
    last_check: Optional[datetime] = None

    def with_availability(self, available: bool, engine_version: str) -> "ServiceStatus":
        return replace(self, available=available, engine_version=engine_version)

    def with_runtime(self, running: bool, version: str, uptime: str) -> "ServiceStatus":
        return replace(self, running=running, version=version, uptime=uptime, last_check=utc_now())

    def failed_check(self) -> "ServiceStatus":
        """Status probe failed: keep version/uptime, mark not running, stamp the check"""
        return replace(self, running=False, last_check=utc_now())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "available": self.available,
            "engine_version": self.engine_version,
            "running": self.running,
            "version": self.version,
            "uptime": self.uptime,
            "last_check": self.last_check.isoformat() if self.last_check else None,
        }


@dataclass(frozen=True)
class RuntimeReport:
    """Decoded ``get_service_status`` payload"""
    running: bool = False
    version: str = UNKNOWN_VERSION
    uptime: str = ""

    @classmethod
    def decode(cls, payload: Any) -> "RuntimeReport":
        """Missing or falsy fields fall back to their defaults"""
        if not isinstance(payload, dict):
            return cls()
        return cls(
            running=bool(payload.get("running") or False),
            version=str(payload.get("version") or UNKNOWN_VERSION),
            uptime=str(payload.get("uptime") or ""),
        )
