"""
Orchestrator settings
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .core.constants import (
    DEFAULT_LIST_TIMEOUT,
    DEFAULT_NOTICE_TTL,
    DEFAULT_ROUTER_POLL_INTERVAL,
    DEFAULT_SERVICE_POLL_INTERVAL,
    DEFAULT_STATE_DIR,
)
from .core.exceptions import ConfigError


@dataclass
class OrchestratorConfig:
    """Timing and backend settings for the orchestration root"""
    service_poll_interval: float = DEFAULT_SERVICE_POLL_INTERVAL
    router_poll_interval: float = DEFAULT_ROUTER_POLL_INTERVAL
    list_timeout: Optional[float] = DEFAULT_LIST_TIMEOUT
    notice_ttl: float = DEFAULT_NOTICE_TTL
    state_dir: Path = Path(DEFAULT_STATE_DIR)
    headless: bool = False
    engine_path: Optional[str] = None
    require_engine: bool = True
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    def validate(self) -> None:
        """Validate configuration"""
        if self.service_poll_interval <= 0:
            raise ConfigError(f"Invalid poll.service_interval: {self.service_poll_interval}")
        if self.router_poll_interval <= 0:
            raise ConfigError(f"Invalid poll.router_interval: {self.router_poll_interval}")
        if self.list_timeout is not None and self.list_timeout <= 0:
            raise ConfigError(f"Invalid bridge.list_timeout: {self.list_timeout}")
        if self.notice_ttl < 0:
            raise ConfigError(f"Invalid notice_ttl: {self.notice_ttl}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OrchestratorConfig":
        """
        Create from a merged configuration mapping.

        Raises:
            ConfigError: If a value has the wrong type or is out of range
        """
        poll = data.get("poll", {}) or {}
        bridge = data.get("bridge", {}) or {}
        try:
            config = cls(
                service_poll_interval=float(poll.get("service_interval", DEFAULT_SERVICE_POLL_INTERVAL)),
                router_poll_interval=float(poll.get("router_interval", DEFAULT_ROUTER_POLL_INTERVAL)),
                list_timeout=float(bridge.get("list_timeout", DEFAULT_LIST_TIMEOUT)),
                notice_ttl=float(data.get("notice_ttl", DEFAULT_NOTICE_TTL)),
                state_dir=Path(str(data.get("state_dir", DEFAULT_STATE_DIR))).expanduser(),
                headless=bool(data.get("headless", False)),
                engine_path=bridge.get("engine_path") or None,
                require_engine=bool(bridge.get("require_engine", True)),
                log_level=str(data.get("log_level", "INFO")).upper(),
                log_file=Path(str(data["log_file"])).expanduser() if data.get("log_file") else None,
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e

        config.validate()
        return config
