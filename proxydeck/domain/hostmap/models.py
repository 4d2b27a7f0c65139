"""
Host mapping domain models
"""
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from ...core.constants import HOST_MAPPING_PROTOCOLS, DEFAULT_HOST_MAPPING_PORT
from ...core.exceptions import ValidationError


@dataclass(frozen=True)
class HostMapping:
    """A hostname -> destination rule served by the host router"""
    hostname: str
    ip: str
    port: int = DEFAULT_HOST_MAPPING_PORT
    protocol: str = "HTTP"
    active: bool = True
    id: Optional[int] = None

    def validate(self) -> None:
        """
        Validate mapping.

        Raises:
            ValidationError: On the first offending field
        """
        if not self.hostname or not self.hostname.strip():
            raise ValidationError("Hostname is required", field="hostname")
        if not self.ip or not self.ip.strip():
            raise ValidationError("IP address is required", field="ip")
        if isinstance(self.port, bool) or not isinstance(self.port, int) or self.port <= 0:
            raise ValidationError("Port must be a positive number", field="port")
        if self.protocol not in HOST_MAPPING_PROTOCOLS:
            raise ValidationError(
                f"Invalid protocol: {self.protocol}, must be one of {', '.join(HOST_MAPPING_PROTOCOLS)}",
                field="protocol",
            )

    def with_id(self, mapping_id: int) -> "HostMapping":
        return replace(self, id=mapping_id)

    @property
    def target(self) -> str:
        scheme = "https" if self.protocol == "HTTPS" else self.protocol.lower()
        return f"{scheme}://{self.ip}:{self.port}"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "hostname": self.hostname,
            "ip": self.ip,
            "port": self.port,
            "protocol": self.protocol,
            "active": self.active,
        }
        if self.id is not None:
            data["id"] = self.id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HostMapping":
        raw_id = data.get("id")
        return cls(
            id=int(raw_id) if raw_id not in (None, 0, "") else None,
            hostname=str(data.get("hostname") or ""),
            ip=str(data.get("ip") or ""),
            port=int(data.get("port") or DEFAULT_HOST_MAPPING_PORT),
            protocol=str(data.get("protocol") or "HTTP").upper(),
            active=bool(data.get("active", True)),
        )


@dataclass(frozen=True)
class RouterState:
    """Host router control state"""
    running: bool = False
    listen_addr: str = ""
    busy: bool = False
    field_error: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "running": self.running,
            "listen_addr": self.listen_addr,
            "busy": self.busy,
            "field_error": self.field_error,
            "error": self.error,
        }


@dataclass(frozen=True)
class RouterProbe:
    """Normalized ``is_host_router_running`` result"""
    running: bool
    addr: Optional[str] = None


def decode_router_probe(raw: Any) -> RouterProbe:
    """
    Decode the router probe payload.

    Accepts a bare bool, a ``[running, addr]`` pair (list or tuple), or a
    ``{"running": ..., "addr": ...}`` mapping. Anything else reads as not
    running. An empty address is treated as absent; any other address
    is returned as text.
    """
    if isinstance(raw, bool):
        return RouterProbe(running=raw)

    if isinstance(raw, (list, tuple)):
        running = bool(raw[0]) if len(raw) > 0 else False
        addr = raw[1] if len(raw) > 1 else None
        return RouterProbe(running=running, addr=_addr_text(addr))

    if isinstance(raw, dict):
        return RouterProbe(running=bool(raw.get("running", False)), addr=_addr_text(raw.get("addr")))

    return RouterProbe(running=False)


def _addr_text(addr: Any) -> Optional[str]:
    if addr is None or addr == "":
        return None
    return str(addr)
