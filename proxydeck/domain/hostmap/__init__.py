"""
Host mapping domain module
"""
from .models import HostMapping, RouterState, RouterProbe, decode_router_probe
from .router import HostRouterController
from .service import HostMappingService

__all__ = [
    "HostMapping",
    "RouterState",
    "RouterProbe",
    "decode_router_probe",
    "HostRouterController",
    "HostMappingService",
]
