"""
Engine status domain module
"""
from .models import ServiceStatus, RuntimeReport
from .poller import ServiceStatusPoller

__all__ = ["ServiceStatus", "RuntimeReport", "ServiceStatusPoller"]
