"""
Unified exception definitions
"""
from typing import Optional


class ProxyDeckError(Exception):
    """Base exception class"""
    pass


class ConfigError(ProxyDeckError):
    """Configuration error"""
    pass


class BridgeError(ProxyDeckError):
    """Backend bridge rejected a call"""
    pass


class BridgeTimeoutError(BridgeError):
    """Backend bridge did not answer within the allowed time"""
    pass


class BridgeUnavailableError(BridgeError):
    """No backend bridge is attached"""
    pass


class ValidationError(ProxyDeckError):
    """Local input validation error, raised before any bridge call"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class StateOwnershipError(ProxyDeckError):
    """A component tried to write a state field it does not own"""
    pass
