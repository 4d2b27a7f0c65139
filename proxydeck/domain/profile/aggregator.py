"""
Connection status aggregate derived from the profile collection
"""
from dataclasses import dataclass
from typing import Iterable, Tuple

from .models import Profile, ProfileStatus


@dataclass(frozen=True)
class ConnectionStatus:
    """Derived, read-only connection summary"""
    is_connected: bool = False
    active_profiles: int = 0
    total_profiles: int = 0

    def to_dict(self) -> dict:
        return {
            "is_connected": self.is_connected,
            "active_profiles": self.active_profiles,
            "total_profiles": self.total_profiles,
        }


def aggregate(profiles: Iterable[Profile]) -> ConnectionStatus:
    """Count running profiles; connected means at least one is running"""
    total = 0
    active = 0
    for profile in profiles:
        total += 1
        if profile.status is ProfileStatus.RUNNING:
            active += 1
    return ConnectionStatus(
        is_connected=active > 0,
        active_profiles=active,
        total_profiles=total,
    )


def status_signature(profiles: Iterable[Profile]) -> Tuple[Tuple[int, str], ...]:
    """Membership and status of a collection; changes exactly when the aggregate may"""
    return tuple((p.id, p.status.value) for p in profiles)
