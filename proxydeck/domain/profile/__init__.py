"""
Profile domain module
"""
from .models import Profile, ProfileDraft, ProfileStatus
from .aggregator import ConnectionStatus, aggregate
from .service import ProfileService, filter_profiles

__all__ = [
    "Profile",
    "ProfileDraft",
    "ProfileStatus",
    "ConnectionStatus",
    "aggregate",
    "ProfileService",
    "filter_profiles",
]
