"""
Profiles shown when no backend is attached or a listing times out
"""
from typing import List

from .models import Profile, ProfileStatus


def mock_profiles() -> List[Profile]:
    return [
        Profile(
            id=1,
            name="Local SOCKS5",
            type="forward",
            listen=":1080",
            remote="127.0.0.1:1080",
            status=ProfileStatus.STOPPED,
        ),
        Profile(
            id=2,
            name="HTTP Proxy",
            type="http",
            listen=":8080",
            remote="example.com:80",
            username="demo-user",
            password="demo-password",
            status=ProfileStatus.RUNNING,
        ),
    ]
