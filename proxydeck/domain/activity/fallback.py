"""
Timeline and log entries shown when no backend is attached
"""
from datetime import timedelta
from typing import List

from ...core.utils import utc_now
from .models import LogEntry, TimelineEvent


def mock_timeline() -> List[TimelineEvent]:
    now = utc_now()
    return [
        TimelineEvent(
            id=2,
            type="proxy_action",
            action="Service Started",
            details="HTTP Proxy started on :8080",
            timestamp=(now - timedelta(minutes=2)).isoformat(),
            profile_name="HTTP Proxy",
            status="success",
            user="admin",
            duration="1s",
        ),
        TimelineEvent(
            id=1,
            type="configuration",
            action="Profile Created",
            details="New forward proxy profile created",
            timestamp=(now - timedelta(hours=1)).isoformat(),
            profile_name="Local SOCKS5",
            status="success",
            user="admin",
            duration="2s",
        ),
    ]


def mock_logs() -> List[LogEntry]:
    now = utc_now()
    return [
        LogEntry(
            id=1,
            timestamp=(now - timedelta(minutes=2)).isoformat(),
            level="INFO",
            source="system",
            message="API initialized successfully",
        ),
        LogEntry(
            id=2,
            timestamp=(now - timedelta(minutes=1)).isoformat(),
            level="INFO",
            source="api",
            message='Profile "HTTP Proxy" created successfully (ID: 2)',
            profile_id=2,
            profile_name="HTTP Proxy",
        ),
    ]
