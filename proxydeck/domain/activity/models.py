"""
Activity domain models: timeline events and log entries
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class TimelineEvent:
    """Activity timeline entry"""
    id: int
    type: str
    action: str
    details: str = ""
    timestamp: str = ""
    profile_name: str = ""
    status: str = "success"
    user: str = ""
    duration: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "action": self.action,
            "details": self.details,
            "timestamp": self.timestamp,
            "profile_name": self.profile_name,
            "status": self.status,
            "user": self.user,
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimelineEvent":
        return cls(
            id=int(data.get("id") or 0),
            type=str(data.get("type") or "system"),
            action=str(data.get("action") or ""),
            details=str(data.get("details") or ""),
            timestamp=str(data.get("timestamp") or ""),
            profile_name=str(data.get("profile_name") or ""),
            status=str(data.get("status") or "success"),
            user=str(data.get("user") or ""),
            duration=str(data.get("duration") or ""),
        )


@dataclass(frozen=True)
class LogEntry:
    """Engine or system log line"""
    id: int
    timestamp: str
    level: str
    source: str
    message: str
    profile_id: Optional[int] = None
    profile_name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "level": self.level,
            "source": self.source,
            "message": self.message,
            "profile_id": self.profile_id,
            "profile_name": self.profile_name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogEntry":
        profile_id = data.get("profile_id")
        return cls(
            id=int(data.get("id") or 0),
            timestamp=str(data.get("timestamp") or ""),
            level=str(data.get("level") or "INFO").upper(),
            source=str(data.get("source") or "system"),
            message=str(data.get("message") or ""),
            profile_id=int(profile_id) if profile_id is not None else None,
            profile_name=str(data.get("profile_name") or ""),
        )
