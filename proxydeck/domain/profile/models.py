"""
Profile domain models
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict

from ...core.constants import PROFILE_TYPES, DEFAULT_PROFILE_TYPE


class ProfileStatus(str, Enum):
    """Profile runtime status"""
    RUNNING = "running"
    STOPPED = "stopped"

    @classmethod
    def parse(cls, value: Any) -> "ProfileStatus":
        """Anything other than ``running`` reads as stopped"""
        if isinstance(value, ProfileStatus):
            return value
        if isinstance(value, str) and value.strip().lower() == cls.RUNNING.value:
            return cls.RUNNING
        return cls.STOPPED


@dataclass
class ProfileDraft:
    """Profile fields supplied by the operator before the backend assigns an id"""
    name: str
    listen: str
    remote: str
    type: str = DEFAULT_PROFILE_TYPE
    username: str = ""
    password: str = ""

    def validate(self) -> None:
        """Validate draft"""
        from ...core.exceptions import ValidationError

        if not self.name or not self.name.strip():
            raise ValidationError("Profile name is required", field="name")
        if self.type not in PROFILE_TYPES:
            raise ValidationError(
                f"Invalid type: {self.type}, must be one of {', '.join(PROFILE_TYPES)}",
                field="type",
            )
        if not self.listen or not self.listen.strip():
            raise ValidationError("Listen address is required", field="listen")
        if not self.remote or not self.remote.strip():
            raise ValidationError("Remote address is required", field="remote")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "name": self.name,
            "type": self.type,
            "listen": self.listen,
            "remote": self.remote,
            "username": self.username,
            "password": self.password,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProfileDraft":
        """Create from dictionary"""
        return cls(
            name=data["name"],
            listen=data["listen"],
            remote=data["remote"],
            type=data.get("type") or DEFAULT_PROFILE_TYPE,
            username=data.get("username") or "",
            password=data.get("password") or "",
        )


@dataclass(frozen=True)
class Profile:
    """A managed proxy instance"""
    id: int
    name: str
    type: str
    listen: str
    remote: str
    username: str = ""
    password: str = ""
    status: ProfileStatus = ProfileStatus.STOPPED

    @property
    def running(self) -> bool:
        return self.status is ProfileStatus.RUNNING

    @classmethod
    def from_draft(cls, draft: ProfileDraft, profile_id: int) -> "Profile":
        """New profiles always start stopped"""
        return cls(
            id=profile_id,
            name=draft.name,
            type=draft.type,
            listen=draft.listen,
            remote=draft.remote,
            username=draft.username,
            password=draft.password,
            status=ProfileStatus.STOPPED,
        )

    def with_status(self, status: ProfileStatus) -> "Profile":
        return replace(self, status=status)

    def to_draft(self) -> ProfileDraft:
        return ProfileDraft(
            name=self.name,
            listen=self.listen,
            remote=self.remote,
            type=self.type,
            username=self.username,
            password=self.password,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "listen": self.listen,
            "remote": self.remote,
            "username": self.username,
            "password": self.password,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Profile":
        """
        Create from a backend payload.

        Missing optional fields fall back to defaults; a missing id or a
        non-integer id raises ``ValueError``.
        """
        if isinstance(data, Profile):
            return data
        return cls(
            id=int(data["id"]),
            name=str(data.get("name") or ""),
            type=str(data.get("type") or DEFAULT_PROFILE_TYPE),
            listen=str(data.get("listen") or ""),
            remote=str(data.get("remote") or ""),
            username=str(data.get("username") or ""),
            password=str(data.get("password") or ""),
            status=ProfileStatus.parse(data.get("status")),
        )
