"""
Core interfaces for dependency injection
"""
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, List


class BackendBridge(ABC):
    """
    Asynchronous interface to the engine/service layer.

    Payloads are JSON-shaped (dicts, lists, scalars); the controllers
    decode them into domain models. Any method may raise to signal a
    rejection.
    """

    # Profiles

    @abstractmethod
    async def list_profiles(self) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def add_profile(self, draft: Dict[str, Any]) -> Any:
        """Create a profile; returns ``{"id": ...}`` or a bare id"""
        pass

    @abstractmethod
    async def update_profile(self, profile: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    async def delete_profile(self, profile_id: int) -> None:
        pass

    @abstractmethod
    async def start_profile(self, profile_id: int) -> None:
        pass

    @abstractmethod
    async def stop_profile(self, profile_id: int) -> None:
        pass

    # Engine

    @abstractmethod
    async def is_engine_available(self) -> bool:
        pass

    @abstractmethod
    async def get_engine_version(self) -> str:
        pass

    @abstractmethod
    async def get_service_status(self) -> Dict[str, Any]:
        """Returns ``{"running", "version", "uptime"}``, fields may be missing"""
        pass

    # Activity

    @abstractmethod
    async def list_timeline_events(self) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def list_recent_logs(self, limit: int) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def clear_logs(self) -> None:
        pass

    # Host mapping

    @abstractmethod
    async def list_host_mappings(self) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def upsert_host_mapping(self, mapping: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    async def delete_host_mapping(self, mapping_id: int) -> None:
        pass

    @abstractmethod
    async def is_host_router_running(self) -> Any:
        """Returns a bool, a ``[running, addr]`` pair or a ``{running, addr}`` mapping"""
        pass

    @abstractmethod
    async def start_host_router(self, addr: str) -> None:
        pass

    @abstractmethod
    async def stop_host_router(self) -> None:
        pass


class StateStore(ABC):
    """Named JSON document storage interface"""

    @abstractmethod
    def save(self, name: str, state: Dict[str, Any]) -> None:
        """Save document under a name"""
        pass

    @abstractmethod
    def load(self, name: str) -> Optional[Dict[str, Any]]:
        """Load document by name"""
        pass

    @abstractmethod
    def delete(self, name: str) -> None:
        """Delete document by name"""
        pass

    @abstractmethod
    def list(self) -> list[str]:
        """List all document names"""
        pass

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Check if a document exists"""
        pass


class PromptProvider(ABC):
    """User prompt interface"""

    @abstractmethod
    def prompt(self, message: str, default: Optional[str] = None, password: bool = False) -> str:
        """Prompt user for input"""
        pass

    @abstractmethod
    def confirm(self, message: str, default: bool = False) -> bool:
        """Prompt user for confirmation"""
        pass
