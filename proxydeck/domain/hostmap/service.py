"""
Host mapping service
"""
from typing import Any, List, Optional

from ...core.exceptions import ValidationError
from ...core.interfaces import BackendBridge
from ...core.logging import get_logger
from ...core.telemetry import Telemetry, get_telemetry
from ...core.utils import extract_error_message, synthetic_id
from .models import HostMapping

logger = get_logger(__name__)

WRITER = "hostmap"


class HostMappingService:
    """
    CRUD for host mappings.

    Without a backend the mappings live only in the canonical state and
    get synthetic ids. ``remove`` is reserved for the confirmation gate.
    """

    def __init__(
        self,
        state,
        bridge: Optional[BackendBridge],
        backend_available: bool,
        notifier,
        telemetry: Optional[Telemetry] = None,
    ):
        self.state = state
        self.bridge = bridge
        self.backend_available = backend_available and bridge is not None
        self.notifier = notifier
        self.telemetry = telemetry or get_telemetry()

    async def list(self) -> List[HostMapping]:
        if not self.backend_available:
            return self.state.host_mappings

        try:
            raw = await self.bridge.list_host_mappings()
        except Exception as e:
            self._fail("load host mappings", e)
            return self.state.host_mappings

        mappings = self._decode(raw)
        self.state.apply(WRITER, "host_mappings", mappings)
        return mappings

    async def upsert(self, mapping: HostMapping) -> Optional[HostMapping]:
        """
        Create (no id) or update (with id) a mapping.

        Returns:
            The saved mapping, or None on validation or backend failure
        """
        try:
            mapping.validate()
        except ValidationError as e:
            self.state.apply(WRITER, "hostmap_error", e.message)
            return None

        if not self.backend_available:
            saved = self._upsert_local(mapping)
            self.notifier.success(f"Host mapping saved: {saved.hostname} -> {saved.target}")
            return saved

        try:
            await self.bridge.upsert_host_mapping(mapping.to_dict())
        except Exception as e:
            message = self._fail("save host mapping", e)
            self.notifier.error(f"Failed to save host mapping: {message}")
            return None

        self.telemetry.record_event("hostmap.saved", {"hostname": mapping.hostname})
        self.notifier.success(f"Host mapping saved: {mapping.hostname} -> {mapping.target}")
        mappings = await self.list()
        return self._saved_entry(mapping, mappings)

    async def remove(self, mapping_id: int) -> bool:
        if self.backend_available:
            try:
                await self.bridge.delete_host_mapping(mapping_id)
            except Exception as e:
                message = self._fail("delete host mapping", e)
                self.notifier.error(f"Failed to delete host mapping: {message}")
                return False

        remaining = [m for m in self.state.host_mappings if m.id != mapping_id]
        self.state.apply(WRITER, "host_mappings", remaining)
        self.telemetry.record_event("hostmap.removed", {"id": mapping_id})
        self.notifier.success("Host mapping deleted")
        return True

    def find(self, mapping_id: int) -> Optional[HostMapping]:
        return next((m for m in self.state.host_mappings if m.id == mapping_id), None)

    @staticmethod
    def _saved_entry(mapping: HostMapping, mappings: List[HostMapping]) -> HostMapping:
        """Pick the reloaded record for ``mapping``; ids win over hostnames"""
        if mapping.id is not None:
            match = next((m for m in mappings if m.id == mapping.id), None)
        else:
            # a hostname saved twice resolves to its newest id
            candidates = [m for m in mappings if m.hostname == mapping.hostname]
            match = max(candidates, key=lambda m: m.id or 0, default=None)
        return match or mapping

    def _upsert_local(self, mapping: HostMapping) -> HostMapping:
        mappings = list(self.state.host_mappings)
        if mapping.id is None:
            mapping = mapping.with_id(synthetic_id(m.id for m in mappings if m.id is not None))
            mappings.append(mapping)
        else:
            mappings = [mapping if m.id == mapping.id else m for m in mappings]
            if not any(m.id == mapping.id for m in self.state.host_mappings):
                mappings.append(mapping)
        self.state.apply(WRITER, "host_mappings", mappings)
        return mapping

    def _fail(self, action: str, err: Exception) -> str:
        message = extract_error_message(err, f"Failed to {action}")
        logger.error(f"Failed to {action}: {message}")
        self.telemetry.record_event("hostmap.error", {"action": action, "error": message})
        self.state.apply(WRITER, "hostmap_error", message)
        return message

    @staticmethod
    def _decode(raw: Any) -> List[HostMapping]:
        if not isinstance(raw, list):
            return []
        mappings = []
        for item in raw:
            try:
                mappings.append(HostMapping.from_dict(item))
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed host mapping {item!r}: {e}")
        return mappings
