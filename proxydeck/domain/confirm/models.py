"""
Confirmation gate models
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any


class TargetKind(str, Enum):
    """Kinds of destructive action the gate can hold"""
    PROFILE = "profile"
    HOST_MAPPING = "host_mapping"


@dataclass(frozen=True)
class PendingConfirmation:
    """The one destructive action waiting for the operator's answer"""
    target_id: Any
    target_label: str
    target_kind: TargetKind

    @property
    def prompt(self) -> str:
        noun = "profile" if self.target_kind is TargetKind.PROFILE else "host mapping"
        return f"Delete {noun} '{self.target_label}'?"
