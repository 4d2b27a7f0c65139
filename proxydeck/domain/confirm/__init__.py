"""
Confirmation domain module
"""
from .models import PendingConfirmation, TargetKind
from .gate import ConfirmationGate

__all__ = ["PendingConfirmation", "TargetKind", "ConfirmationGate"]
