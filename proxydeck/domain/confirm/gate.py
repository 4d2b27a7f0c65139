"""
Two-phase confirmation for destructive actions
"""
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from ...core.logging import get_logger
from .models import PendingConfirmation, TargetKind

logger = get_logger(__name__)

WRITER = "confirm"

DeleteHandler = Callable[[Any], Awaitable[bool]]
PromptHook = Callable[[PendingConfirmation], None]


class ConfirmationGate:
    """
    Holds at most one pending destructive action.

    ``request`` only records the target and opens the prompt. The
    registered delete handler for the target's kind runs from
    ``confirm`` and nowhere else. A second ``request`` before the first
    is answered replaces it.
    """

    def __init__(self, state, on_prompt: Optional[PromptHook] = None):
        self.state = state
        self.on_prompt = on_prompt
        self._handlers: Dict[TargetKind, DeleteHandler] = {}
        self._dispatching: Optional[PendingConfirmation] = None

    @property
    def pending(self) -> Optional[PendingConfirmation]:
        return self.state.pending

    def register(self, kind: Union[TargetKind, str], handler: DeleteHandler) -> None:
        self._handlers[TargetKind(kind)] = handler

    def request(self, target_id: Any, label: str, kind: Union[TargetKind, str]) -> PendingConfirmation:
        pending = PendingConfirmation(
            target_id=target_id,
            target_label=label,
            target_kind=TargetKind(kind),
        )
        if self.state.pending is not None:
            logger.debug(f"Replacing pending confirmation for {self.state.pending.target_label!r}")
        self.state.apply(WRITER, "pending", pending)
        if self.on_prompt is not None:
            self.on_prompt(pending)
        return pending

    async def confirm(self) -> bool:
        """
        Run the pending delete, then clear the pending target whatever
        the outcome.

        Returns:
            True if the delete handler reported success
        """
        pending = self.state.pending
        if pending is None or pending is self._dispatching:
            return False

        handler = self._handlers.get(pending.target_kind)
        self._dispatching = pending
        try:
            if handler is None:
                logger.error(f"No delete handler registered for {pending.target_kind.value}")
                return False
            logger.info(f"Confirmed delete of {pending.target_kind.value} {pending.target_label!r}")
            return bool(await handler(pending.target_id))
        except Exception as e:
            logger.error(f"Delete of {pending.target_label!r} failed: {e}", exc_info=True)
            return False
        finally:
            self._dispatching = None
            # a request made while the delete was in flight stays pending
            if self.state.pending is pending:
                self.state.apply(WRITER, "pending", None)

    def cancel(self) -> None:
        if self.state.pending is not None:
            logger.debug(f"Cancelled delete of {self.state.pending.target_label!r}")
            self.state.apply(WRITER, "pending", None)
