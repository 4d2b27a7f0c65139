"""
File-based document storage implementation
"""
import json
import os
from pathlib import Path
from typing import Dict, Any, Optional

from ...core.interfaces import StateStore
from ...core.constants import DEFAULT_STATE_DIR
from ...core.logging import get_logger

logger = get_logger(__name__)


class FileStateStore(StateStore):
    """
    File-based document storage.

    Stores each named document as JSON in the state directory:
    - {state_dir}/{name}.json
    """

    def __init__(self, state_dir: Optional[Path] = None):
        """
        Initialize file state store.

        Args:
            state_dir: Directory for storing documents
        """
        if state_dir is None:
            state_dir = Path(DEFAULT_STATE_DIR).expanduser()

        self.state_dir = Path(state_dir).expanduser()
        self.state_dir.mkdir(parents=True, exist_ok=True)

    def _get_state_file(self, name: str) -> Path:
        """Get document path"""
        return self.state_dir / f"{name}.json"

    def save(self, name: str, state: Dict[str, Any]) -> None:
        """Save document, replacing the previous version atomically"""
        state_file = self._get_state_file(name)
        tmp_file = state_file.with_suffix(".json.tmp")
        tmp_file.write_text(json.dumps(state, indent=2), encoding='utf-8')
        os.replace(tmp_file, state_file)

    def load(self, name: str) -> Optional[Dict[str, Any]]:
        """Load document; unreadable documents read as missing"""
        state_file = self._get_state_file(name)
        if not state_file.exists():
            return None

        try:
            return json.loads(state_file.read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable state file {state_file}: {e}")
            return None

    def delete(self, name: str) -> None:
        """Delete document"""
        state_file = self._get_state_file(name)
        if state_file.exists():
            state_file.unlink()

    def list(self) -> list[str]:
        """List all document names"""
        return sorted(p.stem for p in self.state_dir.glob("*.json"))

    def exists(self, name: str) -> bool:
        """Check if a document exists"""
        return self._get_state_file(name).exists()
