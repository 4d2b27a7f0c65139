"""
Engine binary detection
"""
import asyncio
import os
import shutil
from pathlib import Path
from typing import Optional, Sequence

from ...core.constants import ENGINE_BINARY, ENGINE_SEARCH_PATHS, ENGINE_VERSION_TIMEOUT
from ...core.exceptions import BridgeError
from ...core.logging import get_logger

logger = get_logger(__name__)


def find_engine(
    binary: str = ENGINE_BINARY,
    search_paths: Sequence[str] = ENGINE_SEARCH_PATHS,
) -> Optional[str]:
    """
    Locate the engine binary.

    Looks on PATH first, then in the common install locations.

    Returns:
        Absolute path of an executable, or None
    """
    found = shutil.which(binary)
    if found:
        return found

    for candidate in search_paths:
        path = Path(candidate).expanduser()
        if path.is_file() and os.access(path, os.X_OK):
            return str(path.resolve())
    return None


async def engine_version(path: str, timeout: float = ENGINE_VERSION_TIMEOUT) -> str:
    """
    Run ``<engine> -V`` and return its trimmed output.

    Raises:
        BridgeError: If the binary cannot be run or does not answer in time
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            path, "-V",
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except OSError as e:
        raise BridgeError(f"Cannot run {path}: {e}") from e

    try:
        output, _ = await asyncio.wait_for(proc.communicate(), timeout)
    except asyncio.TimeoutError as e:
        proc.kill()
        await proc.wait()
        raise BridgeError(f"{path} -V did not answer within {timeout}s") from e

    if proc.returncode != 0:
        raise BridgeError(f"{path} -V exited with status {proc.returncode}")
    return output.decode("utf-8", errors="replace").strip()
