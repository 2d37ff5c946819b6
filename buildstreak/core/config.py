"""Store configuration - Locates the directory holding daily counters.

A project opts in with ``buildstreak init``, which creates the store
directory and drops a marker file in the working directory pointing at it.
The global store lives in the system temp directory and needs no init.
"""

import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

MARKER_FILE = ".buildstreak"
STORE_DIR_NAME = "buildstreak"
GLOBAL_ROOT = Path(tempfile.gettempdir()) / STORE_DIR_NAME


class BuildStreakError(Exception):
    """Base class for buildstreak errors."""

    pass


class NotInitializedError(BuildStreakError):
    """Raised when the working directory has no usable marker file."""

    def __init__(self, marker: Path, reason: str = "not found"):
        super().__init__(f"Not initialized: {marker} {reason} (run 'buildstreak init')")
        self.marker = marker


@dataclass(frozen=True)
class StoreConfig:
    """Resolved location of the counter store."""

    root: Path


def _marker_path(cwd: Path | None) -> Path:
    return (cwd or Path.cwd()) / MARKER_FILE


def resolve_config(cwd: Path | None = None) -> StoreConfig:
    """Read the marker file and return the store it points at.

    The root directory is not checked for existence; the first file
    operation on it will surface that.

    Args:
        cwd: Directory to look for the marker in (default: current directory).

    Returns:
        The resolved StoreConfig.

    Raises:
        NotInitializedError: If the marker file is absent, empty or unreadable
            as text.
    """
    marker = _marker_path(cwd)
    if not marker.is_file():
        raise NotInitializedError(marker)

    try:
        content = marker.read_text(encoding="utf-8").strip()
    except UnicodeDecodeError:
        raise NotInitializedError(marker, "is not valid text") from None
    if not content:
        raise NotInitializedError(marker, "is empty")

    root = Path(content)
    logger.debug("Resolved store root %s from %s", root, marker)
    return StoreConfig(root=root)


def initialize(base_path: Path | None = None, cwd: Path | None = None) -> StoreConfig:
    """Create a store directory and point the marker file at it.

    Args:
        base_path: Parent of the new store directory (default: cwd).
        cwd: Directory the marker is written to (default: current directory).

    Returns:
        The StoreConfig for the new store.

    Raises:
        FileExistsError: If the store directory already exists.
        OSError: If the directory or marker cannot be written.
    """
    base = Path(base_path) if base_path is not None else (cwd or Path.cwd())
    root = base / STORE_DIR_NAME

    root.mkdir()
    marker = _marker_path(cwd)
    marker.write_text(str(root), encoding="utf-8")

    logger.info("Initialized store at %s (marker %s)", root, marker)
    return StoreConfig(root=root)


def global_config() -> StoreConfig:
    """Get the shared store in the system temp directory.

    Returns:
        StoreConfig rooted at GLOBAL_ROOT, created if missing.
    """
    GLOBAL_ROOT.mkdir(parents=True, exist_ok=True)
    return StoreConfig(root=GLOBAL_ROOT)
