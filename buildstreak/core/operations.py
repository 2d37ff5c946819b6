"""Operations - The commands exposed on the command line.

Each operation resolves the store, runs one load/mutate/save cycle and
returns what the CLI should print (None for silent commands).
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from buildstreak.core.config import (
    NotInitializedError,
    StoreConfig,
    global_config,
    initialize,
    resolve_config,
)
from buildstreak.core.counters import CounterStore, DateProvider, local_today
from buildstreak.feedback.status_bar import render

logger = logging.getLogger(__name__)


@dataclass
class StoreOptions:
    """How to locate and open the counter store."""

    use_global: bool = False
    lock: bool = True
    today: DateProvider | None = None
    cwd: Path | None = None

    def resolve(self) -> StoreConfig:
        """Resolve the store location.

        Raises:
            NotInitializedError: If not using the global store and no marker exists.
        """
        if self.use_global:
            return global_config()
        return resolve_config(self.cwd)

    def open_store(self) -> CounterStore:
        today = self.today or local_today
        return CounterStore(self.resolve(), today=today, lock=self.lock)


def record_success(options: StoreOptions) -> None:
    options.open_store().increment_success()


def record_fail(options: StoreOptions) -> None:
    options.open_store().increment_fail()


def read_status(options: StoreOptions) -> str:
    """Today's tally as ``"<success> | <fail>"``."""
    return str(options.open_store().load())


def reset_counter(options: StoreOptions) -> None:
    options.open_store().reset()


def render_status(options: StoreOptions) -> str:
    """tmux segment for today's tally.

    Returns an empty string in directories that were never initialized,
    since the status line runs this everywhere.
    """
    try:
        store = options.open_store()
    except NotInitializedError as e:
        logger.debug("Nothing to render: %s", e)
        return ""
    return render(store.load())


def init_store(options: StoreOptions, base_path: Path | None = None) -> str:
    """Create a new store and point the working directory at it.

    Args:
        options: Store options (cwd is where the marker goes).
        base_path: Parent directory for the store (default: cwd).

    Returns:
        Message naming the created store.
    """
    config = initialize(base_path, cwd=options.cwd)
    return f"Initialized buildstreak store at {config.root}"


# Command name -> operation. "init" takes a path and is dispatched separately.
OPERATIONS: dict[str, Callable[[StoreOptions], str | None]] = {
    "success": record_success,
    "fail": record_fail,
    "status": read_status,
    "reset": reset_counter,
    "tmux": render_status,
    "render": render_status,
}
