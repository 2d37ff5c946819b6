"""Counter Store - Daily success/fail counters persisted as plain text.

Each calendar day gets its own file in the store root, named
``DD-MM-YY.streak`` and holding two newline-separated integers
(success, then fail). Old files are never touched once their day passes.

Broken files are repaired rather than reported: a status line must keep
rendering even if a counter file was truncated or hand-edited.
"""

import logging
import os
import re
import tempfile
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from pathlib import Path

try:
    import fcntl
except ImportError:
    fcntl = None

from buildstreak.core.config import StoreConfig

logger = logging.getLogger(__name__)

COUNTER_SUFFIX = ".streak"
DAY_FORMAT = "%d-%m-%y"
LOCK_FILE = ".lock"

_FIELD_RE = re.compile(r"^\d+$")

DateProvider = Callable[[], date]


@dataclass(frozen=True)
class Counter:
    """Success/fail tally for one day."""

    success: int = 0
    fail: int = 0

    @property
    def net(self) -> int:
        """Successes minus failures."""
        return self.success - self.fail

    def record_success(self) -> "Counter":
        return Counter(self.success + 1, self.fail)

    def record_fail(self) -> "Counter":
        return Counter(self.success, self.fail + 1)

    def __str__(self) -> str:
        return f"{self.success} | {self.fail}"


ZERO = Counter()


def local_today() -> date:
    """Today's date in the local timezone."""
    return date.today()


def day_filename(day: date) -> str:
    """File name holding the counter for ``day``."""
    return day.strftime(DAY_FORMAT) + COUNTER_SUFFIX


def format_counter(counter: Counter) -> str:
    """Serialize a counter to its on-disk form."""
    return f"{counter.success}\n{counter.fail}"


def _parse_field(raw: str) -> int | None:
    raw = raw.strip()
    if _FIELD_RE.match(raw):
        return int(raw)
    return None


def parse_counter(text: str) -> tuple[Counter, bool] | None:
    """Parse on-disk counter text.

    Args:
        text: File contents.

    Returns:
        None if the text does not hold exactly two fields. Otherwise a tuple
        of (counter, clean) where clean is False if any field was not a
        non-negative integer and was read as 0.
    """
    fields = text.strip().split("\n")
    if len(fields) != 2:
        return None

    values = [_parse_field(f) for f in fields]
    clean = all(v is not None for v in values)
    success, fail = (v if v is not None else 0 for v in values)
    return Counter(success, fail), clean


class CounterStore:
    """Reads and writes the counter for the current day.

    The date is taken from the ``today`` provider on every call, so a store
    created before midnight writes to the new day's file afterwards.
    """

    def __init__(
        self,
        config: StoreConfig,
        today: DateProvider = local_today,
        lock: bool = True,
    ) -> None:
        """Initialize the store.

        Args:
            config: Resolved store location.
            today: Zero-argument callable returning the current date.
            lock: Hold an advisory file lock while loading and updating.
        """
        self._config = config
        self._today = today
        self._lock = lock

    @property
    def root(self) -> Path:
        return self._config.root

    @property
    def path(self) -> Path:
        """Counter file for the current day."""
        return self.path_for(self._today())

    def path_for(self, day: date) -> Path:
        return self._config.root / day_filename(day)

    def load(self) -> Counter:
        """Load today's counter, creating or repairing the file as needed.

        Returns:
            The stored counter, or zero if the file was missing or corrupt.

        Raises:
            OSError: If the file cannot be read, created or repaired.
        """
        path = self.path
        with self._locked():
            return self._load(path)

    def _load(self, path: Path) -> Counter:
        if not path.exists():
            logger.debug("No counter at %s, starting from zero", path)
            self._write(path, ZERO)
            return ZERO

        try:
            parsed = parse_counter(path.read_text(encoding="utf-8"))
        except UnicodeDecodeError:
            parsed = None
        if parsed is None:
            logger.warning("Corrupt counter file %s, resetting to zero", path)
            self._write(path, ZERO)
            return ZERO

        counter, clean = parsed
        if not clean:
            logger.warning("Invalid field in %s, repaired as %s", path, counter)
            self._write(path, counter)
        return counter

    def save(self, counter: Counter) -> None:
        """Overwrite today's counter.

        Raises:
            OSError: If the file cannot be written.
        """
        self._write(self.path, counter)

    def update(self, mutate: Callable[[Counter], Counter]) -> Counter:
        """Load, transform and save today's counter.

        Args:
            mutate: Function returning the new counter from the current one.

        Returns:
            The saved counter.
        """
        path = self.path
        with self._locked():
            counter = mutate(self._load(path))
            self._write(path, counter)
        logger.info("Counter %s = %s", path.name, counter)
        return counter

    def increment_success(self) -> Counter:
        return self.update(Counter.record_success)

    def increment_fail(self) -> Counter:
        return self.update(Counter.record_fail)

    def reset(self) -> None:
        """Zero today's counter without reading it first."""
        path = self.path
        with self._locked():
            self._write(path, ZERO)
        logger.info("Counter %s reset", path.name)

    def _write(self, path: Path, counter: Counter) -> None:
        """Replace the counter file so readers never see a partial write."""
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", suffix=COUNTER_SUFFIX)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(format_counter(counter))
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        except Exception:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    @contextmanager
    def _locked(self) -> Iterator[None]:
        """Hold an exclusive flock on the store's lock file.

        No-op when locking is disabled or fcntl is unavailable.
        """
        if not self._lock or fcntl is None:
            yield
            return

        with open(self._config.root / LOCK_FILE, "a") as fh:
            fcntl.flock(fh, fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(fh, fcntl.LOCK_UN)
