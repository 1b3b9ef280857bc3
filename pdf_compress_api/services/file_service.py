"""Working-file lifecycle: unique names, eager deletion and the age-based sweep.

Ownership is directory-scoped. Every file in the upload or output folder is
removed either eagerly once its job is done or by the sweep once it is old
enough. Deletion is idempotent, so both paths may safely race.
"""

import logging
import re
import threading
import time
import uuid
from pathlib import Path
from typing import Iterable, Optional, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def ensure_directories(*directories: PathLike) -> None:
    """Create working directories if they don't exist."""
    for directory in directories:
        Path(directory).mkdir(parents=True, exist_ok=True)
    logger.info("Directories created/verified: %s", ", ".join(str(d) for d in directories))


def generate_unique_filename(original_name: str, prefix: str = "") -> str:
    """Build a collision-resistant, filesystem-safe name.

    ``report (final).pdf`` becomes ``report__final__1718000000000_a1b2c3.pdf``.
    """
    original = Path(original_name or "")
    ext = original.suffix
    base = original.name[: -len(ext)] if ext else original.name
    sanitized = _UNSAFE_CHARS.sub("_", base) or "file"
    timestamp = int(time.time() * 1000)
    token = uuid.uuid4().hex[:6]
    return f"{prefix}{sanitized}_{timestamp}_{token}{ext}"


def allocate_unique_path(directory: PathLike, original_name: str, prefix: str = "") -> Path:
    return Path(directory) / generate_unique_filename(original_name, prefix)


def _delete_one(path: Path) -> bool:
    """Delete a single file. Returns True only if this call removed it."""
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.error("Error deleting file %s: %s", path, e)
        return False
    logger.info("Deleted: %s", path.name)
    return True


def delete_now(*paths: Optional[PathLike]) -> int:
    """Delete each path independently; missing files are not errors.

    Returns:
        Number of files actually removed.
    """
    removed = 0
    for path in paths:
        if not path:
            continue
        if _delete_one(Path(path)):
            removed += 1
    return removed


def sweep(directory: PathLike, max_age_seconds: float, now: Optional[float] = None) -> int:
    """Delete files in ``directory`` whose mtime is older than ``max_age_seconds``.

    Files that vanish between listing and deletion are treated as already
    gone. Files created mid-sweep may or may not be visited.

    Returns:
        Number of files removed by this sweep.
    """
    directory = Path(directory)
    now = time.time() if now is None else now

    try:
        entries = list(directory.iterdir())
    except OSError as e:
        logger.error("[sweep] Cannot list %s: %s", directory, e)
        return 0

    removed = 0
    for entry in entries:
        try:
            stat = entry.stat()
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.error("[sweep] Error processing file %s: %s", entry.name, e)
            continue

        if not entry.is_file():
            continue
        if now - stat.st_mtime > max_age_seconds and _delete_one(entry):
            removed += 1

    if removed:
        logger.info("[sweep] Deleted %d old file(s) from %s/", removed, directory.name)
    return removed


def sweep_all(directories: Iterable[PathLike], max_age_seconds: float) -> int:
    return sum(sweep(directory, max_age_seconds) for directory in directories)


class SweepTimer:
    """Recurring background sweep with an explicit start/cancel lifecycle."""

    def __init__(self, directories: Iterable[PathLike], interval_seconds: float, max_age_seconds: float) -> None:
        self.directories = [Path(d) for d in directories]
        self.interval_seconds = interval_seconds
        self.max_age_seconds = max_age_seconds
        self.runs = 0
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop.is_set()

    def start(self) -> "SweepTimer":
        if self._thread is not None:
            return self
        self._thread = threading.Thread(target=self._run, daemon=True, name="file-sweep-timer")
        self._thread.start()
        logger.info(
            "[sweep] Cleanup service started (every %ss, max age %ss)",
            self.interval_seconds,
            self.max_age_seconds,
        )
        return self

    def cancel(self, timeout: Optional[float] = 5.0) -> None:
        """Stop scheduling sweeps. A sweep already in progress finishes first."""
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        logger.info("[sweep] Cleanup service stopped")

    def run_once(self) -> int:
        try:
            removed = sweep_all(self.directories, self.max_age_seconds)
        except Exception:
            # A broken sweep must not kill the timer thread.
            logger.exception("[sweep] Sweep failed")
            removed = 0
        self.runs += 1
        return removed

    def _run(self) -> None:
        self.run_once()
        while not self._stop.wait(self.interval_seconds):
            self.run_once()


def start_sweep_timer(
    directories: Iterable[PathLike],
    interval_seconds: float,
    max_age_seconds: float,
) -> SweepTimer:
    """Sweep immediately, then every ``interval_seconds`` until cancelled."""
    return SweepTimer(directories, interval_seconds, max_age_seconds).start()
