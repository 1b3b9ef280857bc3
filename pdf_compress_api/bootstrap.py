"""Runtime bootstrap for the background file sweep."""

from __future__ import annotations

import atexit
import logging
import threading
from typing import Optional

from pdf_compress_api.config import RuntimeConfig
from pdf_compress_api.services import file_service

logger = logging.getLogger(__name__)

_bootstrap_lock = threading.Lock()
_bootstrap_started = False
_sweep_timer: Optional[file_service.SweepTimer] = None


def bootstrap_runtime(config: RuntimeConfig) -> None:
    """Create working directories and start the sweep timer once per process."""
    global _bootstrap_started, _sweep_timer
    with _bootstrap_lock:
        if _bootstrap_started:
            return

        file_service.ensure_directories(config.upload_folder, config.output_folder)
        _sweep_timer = file_service.start_sweep_timer(
            [config.upload_folder, config.output_folder],
            interval_seconds=config.cleanup_interval_seconds,
            max_age_seconds=config.effective_file_max_age_seconds,
        )
        atexit.register(shutdown_runtime)
        _bootstrap_started = True


def shutdown_runtime() -> None:
    """Stop scheduling sweeps. In-flight jobs are left to finish on their own."""
    global _bootstrap_started, _sweep_timer
    with _bootstrap_lock:
        timer = _sweep_timer
        _sweep_timer = None
        _bootstrap_started = False
    if timer is not None:
        timer.cancel()


def get_sweep_timer() -> Optional[file_service.SweepTimer]:
    return _sweep_timer


def is_bootstrapped() -> bool:
    """Expose runtime bootstrap state for diagnostics/tests."""
    return _bootstrap_started
