"""Classification of Ghostscript runs into terminal job outcomes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from pdf_compress_api.engine.ghostscript import EngineResult

logger = logging.getLogger(__name__)

REASON_PASSWORD_PROTECTED = "password-protected"
REASON_UNSUPPORTED_IMAGES = "unsupported image stream for aggressive recipe"

PASSWORD_MARKERS = ("password", "encrypt")
DOWNSAMPLE_FAILURE_MARKERS = (
    "failed to initialise downsample filter",
    "failed to initialize downsample filter",
)


@dataclass(frozen=True)
class Success:
    output_path: Path
    original_size: int
    compressed_size: int


@dataclass(frozen=True)
class RecoverableContentError:
    reason: str
    detail: str = ""


@dataclass(frozen=True)
class EngineUnavailable:
    detail: str = ""


@dataclass(frozen=True)
class TimedOut:
    detail: str = ""


@dataclass(frozen=True)
class UnknownFailure:
    detail: str


Outcome = Union[Success, RecoverableContentError, EngineUnavailable, TimedOut, UnknownFailure]


def classify(result: EngineResult, input_path: Path, output_path: Path) -> Outcome:
    """Decide the terminal outcome of one engine run.

    Checks run in a fixed order and the first match wins. Password markers
    are checked even on exit code 0, since Ghostscript writes a blank PDF
    for encrypted input and still reports success. The downsample filter
    failure hangs until the timeout fires, so it is checked before the
    timeout to report the real cause.
    """
    if result.process_start_failed:
        return EngineUnavailable(detail=result.stderr)

    stderr_lower = (result.stderr or "").lower()

    if any(marker in stderr_lower for marker in PASSWORD_MARKERS):
        logger.error("Password-protected PDF detected: %s", Path(input_path).name)
        return RecoverableContentError(reason=REASON_PASSWORD_PROTECTED, detail=result.stderr)

    if any(marker in stderr_lower for marker in DOWNSAMPLE_FAILURE_MARKERS):
        logger.error("Downsample filter failure on %s", Path(input_path).name)
        return RecoverableContentError(reason=REASON_UNSUPPORTED_IMAGES, detail=result.stderr)

    if result.timed_out:
        return TimedOut(detail=result.stderr)

    if not result.exit_succeeded:
        detail = (result.stderr or result.stdout or "").strip() or "no diagnostic output"
        return UnknownFailure(detail=f"Ghostscript exit code {result.return_code}: {detail}")

    input_path = Path(input_path)
    output_path = Path(output_path)
    try:
        original_size = input_path.stat().st_size
    except OSError as e:
        return UnknownFailure(detail=f"Input file unreadable after compression: {e}")

    try:
        compressed_size = output_path.stat().st_size
    except OSError:
        return UnknownFailure(detail="Output file not created")

    if compressed_size == 0:
        return UnknownFailure(detail="Output file is empty")

    return Success(output_path=output_path, original_size=original_size, compressed_size=compressed_size)
