"""Ghostscript process execution.

This layer only captures what the engine did. Deciding whether a run
succeeded belongs to ``pdf_compress_api.engine.outcomes``.
"""

import logging
import shutil
import subprocess
import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

from pdf_compress_api.engine.presets import Recipe

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineResult:
    """Raw result of one Ghostscript run."""

    exit_succeeded: bool
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False
    process_start_failed: bool = False
    return_code: Optional[int] = None
    elapsed_seconds: float = 0.0


# Anything that turns a recipe into an EngineResult; tests pass fakes.
EngineInvoker = Callable[[Recipe], EngineResult]


def get_ghostscript_command(preferred: Optional[str] = None) -> Optional[str]:
    """Get Ghostscript binary name for current platform."""
    candidates = ["gs", "gswin64c", "gswin32c"]
    if preferred:
        if shutil.which(preferred):
            return preferred
        logger.warning("[settings] GS_COMMAND=%s not found on PATH; trying default binaries", preferred)
    for name in candidates:
        if shutil.which(name):
            return name
    return None


def _as_text(value: Union[str, bytes, None]) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def run_ghostscript(recipe: Recipe, timeout_seconds: float, command: Optional[str] = None) -> EngineResult:
    """Run Ghostscript with the recipe's exact arguments under a hard timeout.

    Args:
        recipe: Invocation plan built by the preset resolver.
        timeout_seconds: Wall-clock budget; the process is killed once exceeded.
        command: Explicit binary name/path. Auto-detected when omitted.

    Returns:
        EngineResult describing exit status and captured output.
    """
    gs_cmd = get_ghostscript_command(command)
    if not gs_cmd:
        logger.error("Ghostscript not installed (looked for %s)", command or "gs, gswin64c, gswin32c")
        return EngineResult(exit_succeeded=False, process_start_failed=True, stderr="Ghostscript not installed")

    recipe.output_path.parent.mkdir(parents=True, exist_ok=True)
    cmd = [gs_cmd, *recipe.argument_list]

    logger.info(
        "Compressing %s with preset %s (%s, %s recipe)",
        recipe.input_path.name,
        recipe.preset.name,
        recipe.profile,
        recipe.kind,
    )

    start = time.monotonic()
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout_seconds)
    except subprocess.TimeoutExpired as e:
        elapsed = time.monotonic() - start
        logger.warning("Ghostscript timed out after %.1fs on %s", elapsed, recipe.input_path.name)
        return EngineResult(
            exit_succeeded=False,
            stdout=_as_text(e.stdout),
            stderr=_as_text(e.stderr),
            timed_out=True,
            elapsed_seconds=elapsed,
        )
    except OSError as e:
        logger.error("Ghostscript could not be started (%s): %s", gs_cmd, e)
        return EngineResult(exit_succeeded=False, stderr=str(e), process_start_failed=True)

    elapsed = time.monotonic() - start
    if result.returncode != 0:
        # Log full stderr for debugging (don't truncate!)
        logger.error("Ghostscript failed (exit code %s). Full error:\n%s", result.returncode, result.stderr)
    elif result.stderr:
        logger.warning("Ghostscript warnings: %s", result.stderr.strip())

    return EngineResult(
        exit_succeeded=result.returncode == 0,
        stdout=result.stdout or "",
        stderr=result.stderr or "",
        return_code=result.returncode,
        elapsed_seconds=elapsed,
    )
