"""Compression job pipeline: resolve preset, run the engine, classify, report.

The pipeline never retries. Every job ends in exactly one Outcome, and its
working files are deleted exactly once: immediately when the job fails, or
through ``CompressionJob.finish()`` once the caller has delivered the output.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Optional

from PyPDF2 import PdfReader

from pdf_compress_api.config import RuntimeConfig
from pdf_compress_api.core.utils import format_bytes
from pdf_compress_api.engine import effectiveness
from pdf_compress_api.engine.ghostscript import EngineInvoker, run_ghostscript
from pdf_compress_api.engine.outcomes import Outcome, Success, classify
from pdf_compress_api.engine.presets import Recipe, build_recipe, resolve_preset
from pdf_compress_api.services import file_service

logger = logging.getLogger(__name__)

OUTPUT_PREFIX = "compressed_"


@dataclass(frozen=True)
class CompressionRequest:
    input_path: Path
    requested_preset: Optional[str] = None
    job_id: str = "job"


@dataclass
class CompressionJob:
    """Terminal state of one job plus the handle that releases its files."""

    request: CompressionRequest
    recipe: Recipe
    outcome: Outcome
    report: Optional[effectiveness.EffectivenessReport] = None
    page_count: Optional[int] = None
    elapsed_seconds: float = 0.0
    _finished: bool = field(default=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def succeeded(self) -> bool:
        return isinstance(self.outcome, Success)

    @property
    def finished(self) -> bool:
        return self._finished

    def finish(self, reason: str = "delivered") -> bool:
        """Delete this job's input and output files.

        Called once delivery has completed or failed, or right away when the
        job itself failed. Only the first call deletes; later calls return False.
        """
        with self._lock:
            if self._finished:
                return False
            self._finished = True

        logger.info("[%s] Releasing working files (%s)", self.request.job_id, reason)
        file_service.delete_now(self.request.input_path, self.recipe.output_path)
        return True


def resolve(requested_preset: Optional[str], input_path: Path, config: RuntimeConfig) -> Recipe:
    """Resolve a preset name into a recipe with a freshly allocated output path."""
    preset = resolve_preset(requested_preset, config.presets, config.default_preset)
    output_path = file_service.allocate_unique_path(
        config.output_folder, Path(input_path).name, prefix=OUTPUT_PREFIX
    )
    return build_recipe(preset, Path(input_path), output_path)


def default_invoker(config: RuntimeConfig) -> EngineInvoker:
    return partial(run_ghostscript, timeout_seconds=config.gs_timeout_seconds, command=config.gs_command)


def count_pages(input_path: Path) -> Optional[int]:
    """Best-effort page count; precheck problems only warn."""
    try:
        with open(input_path, "rb") as handle:
            reader = PdfReader(handle, strict=False)
            if reader.is_encrypted:
                try:
                    reader.decrypt("")
                except Exception:
                    return None
            return len(reader.pages)
    except Exception as exc:
        logger.warning("PDF pre-validation warning (continuing): %s", exc)
        return None


def run_compression_job(
    request: CompressionRequest,
    config: RuntimeConfig,
    invoker: Optional[EngineInvoker] = None,
) -> CompressionJob:
    """Run one job to its terminal outcome.

    On any failure both working files are deleted before returning. On
    success the files stay until ``job.finish()`` is called.
    """
    invoker = invoker or default_invoker(config)
    input_path = Path(request.input_path)
    recipe = resolve(request.requested_preset, input_path, config)

    page_count = count_pages(input_path) if config.pdf_precheck_enabled else None

    logger.info(
        "[%s] === JOB START === file=%s preset=%s profile=%s recipe=%s pages=%s",
        request.job_id,
        input_path.name,
        recipe.preset.name,
        recipe.profile,
        recipe.kind,
        page_count,
    )

    start = time.time()
    try:
        engine_result = invoker(recipe)
        outcome = classify(engine_result, input_path, recipe.output_path)
    except Exception:
        logger.exception("[%s] Unexpected error while compressing", request.job_id)
        file_service.delete_now(input_path, recipe.output_path)
        raise
    elapsed = time.time() - start

    job = CompressionJob(
        request=request,
        recipe=recipe,
        outcome=outcome,
        page_count=page_count,
        elapsed_seconds=elapsed,
    )

    if isinstance(outcome, Success):
        job.report = effectiveness.report(outcome.original_size, outcome.compressed_size)
        logger.info(
            "[%s] Compression complete: %s -> %s (%.2f%% reduction, %s) in %.1fs",
            request.job_id,
            format_bytes(outcome.original_size),
            format_bytes(outcome.compressed_size),
            job.report.ratio_percent,
            job.report.tier,
            elapsed,
        )
    else:
        logger.error("[%s] Compression failed after %.1fs: %r", request.job_id, elapsed, outcome)
        job.finish(reason="failed")

    return job
