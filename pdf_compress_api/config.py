"""Application configuration loading."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

from pdf_compress_api.core.utils import env_bool, env_choice, env_float, env_int

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parents[1]

# User-facing preset name -> Ghostscript -dPDFSETTINGS profile.
DEFAULT_PRESETS: Dict[str, str] = {
    "recommended": "/ebook",  # 150 DPI - balanced quality/size
    "strong": "/screen",      # 72 DPI - maximum compression
    # Legacy names
    "ebook": "/ebook",
    "screen": "/screen",
    "printer": "/printer",    # 300 DPI
    "prepress": "/prepress",  # 300+ DPI, colour preserving
}
DEFAULT_PRESET_NAME = "recommended"


@dataclass(frozen=True)
class RuntimeConfig:
    """Runtime configuration values consumed by the Flask app and the job pipeline."""

    upload_folder: Path = _PROJECT_ROOT / "uploads"
    output_folder: Path = _PROJECT_ROOT / "outputs"
    max_file_size_mb: int = 40
    presets: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_PRESETS))
    default_preset: str = DEFAULT_PRESET_NAME
    gs_timeout_seconds: float = 120.0
    gs_command: str | None = None
    cleanup_interval_seconds: float = 120.0
    file_max_age_seconds: float = 300.0
    cors_origin: str = "http://localhost:8080"
    rate_limit_window_seconds: int = 600
    rate_limit_max_requests: int = 5
    app_env: str = "development"
    pdf_precheck_enabled: bool = True

    @property
    def max_content_length(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def effective_file_max_age_seconds(self) -> float:
        """Sweep age threshold, floored so it always outlives a running job."""
        return max(self.file_max_age_seconds, self.gs_timeout_seconds * 2)


def _positive(value: float, *, name: str, default: float) -> float:
    if value <= 0:
        logger.warning("[settings] Non-positive %s=%s; using %s", name, value, default)
        return default
    return value


def load_runtime_config() -> RuntimeConfig:
    """Load runtime configuration from environment variables."""
    defaults = RuntimeConfig()

    default_preset = (os.environ.get("GS_COMPRESSION_PRESET") or defaults.default_preset).strip().lower()
    if default_preset not in defaults.presets:
        logger.warning(
            "[settings] Unknown GS_COMPRESSION_PRESET=%s; using %s", default_preset, DEFAULT_PRESET_NAME
        )
        default_preset = DEFAULT_PRESET_NAME

    gs_command = (os.environ.get("GS_COMMAND") or "").strip() or None

    config = RuntimeConfig(
        upload_folder=Path(os.environ.get("UPLOAD_FOLDER") or defaults.upload_folder),
        output_folder=Path(os.environ.get("OUTPUT_FOLDER") or defaults.output_folder),
        max_file_size_mb=int(_positive(env_int("MAX_FILE_SIZE_MB", 40), name="MAX_FILE_SIZE_MB", default=40)),
        default_preset=default_preset,
        gs_timeout_seconds=_positive(
            env_float("GS_TIMEOUT_SECONDS", 120.0), name="GS_TIMEOUT_SECONDS", default=120.0
        ),
        gs_command=gs_command,
        cleanup_interval_seconds=_positive(
            env_float("CLEANUP_INTERVAL_SECONDS", 120.0), name="CLEANUP_INTERVAL_SECONDS", default=120.0
        ),
        file_max_age_seconds=_positive(
            env_float("FILE_MAX_AGE_SECONDS", 300.0), name="FILE_MAX_AGE_SECONDS", default=300.0
        ),
        cors_origin=os.environ.get("CORS_ORIGIN", defaults.cors_origin),
        rate_limit_window_seconds=env_int("RATE_LIMIT_WINDOW_SECONDS", 600),
        rate_limit_max_requests=env_int("RATE_LIMIT_MAX_REQUESTS", 5),
        app_env=env_choice("APP_ENV", "development", ("development", "production")),
        pdf_precheck_enabled=env_bool("PDF_PRECHECK_ENABLED", True),
    )

    if config.effective_file_max_age_seconds > config.file_max_age_seconds:
        logger.warning(
            "[settings] FILE_MAX_AGE_SECONDS=%s is shorter than a full job; sweeping at %ss instead",
            config.file_max_age_seconds,
            config.effective_file_max_age_seconds,
        )
    return config
