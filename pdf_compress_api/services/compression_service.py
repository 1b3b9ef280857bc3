"""HTTP-facing compression service: upload handling, delivery and error mapping."""

import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from flask import current_app, jsonify, request, send_file
from werkzeug.exceptions import HTTPException, NotFound, RequestEntityTooLarge
from werkzeug.utils import secure_filename

from pdf_compress_api import bootstrap
from pdf_compress_api.config import RuntimeConfig
from pdf_compress_api.core.exceptions import (
    CompressionFailedError,
    EncryptionError,
    EngineUnavailableError,
    InvalidUploadError,
    PDFCompressionError,
    ProcessingTimeoutError,
    RateLimitError,
    UnsupportedImageError,
)
from pdf_compress_api.core.utils import format_bytes
from pdf_compress_api.engine.ghostscript import get_ghostscript_command
from pdf_compress_api.engine.outcomes import (
    REASON_PASSWORD_PROTECTED,
    EngineUnavailable,
    Outcome,
    RecoverableContentError,
    Success,
    TimedOut,
    UnknownFailure,
)
from pdf_compress_api.engine.presets import recipe_kind_for_profile
from pdf_compress_api.services import file_service, job_service
from pdf_compress_api.services.rate_limit import SlidingWindowRateLimiter

# Config
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = ("application/pdf",)
ALLOWED_FILE_EXTENSIONS = (".pdf",)
RATE_LIMIT_KEY_SWEEP_THRESHOLD = 1024

RUNTIME_CONFIG_KEY = "RUNTIME_CONFIG"
ENGINE_INVOKER_KEY = "ENGINE_INVOKER"

# Report headers the browser client is allowed to read.
REPORT_HEADERS = [
    "X-Original-Size",
    "X-Compressed-Size",
    "X-Compression-Ratio",
    "X-Compression-Status",
    "X-Compression-Message",
    "X-Compression-Preset",
    "X-Compression-Warnings",
    "X-Compression-Tips",
    "X-Page-Count",
    "Content-Disposition",
]


def configure_app(app, config: RuntimeConfig) -> None:
    """Apply Flask app config values required by this service layer."""
    app.config["MAX_CONTENT_LENGTH"] = config.max_content_length
    app.config[RUNTIME_CONFIG_KEY] = config
    app.extensions["rate_limiter"] = SlidingWindowRateLimiter(
        max_requests=config.rate_limit_max_requests,
        window_seconds=config.rate_limit_window_seconds,
    )


def register_error_handlers(app) -> None:
    """Register HTTP and framework error handlers."""
    app.register_error_handler(RequestEntityTooLarge, handle_large_file)
    app.register_error_handler(PDFCompressionError, handle_compression_error)
    app.register_error_handler(HTTPException, handle_http_exception)
    app.register_error_handler(Exception, handle_error)


def _runtime_config() -> RuntimeConfig:
    return current_app.config[RUNTIME_CONFIG_KEY]


def log_effective_config(config: RuntimeConfig) -> None:
    logger.info("=" * 60)
    logger.info("PDF Compression API configuration")
    logger.info("  Environment:        %s", config.app_env)
    logger.info("  Upload folder:      %s", Path(config.upload_folder).resolve())
    logger.info("  Output folder:      %s", Path(config.output_folder).resolve())
    logger.info("  Max upload:         %s MB", config.max_file_size_mb)
    logger.info("  Default preset:     %s", config.default_preset)
    logger.info("  Engine timeout:     %ss", config.gs_timeout_seconds)
    logger.info("  Ghostscript:        %s", get_ghostscript_command(config.gs_command) or "NOT FOUND")
    logger.info(
        "  Cleanup:            every %ss, max age %ss",
        config.cleanup_interval_seconds,
        config.effective_file_max_age_seconds,
    )
    logger.info(
        "  Rate limit:         %s requests / %ss",
        config.rate_limit_max_requests,
        config.rate_limit_window_seconds,
    )
    logger.info("  CORS origin:        %s", config.cors_origin)
    logger.info("=" * 60)


def create_error_response(error: Exception, status_code: int = 500):
    """Create standardized error response.

    Returns both 'error' (for simple clients) and 'error_type'/'error_message'.
    Development mode adds the captured diagnostic detail.
    """
    return jsonify(_error_payload(error)), status_code


def _error_payload(error: Exception) -> Dict[str, Any]:
    if isinstance(error, PDFCompressionError):
        payload: Dict[str, Any] = {
            "success": False,
            "error": error.message,
            "error_type": error.error_type,
            "error_message": error.message,
        }
        detail = error.detail
    else:
        payload = {
            "success": False,
            "error": str(error),
            "error_type": "UnknownError",
            "error_message": str(error),
        }
        detail = repr(error)

    if detail and _runtime_config().is_development:
        payload["detail"] = detail
    return payload


def error_for_outcome(outcome: Outcome, filename: str, config: RuntimeConfig) -> PDFCompressionError:
    """Translate a failed outcome into the user-facing error for that case."""
    if isinstance(outcome, EngineUnavailable):
        return EngineUnavailableError.for_command(config.gs_command, detail=outcome.detail)
    if isinstance(outcome, RecoverableContentError):
        if outcome.reason == REASON_PASSWORD_PROTECTED:
            return EncryptionError.for_file(filename, detail=outcome.detail)
        return UnsupportedImageError.for_file(filename, detail=outcome.detail)
    if isinstance(outcome, TimedOut):
        return ProcessingTimeoutError.for_file(filename, config.gs_timeout_seconds, detail=outcome.detail)
    if isinstance(outcome, UnknownFailure):
        return CompressionFailedError.for_file(filename, detail=outcome.detail)
    raise TypeError(f"Not a failure outcome: {outcome!r}")


def _client_key() -> str:
    return request.remote_addr or "unknown"


def _check_rate_limit(config: RuntimeConfig) -> None:
    limiter: SlidingWindowRateLimiter = current_app.extensions["rate_limiter"]
    allowed, retry_after = limiter.check(_client_key())
    if limiter.tracked_keys > RATE_LIMIT_KEY_SWEEP_THRESHOLD:
        limiter.cleanup()
    if not allowed:
        logger.warning("Rate limit exceeded for %s", _client_key())
        raise RateLimitError.for_window(
            config.rate_limit_max_requests, config.rate_limit_window_seconds, retry_after
        )


def _save_upload(config: RuntimeConfig) -> tuple[Path, str]:
    """Validate the uploaded PDF and persist it under a unique name.

    Returns the stored path and the client's base filename, which may hold
    non-ASCII characters. Only the stored name is sanitized.
    """
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        raise InvalidUploadError.missing_file()

    # Browsers on Windows may send the full client path.
    original_name = upload.filename.replace("\\", "/").rsplit("/", 1)[-1]
    if Path(original_name).suffix.lower() not in ALLOWED_FILE_EXTENSIONS:
        raise InvalidUploadError.not_pdf(original_name)
    if (upload.mimetype or "").lower() not in ALLOWED_MIME_TYPES:
        raise InvalidUploadError.not_pdf(original_name)

    # secure_filename drops non-ASCII stems ("отчет.pdf" -> "pdf").
    safe_name = secure_filename(original_name)
    if Path(safe_name).suffix.lower() not in ALLOWED_FILE_EXTENSIONS:
        safe_name = "document.pdf"

    input_path = file_service.allocate_unique_path(config.upload_folder, safe_name)
    input_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        upload.save(input_path)
    except Exception:
        file_service.delete_now(input_path)
        raise
    return input_path, original_name


def _apply_report_headers(response, job: job_service.CompressionJob) -> None:
    outcome: Success = job.outcome  # type: ignore[assignment]
    report = job.report
    response.headers["X-Original-Size"] = str(outcome.original_size)
    response.headers["X-Compressed-Size"] = str(outcome.compressed_size)
    response.headers["X-Compression-Ratio"] = f"{report.ratio_percent:.2f}"
    response.headers["X-Compression-Status"] = report.tier
    response.headers["X-Compression-Message"] = report.message
    response.headers["X-Compression-Preset"] = job.recipe.preset.name
    if job.page_count is not None:
        response.headers["X-Page-Count"] = str(job.page_count)
    if report.warnings:
        response.headers["X-Compression-Warnings"] = json.dumps(report.warnings)
    if report.tips:
        response.headers["X-Compression-Tips"] = json.dumps(report.tips)


# Error handlers
def handle_large_file(e):
    max_mb = int(_runtime_config().max_file_size_mb)
    message = f"File size exceeds the limit of {max_mb} MB"
    return jsonify({
        "success": False,
        "error": message,
        "error_type": "FileTooLarge",
        "error_message": message,
    }), 413


def handle_compression_error(e: PDFCompressionError):
    if e.status_code >= 500:
        logger.error("%s: %s (%s)", e.error_type, e.message, e.detail)
    else:
        logger.warning("%s: %s", e.error_type, e.message)

    if not isinstance(e, RateLimitError):
        return create_error_response(e, e.status_code)

    payload = _error_payload(e)
    payload["retry_after"] = e.retry_after
    response = jsonify(payload)
    response.headers["Retry-After"] = str(e.retry_after)
    return response, e.status_code


def handle_http_exception(e):
    if isinstance(e, NotFound):
        logger.info("404 %s %s", request.method, request.path)
        return jsonify({"success": False, "error": "Route not found"}), 404
    logger.warning("HTTP %s on %s %s: %s", e.code, request.method, request.path, e.description)
    return create_error_response(e, e.code or 400)


def handle_error(e):
    logger.exception("Unhandled error")
    return create_error_response(e, 500)


# Routes
def health():
    """Health check endpoint."""
    config = _runtime_config()
    timer = bootstrap.get_sweep_timer()
    return jsonify({
        "success": True,
        "message": "PDF Compression API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "ghostscript": get_ghostscript_command(config.gs_command),
        "cleanup_running": bool(timer and timer.is_running),
    })


def favicon():
    """Serve an empty favicon to stop 404 noise."""
    return jsonify({"status": "ok"}), 200


def list_presets():
    """Describe the recognized quality presets."""
    config = _runtime_config()
    return jsonify({
        "success": True,
        "default": config.default_preset,
        "presets": [
            {"name": name, "profile": profile, "recipe": recipe_kind_for_profile(profile)}
            for name, profile in config.presets.items()
        ],
    })


def compress():
    """
    Compress an uploaded PDF and return it as a download.

    Accepts multipart/form-data with a 'file' field (PDF) and an optional
    'quality' field or query parameter (recommended|strong|ebook|screen|
    printer|prepress). Unknown qualities fall back to the default preset.

    The effectiveness report travels in X-Compression-* headers. Both
    working files are deleted once the response has been sent.
    """
    config = _runtime_config()
    _check_rate_limit(config)

    input_path, display_name = _save_upload(config)
    quality = request.form.get("quality") or request.args.get("quality")
    job_id = uuid.uuid4().hex[:16]
    logger.info(
        "[%s] Received file: %s (%s)",
        job_id,
        display_name,
        format_bytes(input_path.stat().st_size),
    )

    invoker = current_app.config.get(ENGINE_INVOKER_KEY)
    job = job_service.run_compression_job(
        job_service.CompressionRequest(input_path=input_path, requested_preset=quality, job_id=job_id),
        config,
        invoker=invoker,
    )

    if not job.succeeded:
        raise error_for_outcome(job.outcome, display_name, config)

    try:
        response = send_file(
            job.outcome.output_path,
            mimetype="application/pdf",
            as_attachment=True,
            download_name=f"compressed_{display_name}",
        )
        # Stream through the response iterator so close hooks run after the body is sent.
        response.direct_passthrough = False
        _apply_report_headers(response, job)
    except Exception:
        job.finish(reason="delivery failed")
        raise

    response.call_on_close(job.finish)
    return response
