"""Shared utility functions for the PDF compression service.

Contains:
- env_* helpers: read typed values from the environment with defaults
- format_bytes: Human-readable byte counts for logs and headers
"""

import logging
import os

logger = logging.getLogger(__name__)


def env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes")


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("[settings] Invalid %s=%s; using %s", name, raw, default)
        return default


def env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("[settings] Invalid %s=%s; using %s", name, raw, default)
        return default


def env_choice(name: str, default: str, allowed: tuple[str, ...]) -> str:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    if raw not in allowed:
        logger.warning("[settings] Invalid %s=%s (expected one of %s); using %s", name, raw, ", ".join(allowed), default)
        return default
    return raw


def format_bytes(num_bytes: int, decimals: int = 2) -> str:
    """Format a byte count as a short human-readable string (e.g. "2.5 MB")."""
    if num_bytes <= 0:
        return "0 Bytes"

    units = ["Bytes", "KB", "MB", "GB"]
    index = 0
    while index < len(units) - 1 and num_bytes >= 1024 ** (index + 1):
        index += 1

    decimals = max(0, decimals)
    text = f"{num_bytes / (1024 ** index):.{decimals}f}"
    if decimals:
        # "2.50" -> "2.5", "3.00" -> "3"
        text = text.rstrip("0").rstrip(".")
    return f"{text} {units[index]}"
