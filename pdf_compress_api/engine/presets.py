"""Quality preset resolution and Ghostscript argument recipes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

CONSERVATIVE = "conservative"
AGGRESSIVE = "aggressive"

# Only the /screen profile gets image resampling; every other profile stays on
# the font-only path.
AGGRESSIVE_PROFILES = frozenset({"/screen"})

AGGRESSIVE_IMAGE_RESOLUTION = 72
AGGRESSIVE_DOWNSAMPLE_TYPE = "/Bicubic"
AGGRESSIVE_JPEG_QUALITY = 60


@dataclass(frozen=True)
class ResolvedPreset:
    """A recognized preset name with its engine profile and recipe kind."""

    name: str
    profile: str
    kind: str
    fell_back: bool = False


@dataclass(frozen=True)
class Recipe:
    """Concrete, immutable Ghostscript invocation plan for one job."""

    preset: ResolvedPreset
    argument_list: Tuple[str, ...]
    input_path: Path
    output_path: Path

    @property
    def profile(self) -> str:
        return self.preset.profile

    @property
    def kind(self) -> str:
        return self.preset.kind


def recipe_kind_for_profile(profile: str) -> str:
    return AGGRESSIVE if profile in AGGRESSIVE_PROFILES else CONSERVATIVE


def resolve_preset(
    requested: Optional[str],
    presets: Mapping[str, str],
    default_preset: str,
) -> ResolvedPreset:
    """Map a user-supplied quality name to a recognized preset.

    Unknown or absent names fall back to ``default_preset``; this never fails.
    """
    name = (requested or "").strip().lower()
    fell_back = name not in presets
    if fell_back:
        if requested:
            logger.info("Unknown quality preset '%s'; using default '%s'", requested, default_preset)
        name = default_preset

    profile = presets[name]
    return ResolvedPreset(name=name, profile=profile, kind=recipe_kind_for_profile(profile), fell_back=fell_back)


def _common_args(profile: str) -> list[str]:
    return [
        "-sDEVICE=pdfwrite",
        f"-dPDFSETTINGS={profile}",
        "-dNOPAUSE",
        "-dQUIET",
        "-dBATCH",
        "-dSAFER",
        "-dCompatibilityLevel=1.4",
    ]


def build_arguments(preset: ResolvedPreset, input_path: Path, output_path: Path) -> Tuple[str, ...]:
    """Build the Ghostscript argument list (without the binary) for a preset."""
    args = _common_args(preset.profile)

    if preset.kind == AGGRESSIVE:
        args += [
            # Image resolution control
            "-dDownsampleColorImages=true",
            f"-dColorImageResolution={AGGRESSIVE_IMAGE_RESOLUTION}",
            f"-dColorImageDownsampleType={AGGRESSIVE_DOWNSAMPLE_TYPE}",
            "-dDownsampleGrayImages=true",
            f"-dGrayImageResolution={AGGRESSIVE_IMAGE_RESOLUTION}",
            f"-dGrayImageDownsampleType={AGGRESSIVE_DOWNSAMPLE_TYPE}",
            "-dDownsampleMonoImages=true",
            f"-dMonoImageResolution={AGGRESSIVE_IMAGE_RESOLUTION}",
            f"-dMonoImageDownsampleType={AGGRESSIVE_DOWNSAMPLE_TYPE}",
            # Force JPEG re-encoding
            "-dEncodeColorImages=true",
            "-dColorImageFilter=/DCTEncode",
            f"-dJPEGQ={AGGRESSIVE_JPEG_QUALITY}",
            # Fonts
            "-dCompressFonts=true",
            "-dSubsetFonts=true",
            # Duplicate images and metadata
            "-dDetectDuplicateImages=true",
            "-dPreserveEPSInfo=false",
            "-dPreserveOPIComments=false",
            "-dPreserveHalftoneInfo=false",
        ]
    else:
        args += [
            "-dCompressFonts=true",
            "-dSubsetFonts=true",
        ]

    args += [f"-sOutputFile={output_path}", str(input_path)]
    return tuple(args)


def build_recipe(preset: ResolvedPreset, input_path: Path, output_path: Path) -> Recipe:
    input_path = Path(input_path)
    output_path = Path(output_path)
    return Recipe(
        preset=preset,
        argument_list=build_arguments(preset, input_path, output_path),
        input_path=input_path,
        output_path=output_path,
    )
