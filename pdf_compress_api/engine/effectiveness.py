"""Compression effectiveness feedback."""

from dataclasses import dataclass, field
from typing import List

EXCELLENT = "excellent"
GOOD = "good"
MODERATE = "moderate"
MINIMAL = "minimal"
INCREASED = "increased"


@dataclass(frozen=True)
class EffectivenessReport:
    ratio_percent: float
    tier: str
    message: str
    warnings: List[str] = field(default_factory=list)
    tips: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "compression_ratio": self.ratio_percent,
            "status": self.tier,
            "message": self.message,
            "warnings": list(self.warnings),
            "tips": list(self.tips),
        }


def compression_ratio(original_size: int, compressed_size: int) -> float:
    """Percent reduction, rounded to 2 places. Negative when the file grew."""
    if original_size <= 0:
        return 0.0
    return round((1 - compressed_size / original_size) * 100, 2)


def report(original_size: int, compressed_size: int) -> EffectivenessReport:
    """Bucket a compression result into a feedback tier.

    Tiers are checked highest first with inclusive lower bounds, so exactly
    one applies to any ratio.
    """
    ratio = compression_ratio(original_size, compressed_size)

    if ratio >= 50:
        return EffectivenessReport(ratio, EXCELLENT, "PDF compressed successfully - Excellent compression achieved!")

    if ratio >= 20:
        return EffectivenessReport(ratio, GOOD, "PDF compressed successfully - Good compression achieved")

    if ratio >= 5:
        return EffectivenessReport(
            ratio,
            MODERATE,
            "PDF compressed successfully - Moderate compression achieved",
            warnings=["This PDF had limited compression potential. It may already be optimized."],
            tips=['Try the "strong" preset for more compression, though quality may decrease.'],
        )

    if ratio >= 0:
        return EffectivenessReport(
            ratio,
            MINIMAL,
            "PDF processed - Minimal compression achieved",
            warnings=["This PDF is already well-optimized. Compression had minimal effect."],
            tips=["This usually happens with: text-only PDFs, already-compressed PDFs, or vector graphics."],
        )

    return EffectivenessReport(
        ratio,
        INCREASED,
        "PDF processed - File size increased slightly",
        warnings=["The compressed file is slightly larger than the original."],
        tips=['This can happen with already-optimized PDFs. Consider using the original file or try the "strong" preset.'],
    )
