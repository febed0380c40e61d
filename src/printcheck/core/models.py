from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

@dataclass(frozen=True)
class AssessmentConfig:
    """
    Thresholds that control how an image is judged against a print target.

    default_target_dpi:
        DPI used when the caller does not supply a positive target. Default 300.
    min_pct:
        Minimum acceptable percentage of the required pixels (per axis) and of
        the target DPI. Default 80.
    max_blur_variance:
        Laplacian variance below which the image is considered blurry. Default 100.
    """
    default_target_dpi: int = 300
    min_pct: float = 80.0
    max_blur_variance: float = 100.0

    def resolve_dpi(self, target_dpi: Optional[int]) -> int:
        if target_dpi is not None and target_dpi > 0:
            return int(target_dpi)
        return self.default_target_dpi


@dataclass(frozen=True)
class ImageMetadata:
    """Pixel dimensions of a successfully decoded image."""
    width_px: int
    height_px: int
    format: Optional[str] = None


@dataclass(frozen=True)
class ValidationRequest:
    """
    A single upload to be validated.

    target_dpi may be None (or non-positive) to fall back to the configured default.
    """
    data: bytes
    content_type: Optional[str]
    x_inches: float
    y_inches: float
    target_dpi: Optional[int] = None
    filename: Optional[str] = None
