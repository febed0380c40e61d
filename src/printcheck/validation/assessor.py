from __future__ import annotations

import logging
from typing import List, Optional

from printcheck.core.models import AssessmentConfig, ImageMetadata
from printcheck.imaging.laplacian import blur_variance
from printcheck.validation.report import CheckResult, ValidationResult

logger = logging.getLogger(__name__)

# Allowed deviation of the pixel aspect ratio, as a fraction of the target ratio.
ASPECT_TOLERANCE = 0.20


def _join(parts: List[str]) -> str:
    return " ".join(p for p in parts if p)


def assess(
    data: bytes,
    metadata: ImageMetadata,
    x_inches: float,
    y_inches: float,
    target_dpi: Optional[int] = None,
    config: Optional[AssessmentConfig] = None,
) -> ValidationResult:
    """
    Judge an already-decoded image against a physical print target.

    Checks run in order: resolution, effective DPI, aspect ratio, blur.
    A resolution or effective-DPI failure returns immediately. Aspect-ratio and
    blur failures are accumulated, so an image can report both.

    x_inches and y_inches must be positive; callers validate them first.
    Raises DecodeFailure if the blur pass cannot decode `data`.
    """
    cfg = config or AssessmentConfig()
    checks: List[CheckResult] = []
    messages: List[str] = []
    suggestions: List[str] = []

    w, h = metadata.width_px, metadata.height_px
    dpi = cfg.resolve_dpi(target_dpi)
    min_frac = cfg.min_pct / 100.0

    # Check: Resolution
    req_w = x_inches * dpi
    req_h = y_inches * dpi
    width_pct = (w / req_w) * 100.0
    height_pct = (h / req_h) * 100.0
    res_metrics = {
        "required_width_px": req_w,
        "required_height_px": req_h,
        "width_pct": width_pct,
        "height_pct": height_pct,
        "dpi": dpi,
    }
    if width_pct < cfg.min_pct or height_pct < cfg.min_pct:
        msg = (
            f"Insufficient resolution for {x_inches:.1f}x{y_inches:.1f} inches @ {dpi} DPI: "
            f"{w}x{h} px ({width_pct:.1f}% x {height_pct:.1f}% of required {req_w:.0f}x{req_h:.0f} px)."
        )
        sug = (
            f"Use ≥{req_w * min_frac:.0f}x{req_h * min_frac:.0f} px image "
            f"(e.g., scan/capture at ≥{dpi * min_frac:.0f} DPI)."
        )
        checks.append(CheckResult("Resolution", False, msg, sug, res_metrics))
        logger.warning("Resolution check failed: %dx%d px vs required %.0fx%.0f px", w, h, req_w, req_h)
        return ValidationResult(
            valid=False,
            message=msg,
            suggestion=sug,
            width_pct=width_pct,
            height_pct=height_pct,
            checks=checks,
        )
    checks.append(CheckResult("Resolution", True, metrics=res_metrics))

    # Check: Effective DPI (worse of the two axes)
    effective_dpi = min(w / x_inches, h / y_inches)
    effective_pct = (effective_dpi / dpi) * 100.0
    dpi_metrics = {"effective_dpi": effective_dpi, "effective_pct": effective_pct, "dpi": dpi}
    # effective_pct equals min(width_pct, height_pct) up to rounding, so this
    # rarely fires after the resolution check; it still returns immediately.
    if effective_pct < cfg.min_pct:
        msg = f"Low effective DPI: {effective_dpi:.1f} ({effective_pct:.1f}% of target {dpi})."
        sug = "Increase capture resolution."
        checks.append(CheckResult("Effective DPI", False, msg, sug, dpi_metrics))
        logger.warning("Effective DPI check failed: %.1f (%.1f%% of %d)", effective_dpi, effective_pct, dpi)
        return ValidationResult(
            valid=False,
            message=msg,
            suggestion=sug,
            effective_dpi=effective_dpi,
            width_pct=width_pct,
            height_pct=height_pct,
            checks=checks,
        )
    checks.append(CheckResult("Effective DPI", True, metrics=dpi_metrics))

    # Check: Aspect ratio
    target_ar = x_inches / y_inches
    actual_ar = w / h
    ar_metrics = {"target_ar": target_ar, "actual_ar": actual_ar, "tolerance": ASPECT_TOLERANCE}
    if abs(actual_ar - target_ar) > ASPECT_TOLERANCE * target_ar:
        msg = "Aspect ratio mismatch."
        sug = f"Expected ~{target_ar:.2f} (from {x_inches:.1f}x{y_inches:.1f} inches)."
        checks.append(CheckResult("Aspect ratio", False, msg, sug, ar_metrics))
        messages.append(msg)
        suggestions.append(sug)
        logger.warning("Aspect ratio check failed: %.3f vs target %.3f", actual_ar, target_ar)
    else:
        checks.append(CheckResult("Aspect ratio", True, metrics=ar_metrics))

    # Check: Blur (Laplacian variance)
    variance = blur_variance(data)
    threshold = cfg.max_blur_variance
    blur_metrics = {"variance": variance, "threshold": threshold}
    if variance < threshold:
        blur_pct = max(0.0, (1.0 - variance / (threshold * 2.0)) * 100.0)
        blur_metrics["blur_pct"] = blur_pct
        msg = (
            f"Image too blurry (estimated {blur_pct:.1f}% blur, "
            f"variance={variance:.2f} < threshold={threshold:.2f})."
        )
        sug = "Ensure steady capture with good lighting; avoid motion blur."
        checks.append(CheckResult("Blur", False, msg, sug, blur_metrics))
        messages.append(msg)
        suggestions.append(sug)
        logger.warning("Blur check failed: variance=%.2f < %.2f", variance, threshold)
    else:
        checks.append(CheckResult("Blur", True, metrics=blur_metrics))

    if messages:
        return ValidationResult(
            valid=False,
            message=_join(messages),
            suggestion=_join(suggestions),
            effective_dpi=effective_dpi,
            width_pct=width_pct,
            height_pct=height_pct,
            checks=checks,
        )

    logger.info("Image valid for %.1fx%.1f in @ %d DPI (effective %.1f)", x_inches, y_inches, dpi, effective_dpi)
    return ValidationResult(
        valid=True,
        message=(
            f"Valid for {x_inches:.1f}x{y_inches:.1f} inches @ {dpi} DPI "
            f"(effective {effective_dpi:.1f} DPI, {w} x {h} px)."
        ),
        suggestion="Ready for processing/printing.",
        effective_dpi=effective_dpi,
        width_pct=width_pct,
        height_pct=height_pct,
        checks=checks,
    )


def _fmt_metric(value: Optional[float], suffix: str = "") -> str:
    return "n/a" if value is None else f"{value:.1f}{suffix}"


def format_report_text(result: ValidationResult) -> str:
    lines: List[str] = []
    lines.append("printcheck Validation Report")
    lines.append("-" * 28)
    lines.append(f"Overall: {'PASS' if result.valid else 'FAIL'}")
    lines.append(f"Message: {result.message}")
    if result.suggestion:
        lines.append(f"Suggestion: {result.suggestion}")
    lines.append(
        f"Effective DPI: {_fmt_metric(result.effective_dpi)}  "
        f"Width: {_fmt_metric(result.width_pct, '%')}  "
        f"Height: {_fmt_metric(result.height_pct, '%')}"
    )
    if result.checks:
        lines.append("")
    for c in result.checks:
        mark = "✅" if c.passed else "❌"
        detail = c.message or "ok"
        lines.append(f"{mark} {c.check_id}: {detail}")
    return "\n".join(lines)
