from __future__ import annotations

import logging
import math
from typing import Optional

from printcheck.core.errors import DecodeFailure, ImageProcessingError
from printcheck.core.models import AssessmentConfig, ValidationRequest
from printcheck.imaging.metadata import extract_metadata
from printcheck.validation.assessor import assess
from printcheck.validation.report import ValidationResult

logger = logging.getLogger(__name__)

MSG_EMPTY = "File is empty"
MSG_NOT_IMAGE = "Invalid file type: must be an image"
MSG_BAD_DIMENSIONS = "Invalid physical dimensions: must be positive inches"
MSG_BAD_FORMAT = "Invalid image format"
MSG_ZERO_DIMENSIONS = "Image has zero dimensions"


def _positive(v: Optional[float]) -> bool:
    return v is not None and math.isfinite(v) and v > 0


def validate_request(req: ValidationRequest, config: Optional[AssessmentConfig] = None) -> ValidationResult:
    """
    Run the input checks, decode the image and assess it.

    Client-fixable problems (empty file, wrong type, bad inches, undecodable
    image, failed thresholds) come back as an invalid ValidationResult.
    A failure after the image was accepted is raised as ImageProcessingError.
    """
    cfg = config or AssessmentConfig()
    logger.debug("Validating %s (%d bytes)", req.filename or "<upload>", len(req.data or b""))

    if not req.data:
        logger.warning("Validation failed: file is empty")
        return ValidationResult.rejected(MSG_EMPTY)

    if not req.content_type or not req.content_type.startswith("image/"):
        logger.warning("Validation failed: invalid content type %r", req.content_type)
        return ValidationResult.rejected(MSG_NOT_IMAGE)

    if not (_positive(req.x_inches) and _positive(req.y_inches)):
        logger.warning("Validation failed: invalid dimensions x=%r, y=%r", req.x_inches, req.y_inches)
        return ValidationResult.rejected(MSG_BAD_DIMENSIONS)

    try:
        metadata = extract_metadata(req.data)
    except DecodeFailure as e:
        if e.reason == DecodeFailure.ZERO_DIMENSION:
            logger.warning("Validation failed: zero dimensions")
            return ValidationResult.rejected(MSG_ZERO_DIMENSIONS)
        logger.warning("Validation failed: cannot read image format (%s)", e.detail)
        return ValidationResult.rejected(MSG_BAD_FORMAT)

    try:
        return assess(
            req.data,
            metadata,
            req.x_inches,
            req.y_inches,
            target_dpi=req.target_dpi,
            config=cfg,
        )
    except DecodeFailure as e:
        logger.error("Blur pass could not decode an accepted image: %s", e)
        raise ImageProcessingError(f"Failed to load image for blur processing: {e}") from e


def validate_upload(
    data: bytes,
    content_type: Optional[str],
    x_inches: float,
    y_inches: float,
    target_dpi: Optional[int] = None,
    config: Optional[AssessmentConfig] = None,
    filename: Optional[str] = None,
) -> ValidationResult:
    """Convenience wrapper around validate_request for callers holding loose values."""
    req = ValidationRequest(
        data=data,
        content_type=content_type,
        x_inches=x_inches,
        y_inches=y_inches,
        target_dpi=target_dpi,
        filename=filename,
    )
    return validate_request(req, config)
