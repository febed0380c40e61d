from __future__ import annotations

import logging
import math
import sys
from typing import Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import RequestEntityTooLarge

from printcheck.app.config import Settings, load_settings
from printcheck.core.errors import ImageProcessingError
from printcheck.core.models import ValidationRequest
from printcheck.validation.report import error_response
from printcheck.validation.service import validate_request

logger = logging.getLogger(__name__)


def _parse_float(raw: Optional[str]) -> float:
    """Form value -> float; missing or unparsable values become NaN and fail the dimension check."""
    if raw is None:
        return math.nan
    try:
        return float(raw)
    except ValueError:
        return math.nan


def _openapi_document() -> dict:
    envelope = {
        "type": "object",
        "properties": {
            "status": {"type": "string", "enum": ["valid", "invalid", "error"]},
            "message": {"type": "string"},
            "suggestion": {"type": "string", "nullable": True},
            "effectiveDpi": {"type": "number", "nullable": True},
            "widthPct": {"type": "number", "nullable": True},
            "heightPct": {"type": "number", "nullable": True},
        },
    }
    response = {"content": {"application/json": {"schema": {"$ref": "#/components/schemas/ValidationResponse"}}}}
    return {
        "openapi": "3.0.3",
        "info": {
            "title": "Image Validation API",
            "version": "1.0.0",
            "description": "Validates uploaded images for print resolution, aspect ratio and blurriness.",
        },
        "paths": {
            "/api/validate": {
                "post": {
                    "summary": "Validate image resolution and blurriness",
                    "requestBody": {
                        "required": True,
                        "content": {
                            "multipart/form-data": {
                                "schema": {
                                    "type": "object",
                                    "required": ["image", "x_inches", "y_inches"],
                                    "properties": {
                                        "image": {"type": "string", "format": "binary"},
                                        "x_inches": {"type": "number", "exclusiveMinimum": 0},
                                        "y_inches": {"type": "number", "exclusiveMinimum": 0},
                                        "target_dpi": {"type": "integer", "minimum": 1},
                                    },
                                }
                            }
                        },
                    },
                    "responses": {
                        "200": {"description": "Image is valid", **response},
                        "400": {"description": "Validation failed or invalid input", **response},
                        "413": {"description": "Upload too large", **response},
                        "500": {"description": "Image could not be processed", **response},
                    },
                }
            }
        },
        "components": {"schemas": {"ValidationResponse": envelope}},
    }


def create_app(settings: Optional[Settings] = None) -> Flask:
    settings = settings or load_settings()

    app = Flask(__name__)
    # Protect against giant uploads; Flask answers 413 before the view runs.
    app.config["MAX_CONTENT_LENGTH"] = settings.max_upload_bytes

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(_e):
        body = error_response(f"File exceeds maximum upload size of {settings.max_upload_mb} MB", status="invalid")
        return jsonify(body), 413

    @app.get("/healthz")
    def healthz():
        return jsonify({"ok": True})

    @app.get("/api/info")
    def api_info():
        """Active thresholds, so clients can explain a rejection."""
        cfg = settings.assessment
        return jsonify({
            "defaultTargetDpi": cfg.default_target_dpi,
            "minPct": cfg.min_pct,
            "maxBlurVariance": cfg.max_blur_variance,
            "maxUploadMb": settings.max_upload_mb,
        })

    @app.get("/api/openapi.json")
    def api_openapi():
        return jsonify(_openapi_document())

    @app.post("/api/validate")
    def api_validate():
        upload = request.files.get("image")
        data = upload.read() if upload is not None else b""
        content_type = upload.mimetype if upload is not None else None
        filename = upload.filename if upload is not None else None

        raw_dpi = request.form.get("target_dpi")
        target_dpi = None
        if raw_dpi not in (None, ""):
            try:
                target_dpi = int(raw_dpi)
            except ValueError:
                body = error_response("Invalid target DPI: must be an integer", status="invalid")
                return jsonify(body), 400

        x_inches = _parse_float(request.form.get("x_inches"))
        y_inches = _parse_float(request.form.get("y_inches"))

        logger.info("Received validation request for file: %s, size: %d", filename, len(data))
        req = ValidationRequest(
            data=data,
            content_type=content_type,
            x_inches=x_inches,
            y_inches=y_inches,
            target_dpi=target_dpi,
            filename=filename,
        )
        try:
            result = validate_request(req, settings.assessment)
        except ImageProcessingError:
            logger.exception("Image processing failed for %s", filename)
            return jsonify(error_response("Failed to process image")), 500
        except Exception:
            logger.exception("Unexpected error during image validation")
            return jsonify(error_response("Unexpected error while validating image")), 500

        return jsonify(result.to_response()), (200 if result.valid else 400)

    return app


def main() -> int:
    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    app = create_app(settings)
    logger.info("Starting printcheck on %s:%d", settings.host, settings.port)
    app.run(host=settings.host, port=settings.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
