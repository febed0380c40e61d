#!/usr/bin/env python3
"""
printcheck CLI

Check whether an image file is fit to print at a given physical size and DPI:
- Resolution: enough pixels for width x height inches @ DPI (within the configured tolerance)
- Aspect ratio: pixel ratio within 20% of the target ratio
- Sharpness: Laplacian variance above the configured blur threshold

Usage:
  printcheck --input photo.jpg --width-in 2 --height-in 2
  printcheck --input scan.png --width-in 8.5 --height-in 11 --dpi 600 --json

Thresholds come from PRINTCHECK_* environment variables (or a .env file).
"""

from __future__ import annotations

import argparse
import json
import logging
import mimetypes
import sys
from pathlib import Path
from typing import Optional

from printcheck.app.config import load_settings
from printcheck.core.errors import ConfigError, ImageProcessingError
from printcheck.validation.assessor import format_report_text
from printcheck.validation.report import error_response
from printcheck.validation.service import validate_upload

EXIT_VALID = 0
EXIT_INVALID = 1
EXIT_ERROR = 2


def _guess_content_type(path: str) -> Optional[str]:
    """Content type as a browser would declare it for this file name."""
    ctype, _ = mimetypes.guess_type(path)
    return ctype


def _build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Validate an image for print at a physical size and DPI.")
    p.add_argument("--input", "-i", required=True, help="Path to the image (jpg/png/...)")
    p.add_argument("--width-in", type=float, required=True, help="Target print width in inches")
    p.add_argument("--height-in", type=float, required=True, help="Target print height in inches")
    p.add_argument("--dpi", type=int, default=None, help="Target DPI (default: PRINTCHECK_DEFAULT_TARGET_DPI or 300)")
    p.add_argument("--content-type", default=None, help="Override the content type guessed from the file name")
    p.add_argument("--json", action="store_true", help="Print the API response envelope as JSON")
    p.add_argument("--verbose", "-v", action="store_true", help="Log each check")
    return p


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.ERROR,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    try:
        settings = load_settings()
        data = Path(args.input).read_bytes()
    except (ConfigError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_ERROR

    content_type = args.content_type or _guess_content_type(args.input)
    try:
        result = validate_upload(
            data,
            content_type,
            args.width_in,
            args.height_in,
            target_dpi=args.dpi,
            config=settings.assessment,
            filename=args.input,
        )
    except ImageProcessingError as e:
        if args.json:
            print(json.dumps(error_response("Failed to process image"), indent=2))
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_ERROR

    if args.json:
        print(json.dumps(result.to_response(), indent=2, ensure_ascii=False))
    else:
        print(format_report_text(result))
    return EXIT_VALID if result.valid else EXIT_INVALID


if __name__ == "__main__":
    raise SystemExit(main())
