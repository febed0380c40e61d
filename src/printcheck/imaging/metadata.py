from __future__ import annotations

import io

from PIL import Image

from printcheck.core.errors import DecodeFailure
from printcheck.core.models import ImageMetadata


def decode_image(data: bytes) -> Image.Image:
    """Open and fully decode an image from memory; the format is sniffed from content."""
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (OSError, ValueError, SyntaxError, EOFError, Image.DecompressionBombError) as e:
        # UnidentifiedImageError is an OSError; truncated pixel data surfaces as OSError on load().
        raise DecodeFailure(DecodeFailure.UNREADABLE, str(e)) from e
    return img


def extract_metadata(data: bytes) -> ImageMetadata:
    """
    Decode `data` and return its pixel dimensions.

    Raises DecodeFailure("unreadable") if the bytes are not a legible raster image,
    and DecodeFailure("zero-dimension") if decoding yields an empty raster.
    """
    if not data:
        raise DecodeFailure(DecodeFailure.UNREADABLE, "empty buffer")

    with decode_image(data) as img:
        w, h = img.size
        fmt = img.format

    if w <= 0 or h <= 0:
        raise DecodeFailure(DecodeFailure.ZERO_DIMENSION, f"{w}x{h}")
    return ImageMetadata(width_px=int(w), height_px=int(h), format=fmt)
