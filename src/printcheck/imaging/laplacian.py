from __future__ import annotations

import numpy as np
from PIL import Image

from printcheck.imaging.metadata import decode_image

# Discrete 4-neighbour Laplacian.
LAPLACIAN_KERNEL = np.array(
    [
        [0.0, 1.0, 0.0],
        [1.0, -4.0, 1.0],
        [0.0, 1.0, 0.0],
    ],
    dtype=np.float64,
)


def to_grayscale(img: Image.Image) -> np.ndarray:
    """
    PIL image -> 2D float64 intensity array on the 8-bit 0..255 scale.

    Colour images use ITU-R 601-2 luma (Pillow's "L" weights). Single-channel
    16-bit ("I;16*", and "I" as Pillow opens 16-bit PNG/TIFF) is scaled by 1/257;
    converting those with convert("L") would clip everything above 255.
    Float ("F") data in 0..1 is scaled by 255, otherwise taken as-is.
    """
    if img.mode.startswith("I;16") or img.mode == "I":
        arr = np.asarray(img, dtype=np.float64)
        return np.clip(arr, 0.0, 65535.0) / 257.0
    if img.mode == "F":
        arr = np.asarray(img, dtype=np.float64)
        if arr.size and float(arr.max()) <= 1.0:
            arr = arr * 255.0
        return arr
    if img.mode != "L":
        img = img.convert("L")
    return np.asarray(img, dtype=np.float64)


def laplacian_response(gray: np.ndarray) -> np.ndarray:
    """
    Convolve a 2D intensity array with LAPLACIAN_KERNEL.

    Edges are handled by border replication, so the output has the same shape
    as the input and a constant image yields an all-zero response.
    """
    if gray.ndim != 2:
        raise ValueError(f"expected a 2D intensity array, got shape {gray.shape}")

    H, W = gray.shape
    pad = np.pad(gray.astype(np.float64, copy=False), 1, mode="edge")
    k = LAPLACIAN_KERNEL
    out = (
        k[0, 1] * pad[0:H, 1:W + 1]
        + k[1, 0] * pad[1:H + 1, 0:W]
        + k[1, 1] * pad[1:H + 1, 1:W + 1]
        + k[1, 2] * pad[1:H + 1, 2:W + 2]
        + k[2, 1] * pad[2:H + 2, 1:W + 1]
    )
    return out


def laplacian_variance(gray: np.ndarray) -> float:
    """Population variance of the Laplacian response (higher = sharper)."""
    resp = laplacian_response(gray)
    if resp.size == 0:
        return 0.0
    return float(resp.var())


def blur_variance(data: bytes) -> float:
    """
    Decode `data` to grayscale and return its Laplacian variance.

    This is a separate decode pass from extract_metadata. Raises DecodeFailure
    if the bytes cannot be decoded.
    """
    with decode_image(data) as img:
        gray = to_grayscale(img)
    return laplacian_variance(gray)
