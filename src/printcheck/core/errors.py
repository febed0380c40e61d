from __future__ import annotations


class PrintCheckError(Exception):
    """Base class for errors raised by printcheck."""


class DecodeFailure(PrintCheckError):
    """
    Raised when a byte buffer cannot be turned into usable pixels.

    reason is one of UNREADABLE or ZERO_DIMENSION.
    """
    UNREADABLE = "unreadable"
    ZERO_DIMENSION = "zero-dimension"

    def __init__(self, reason: str, detail: str = ""):
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason}: {detail}" if detail else reason)


class ImageProcessingError(PrintCheckError):
    """An image passed the input checks but could not be processed (system fault)."""


class ConfigError(PrintCheckError):
    """Invalid configuration value supplied at startup."""
