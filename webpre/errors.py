"""
Error types raised by webpre
"""


class WebpreError(Exception):
    """Base class for all webpre errors."""


class InvalidImage(WebpreError, ValueError):
    """Image has too few pixels to be measured."""


class DimensionMismatch(WebpreError, ValueError):
    """Two images being compared do not have the same width and height."""

    def __init__(self, size_a, size_b):
        super().__init__(
            f"Images must have same dimension: {size_a[0]}x{size_a[1]} "
            f"vs {size_b[0]}x{size_b[1]}"
        )
        self.size_a = size_a
        self.size_b = size_b


class CodecError(WebpreError):
    """Encoding or decoding an image failed."""
