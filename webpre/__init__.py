"""
webpre - SSIM-targeted lossy image re-encoding
Finds the smallest encoder quality that keeps a target structural similarity
"""

__version__ = "0.1.0"

from .codec import JPEGCodec, WebPCodec
from .errors import CodecError, DimensionMismatch, InvalidImage, WebpreError
from .optimizer import optimize
from .search import QualitySearch
from .ssim import similarity

__all__ = [
    "WebPCodec", "JPEGCodec", "QualitySearch", "optimize", "similarity",
    "WebpreError", "InvalidImage", "DimensionMismatch", "CodecError",
]
