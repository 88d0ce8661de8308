"""
Whole-image structural similarity (SSIM)

The whole image is treated as a single window: one mean, one standard
deviation and one covariance per image pair.
"""

import numpy as np
from PIL import Image

from .errors import DimensionMismatch, InvalidImage

# Default SSIM constants
L = 255.0
K1 = 0.01
K2 = 0.03
C1 = (K1 * L) ** 2
C2 = (K2 * L) ** 2


def dim(image):
    """
    Return the (width, height) of an image.

    Args:
        image: PIL Image or numpy array (H x W or H x W x C)

    Returns:
        tuple: (width, height)
    """
    if isinstance(image, Image.Image):
        return image.size
    shape = np.shape(image)
    return shape[1], shape[0]


def equal_dim(image_a, image_b):
    """Check if two images have the same dimension."""
    return dim(image_a) == dim(image_b)


def _check_dim(image_a, image_b):
    if not equal_dim(image_a, image_b):
        raise DimensionMismatch(dim(image_a), dim(image_b))


def convert_to_gray(image):
    """
    Convert an image to a single-channel luminance image.

    Args:
        image: PIL Image or numpy array

    Returns:
        PIL Image: New 'L' mode image with the same dimensions
    """
    w, h = dim(image)
    if w == 0 or h == 0:
        raise InvalidImage(f"Cannot convert zero-area image ({w}x{h})")

    if not isinstance(image, Image.Image):
        image = Image.fromarray(np.asarray(image))

    # convert() always returns a copy, even for 'L' input
    return image.convert('L')


def pixel_values(image):
    """
    Return the intensity samples of an image as a float64 array.

    Single-band images use their only band. Multi-band images use the
    first (red) band.
    """
    if isinstance(image, Image.Image):
        if len(image.getbands()) > 1:
            image = image.getchannel(0)
        values = np.asarray(image, dtype=np.float64)
    else:
        values = np.asarray(image, dtype=np.float64)
        if values.ndim == 3:
            values = values[:, :, 0]

    if values.size < 2:
        w, h = dim(image)
        raise InvalidImage(f"Image needs at least two pixels, got {w}x{h}")
    return values


def _denominator(values):
    # (w * h) - 1, kept for compatibility with the reference metric
    return float(values.size - 1)


def mean(image):
    """Mean of the pixel values of an image."""
    values = pixel_values(image)
    return float(values.sum() / _denominator(values))


def stdev(image):
    """Standard deviation of the pixel values of an image."""
    values = pixel_values(image)
    avg = values.sum() / _denominator(values)
    return float(np.sqrt(((values - avg) ** 2).sum() / _denominator(values)))


def covariance(image_a, image_b):
    """
    Covariance of the pixel values of two images.

    Raises:
        DimensionMismatch: if the images differ in width or height
    """
    _check_dim(image_a, image_b)
    values_a = pixel_values(image_a)
    values_b = pixel_values(image_b)
    n = _denominator(values_a)

    avg_a = values_a.sum() / n
    avg_b = values_b.sum() / n
    return float(((values_a - avg_a) * (values_b - avg_b)).sum() / n)


def similarity(image_a, image_b):
    """
    Compute the SSIM index between two images of equal size.

    Args:
        image_a: PIL Image or numpy array
        image_b: PIL Image or numpy array

    Returns:
        float: Similarity score, 1.0 for identical non-constant images

    Raises:
        DimensionMismatch: if the images differ in width or height
    """
    _check_dim(image_a, image_b)

    avg_a = mean(image_a)
    avg_b = mean(image_b)
    stdev_a = stdev(image_a)
    stdev_b = stdev(image_b)
    cov = covariance(image_a, image_b)

    numerator = ((2.0 * avg_a * avg_b) + C1) * ((2.0 * cov) + C2)
    denominator = (avg_a ** 2 + avg_b ** 2 + C1) * (stdev_a ** 2 + stdev_b ** 2 + C2)

    return numerator / denominator


def compare_to_reference(reference_gray, candidate):
    """SSIM between a grayscale reference and a grayscaled decoded candidate."""
    return similarity(reference_gray, convert_to_gray(candidate))
