"""
End-to-end optimization of a single image file
"""

import logging

from . import storage
from .codec import WebPCodec, read_image, sniff_file
from .config import DEFAULTS
from .search import QualitySearch
from .selector import COPY, choose
from .ssim import convert_to_gray

logger = logging.getLogger(__name__)


def optimize(src, dest, codec=None, min_quality=DEFAULTS['min_quality'],
             max_quality=DEFAULTS['max_quality'], target=DEFAULTS['target'],
             loops=DEFAULTS['loops'], encode_gray=DEFAULTS['encode_gray'],
             callback=None):
    """
    Re-encode `src` into `dest` at the smallest quality meeting `target`.

    If no quality beats the original size while meeting the target, a
    source already in the target format is copied verbatim; otherwise the
    closest-size trial is written.

    Args:
        src: Source image path
        dest: Destination path
        codec: Target codec (defaults to WebP)
        min_quality: Lower quality bound
        max_quality: Upper quality bound
        target: Minimum acceptable SSIM
        loops: Maximum number of trials
        encode_gray: Encode the grayscale original instead of the colour source
        callback: Callable (attempt, TrialResult) invoked after each trial

    Returns:
        Selection: What was written and its metrics
    """
    if codec is None:
        codec = WebPCodec()

    original = read_image(src)
    original_size = storage.get_filesize(src)
    original_gray = convert_to_gray(original)
    logger.info("Original size = %.2fKB", original_size / 1024)

    search = QualitySearch(codec, target=target, loops=loops,
                           encode_gray=encode_gray, callback=callback)
    outcome = search.run(original, original_size, min_quality, max_quality,
                         reference_gray=original_gray)
    logger.info("Search stopped after %d attempts (%s)", outcome.attempts, outcome.stop_reason)

    selection = choose(
        outcome,
        original_size,
        is_target_format=sniff_file(src, codec),
        retry=lambda: search.run_trial(
            search.source_for_encoding(original, original_gray), original_gray, max_quality
        ),
    )

    if selection.kind == COPY:
        storage.copy_file(src, dest)
    else:
        storage.save(dest, selection.payload)
    logger.info("Wrote %s (%s)", dest, selection.kind)
    return selection
