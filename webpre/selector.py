"""
Result selection - decides what gets written once the search is done
"""

import logging
from collections import namedtuple

logger = logging.getLogger(__name__)

Selection = namedtuple(
    'Selection',
    ['kind', 'quality', 'similarity', 'size', 'original_size', 'payload']
)

BEST = 'best'
COPY = 'copy'
FALLBACK = 'fallback'


def choose(outcome, original_size, is_target_format, retry=None):
    """
    Pick the final output from a search outcome.

    Args:
        outcome: SearchOutcome from QualitySearch.run
        original_size: Size of the source file in bytes
        is_target_format: Whether the source is already in the target format
        retry: Zero-argument callable returning a TrialResult, used when
            the search produced no trial at all

    Returns:
        Selection: payload is None for the COPY kind
    """
    if outcome.best is not None:
        trial = outcome.best
        logger.info("Using best result at quality %d", trial.quality)
        return Selection(BEST, trial.quality, trial.similarity, trial.size,
                         original_size, trial.payload)

    if is_target_format:
        logger.info("Can't find target SSIM, copying original image")
        return Selection(COPY, None, None, original_size, original_size, None)

    trial = outcome.fallback
    if trial is None:
        if retry is None:
            raise ValueError("Search produced no trial and no retry was given")
        trial = retry()
    logger.info("Can't find target SSIM, falling back to quality %d", trial.quality)
    return Selection(FALLBACK, trial.quality, trial.similarity, trial.size,
                     original_size, trial.payload)


def percent_of_original(selection):
    if not selection.original_size:
        return 0.0
    return selection.size / selection.original_size * 100


def format_report(selection):
    """
    Format the final metrics of a selection.

    Returns:
        list: Lines of text, without trailing newlines
    """
    if selection.kind == COPY:
        return [
            "* Can't find target SSIM, copying original image",
            f"Size = {selection.size / 1024:.2f}KB",
        ]

    lines = []
    if selection.kind == FALLBACK:
        lines.append("* Can't find target SSIM, falling back to closest match")
    saved = (selection.original_size - selection.size) / 1024
    lines.append("Final image:")
    lines.append(
        f"Quality = {selection.quality}, SSIM = {selection.similarity:.5f}, "
        f"Size = {selection.size / 1024:.2f}KB"
    )
    lines.append(f"{percent_of_original(selection):.1f}% of original, saved {saved:.2f}KB")
    return lines
