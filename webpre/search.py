"""
Quality search - finds the smallest encode that still meets a target SSIM
"""

import logging
from collections import namedtuple

from .config import DEFAULTS
from .ssim import compare_to_reference, convert_to_gray

logger = logging.getLogger(__name__)

TrialResult = namedtuple('TrialResult', ['quality', 'similarity', 'size', 'payload'])

SearchOutcome = namedtuple(
    'SearchOutcome',
    ['best', 'fallback', 'attempts', 'stop_reason', 'min_quality', 'max_quality']
)

# Stop reasons
EXHAUSTED = 'exhausted'
UNREACHABLE = 'unreachable'
PERFECT = 'perfect'
LOOPS = 'loops'


class SearchState:
    """
    Mutable state of one search: the quality bounds and the two result slots.

    `best` holds the smallest trial that beat the original size while
    meeting the target. `fallback` holds the trial closest in size to the
    original regardless of the target.
    """

    def __init__(self, min_quality, max_quality):
        if min_quality > max_quality:
            raise ValueError(
                f"min_quality ({min_quality}) must not exceed max_quality ({max_quality})"
            )
        self.min_quality = min_quality
        self.max_quality = max_quality
        self.best = None
        self.fallback = None
        self.attempts = 0

    @property
    def exhausted(self):
        return self.min_quality == self.max_quality

    def midpoint(self):
        return self.min_quality + (self.max_quality - self.min_quality) // 2


def update_best(best, trial, target, original_size):
    """
    Return the new best result after `trial`.

    A trial replaces the best when it meets the target and is strictly
    smaller than the current best (or the original, when there is no best).
    """
    limit = best.size if best is not None else original_size
    if trial.size < limit and trial.similarity >= target:
        return trial
    return best


def update_fallback(fallback, trial, original_size):
    """
    Return the new fallback result after `trial`.

    The first trial always seeds the slot. Afterwards, at or below the
    original size the largest trial wins; above it the smallest wins.
    """
    if fallback is None:
        return trial
    if trial.size <= original_size and trial.size > fallback.size:
        return trial
    if trial.size > original_size and trial.size < fallback.size:
        return trial
    return fallback


def narrow_bounds(min_quality, max_quality, trial, target, original_size):
    """
    Compute new quality bounds from one trial.

    Returns:
        tuple: (min_quality, max_quality, stop_reason or None)
    """
    q = trial.quality
    if trial.size >= original_size:
        if trial.similarity < target:
            return min_quality, max_quality, UNREACHABLE
        return min_quality, max(q - 1, min_quality), None

    if trial.similarity < target:
        return min(q + 1, max_quality), max_quality, None
    if trial.similarity > target:
        return min_quality, max(q - 1, min_quality), None
    return min_quality, max_quality, PERFECT


class QualitySearch:
    """
    Bisection-style search over encoder quality.

    Each trial encodes the image, decodes it, and measures similarity
    against the grayscale original. Size and similarity move the bounds
    independently, so this is not a plain binary search.
    """

    def __init__(self, codec, target=0.999, loops=6, encode_gray=True,
                 metric=None, callback=None):
        """
        Initialize the search.

        Args:
            codec: Object with encode(image, quality) and decode(data)
            target: Minimum acceptable SSIM, in (0, 1]
            loops: Maximum number of trials
            encode_gray: Encode the grayscale original instead of the source
            metric: Callable (reference_gray, decoded) -> float
            callback: Callable (attempt, TrialResult) invoked after each trial
        """
        self.codec = codec
        self.target = target
        self.loops = loops
        self.encode_gray = encode_gray
        self.metric = metric or compare_to_reference
        self.callback = callback

    @classmethod
    def from_config(cls, codec, config=None, **kwargs):
        """Create a search from a settings dict, falling back to DEFAULTS."""
        if config is None:
            config = {}
        return cls(
            codec,
            target=config.get('target', DEFAULTS['target']),
            loops=config.get('loops', DEFAULTS['loops']),
            encode_gray=config.get('encode_gray', DEFAULTS['encode_gray']),
            **kwargs
        )

    def source_for_encoding(self, image, reference_gray=None):
        """Image the trials encode: the grayscale original, or the source."""
        if self.encode_gray:
            return reference_gray if reference_gray is not None else convert_to_gray(image)
        return image

    def run_trial(self, image, reference_gray, quality):
        """
        Encode, decode and measure one quality level.

        Raises:
            CodecError: if encoding or decoding fails
        """
        payload = self.codec.encode(image, quality)
        decoded = self.codec.decode(payload)
        index = self.metric(reference_gray, decoded)
        return TrialResult(quality, index, len(payload), payload)

    def run(self, image, original_size, min_quality, max_quality, reference_gray=None):
        """
        Search for the smallest encode that meets the target.

        Args:
            image: Source image (PIL Image)
            original_size: Size of the source file in bytes
            min_quality: Lower quality bound
            max_quality: Upper quality bound
            reference_gray: Precomputed grayscale of `image`

        Returns:
            SearchOutcome
        """
        if reference_gray is None:
            reference_gray = convert_to_gray(image)
        encode_image = self.source_for_encoding(image, reference_gray)

        state = SearchState(min_quality, max_quality)
        stop_reason = LOOPS

        for attempt in range(1, self.loops + 1):
            q = state.midpoint()
            if state.exhausted:
                logger.debug("Tried all qualities between %d and %d", min_quality, max_quality)
                stop_reason = EXHAUSTED
                break

            trial = self.run_trial(encode_image, reference_gray, q)
            state.attempts = attempt
            logger.debug("[%d] quality=%d ssim=%.5f size=%d", attempt, q, trial.similarity, trial.size)
            if self.callback is not None:
                self.callback(attempt, trial)

            state.min_quality, state.max_quality, stop = narrow_bounds(
                state.min_quality, state.max_quality, trial, self.target, original_size
            )
            state.best = update_best(state.best, trial, self.target, original_size)
            state.fallback = update_fallback(state.fallback, trial, original_size)

            if stop is not None:
                stop_reason = stop
                if stop == UNREACHABLE:
                    logger.info("Cannot achieve target SSIM by compressing further")
                else:
                    logger.info("Found perfect compression at quality %d", q)
                break
            logger.debug("Bounds now [%d, %d]", state.min_quality, state.max_quality)

        return SearchOutcome(
            best=state.best,
            fallback=state.fallback,
            attempts=state.attempts,
            stop_reason=stop_reason,
            min_quality=state.min_quality,
            max_quality=state.max_quality,
        )
