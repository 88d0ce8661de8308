"""
Default search settings and argument validation
"""

import os

DEFAULTS = {
    'min_quality': 40,
    'max_quality': 95,
    'target': 0.999,
    'loops': 6,
    'format': 'webp',
    'encode_gray': True,
}


def check_settings(min_quality, max_quality, target, loops):
    """
    Validate search settings.

    Returns:
        str or None: Human-readable error message, None if valid
    """
    if max_quality < 1 or max_quality > 100:
        return "Maximum quality has to be between 1 and 100."
    if min_quality < 0 or min_quality > 99:
        return "Minimum quality has to be between 0 and 99."
    if min_quality > max_quality:
        return "Minimum quality cannot be greater than maximum quality."
    if target <= 0 or target > 1:
        return "Target has to be greater than 0 and at most 1."
    if loops <= 0:
        return "Loops has to be more than 0."
    return None


def check_args(src, dest, force, max_quality, min_quality, target, loops):
    """
    Validate command-line arguments before running a search.

    Returns:
        str or None: Human-readable error message, None if valid
    """
    if not src or not os.path.exists(src):
        return f"Source image '{src}' does not exist."
    if not dest:
        return "Please specify a destination path."
    if not force and os.path.exists(dest):
        return f"Destination path '{dest}' already exists. Use -f to overwrite."
    return check_settings(min_quality, max_quality, target, loops)
