"""
File helpers for persisting results
"""

import os
import shutil


def get_filesize(path):
    """Size of a file in bytes."""
    return os.path.getsize(path)


def save(path, data):
    """Write `data` to `path`, replacing any existing file."""
    with open(path, 'wb') as f:
        f.write(data)


def copy_file(src, dest):
    """
    Copy a file verbatim.

    Returns:
        int: Number of bytes copied
    """
    shutil.copyfile(src, dest)
    return os.path.getsize(dest)
