"""
Codec adapters - Pillow based encode/decode for the lossy target formats
"""

import io
import logging

from PIL import Image, UnidentifiedImageError

from .errors import CodecError

logger = logging.getLogger(__name__)

SNIFF_LENGTH = 512


class PillowCodec:
    """
    Encodes images to, and decodes them from, a single Pillow format.

    Subclasses set `format_name` and `modes` and implement `sniff`.
    """

    name = None
    format_name = None
    modes = ('RGB',)

    def _save_options(self, quality):
        return {'quality': quality}

    def encode(self, image, quality):
        """
        Encode an image at the given quality.

        Args:
            image: PIL Image
            quality: Quality level 0-100 (higher = larger, better fidelity)

        Returns:
            bytes: Encoded payload

        Raises:
            CodecError: if Pillow cannot encode the image
        """
        if image.mode not in self.modes:
            image = image.convert(self.modes[0])

        buffer = io.BytesIO()
        try:
            image.save(buffer, self.format_name, **self._save_options(quality))
        except (OSError, ValueError, KeyError) as e:
            raise CodecError(f"Failed to encode {self.name} at quality {quality}: {e}") from e
        return buffer.getvalue()

    def decode(self, data):
        """
        Decode an encoded payload back to a PIL Image.

        Raises:
            CodecError: if the payload cannot be decoded
        """
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (OSError, ValueError) as e:
            raise CodecError(f"Failed to decode {self.name} data: {e}") from e
        return image

    def sniff(self, header):
        """Return True if `header` starts like a file of this format."""
        raise NotImplementedError


class WebPCodec(PillowCodec):
    """Lossy WebP."""

    name = 'webp'
    format_name = 'WEBP'
    modes = ('RGB', 'RGBA')

    def __init__(self, method=4):
        """
        Args:
            method: WebP compression effort 0-6 (higher = slower, smaller)
        """
        self.method = method

    def _save_options(self, quality):
        return {'quality': quality, 'method': self.method}

    def sniff(self, header):
        return len(header) >= 12 and header[:4] == b'RIFF' and header[8:12] == b'WEBP'


class JPEGCodec(PillowCodec):
    """Baseline JPEG."""

    name = 'jpeg'
    format_name = 'JPEG'
    modes = ('RGB', 'L')

    def __init__(self, optimize=True):
        self.optimize = optimize

    def _save_options(self, quality):
        return {'quality': quality, 'optimize': self.optimize}

    def sniff(self, header):
        return header[:3] == b'\xff\xd8\xff'


CODECS = {
    'webp': WebPCodec,
    'jpeg': JPEGCodec,
}


def get_codec(name, **kwargs):
    """
    Create a codec by format name.

    Args:
        name: 'webp' or 'jpeg'

    Returns:
        PillowCodec instance
    """
    try:
        codec_cls = CODECS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown format {name!r}, expected one of {sorted(CODECS)}")
    return codec_cls(**kwargs)


def read_image(path):
    """
    Read and decode an image file of any format Pillow understands.

    Raises:
        CodecError: if the file is not a decodable image
        OSError: if the file cannot be read
    """
    try:
        with Image.open(path) as image:
            image.load()
            return image.copy()
    except UnidentifiedImageError as e:
        raise CodecError(f"Cannot decode image '{path}': {e}") from e


def sniff_bytes(data, codec):
    """Check whether raw bytes are already in the codec's format."""
    return codec.sniff(bytes(data[:SNIFF_LENGTH]))


def sniff_file(path, codec):
    """Check whether the file at `path` is already in the codec's format."""
    with open(path, 'rb') as f:
        header = f.read(SNIFF_LENGTH)
    is_target = codec.sniff(header)
    logger.debug("Sniffed %s: %s=%s", path, codec.name, is_target)
    return is_target
