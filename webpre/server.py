"""
HTTP server - runs the quality search on uploaded images
"""

import logging
from io import BytesIO

from flask import Flask, jsonify, request, send_file
from PIL import Image, UnidentifiedImageError

from .codec import get_codec, sniff_bytes
from .config import DEFAULTS, check_settings
from .errors import CodecError, DimensionMismatch, InvalidImage
from .search import QualitySearch
from .selector import COPY, choose
from .ssim import convert_to_gray, similarity

logger = logging.getLogger(__name__)

MIMETYPES = {
    'webp': 'image/webp',
    'jpeg': 'image/jpeg',
}


def _read_upload(field):
    """Return the bytes of an uploaded file field, or the raw request body."""
    upload = request.files.get(field)
    if upload is not None:
        return upload.read()
    return request.get_data()


def _open_image(data):
    image = Image.open(BytesIO(data))
    image.load()
    return image


def _parse_settings(args):
    settings = {
        'min_quality': args.get('min', DEFAULTS['min_quality'], type=int),
        'max_quality': args.get('max', DEFAULTS['max_quality'], type=int),
        'target': args.get('target', DEFAULTS['target'], type=float),
        'loops': args.get('loops', DEFAULTS['loops'], type=int),
        'format': args.get('format', DEFAULTS['format']),
        'encode_gray': args.get('color', '0') not in ('1', 'true', 'yes'),
    }
    return settings


def create_app():
    """
    Create Flask app for image optimization.

    Returns:
        Flask app
    """
    app = Flask(__name__)

    @app.route('/health')
    def health():
        """Health check endpoint."""
        return jsonify({'status': 'ok'})

    @app.route('/optimize', methods=['POST'])
    def optimize():
        """
        Optimize an uploaded image.

        Query params: min, max, target, loops, format, color
        Returns the chosen image bytes.
        """
        settings = _parse_settings(request.args)
        error = check_settings(settings['min_quality'], settings['max_quality'],
                               settings['target'], settings['loops'])
        if error is None and settings['format'] not in MIMETYPES:
            error = f"Unknown format {settings['format']!r}"
        if error is not None:
            return jsonify({'error': error}), 400

        data = _read_upload('image')
        if not data:
            return jsonify({'error': 'No image uploaded'}), 400

        try:
            original = _open_image(data)
        except (UnidentifiedImageError, OSError) as e:
            return jsonify({'error': f'Cannot decode image: {e}'}), 415

        codec = get_codec(settings['format'])
        search = QualitySearch.from_config(codec, settings)
        try:
            original_gray = convert_to_gray(original)
            outcome = search.run(original, len(data), settings['min_quality'],
                                 settings['max_quality'], reference_gray=original_gray)
            selection = choose(
                outcome,
                len(data),
                is_target_format=sniff_bytes(data, codec),
                retry=lambda: search.run_trial(
                    search.source_for_encoding(original, original_gray),
                    original_gray, settings['max_quality']
                ),
            )
        except InvalidImage as e:
            return jsonify({'error': str(e)}), 422
        except CodecError as e:
            logger.error("Search failed: %s", e)
            return jsonify({'error': str(e)}), 500

        body = data if selection.kind == COPY else selection.payload
        response = send_file(BytesIO(body), mimetype=MIMETYPES[settings['format']])
        response.headers['X-Webpre-Action'] = selection.kind
        response.headers['X-Webpre-Original-Size'] = str(selection.original_size)
        if selection.quality is not None:
            response.headers['X-Webpre-Quality'] = str(selection.quality)
            response.headers['X-Webpre-SSIM'] = f'{selection.similarity:.5f}'
        return response

    @app.route('/similarity', methods=['POST'])
    def get_similarity():
        """
        SSIM between two uploaded images.

        Form fields: a, b
        """
        if 'a' not in request.files or 'b' not in request.files:
            return jsonify({'error': "Upload two images as 'a' and 'b'"}), 400
        try:
            image_a = _open_image(request.files['a'].read())
            image_b = _open_image(request.files['b'].read())
        except (UnidentifiedImageError, OSError) as e:
            return jsonify({'error': f'Cannot decode image: {e}'}), 415

        try:
            index = similarity(convert_to_gray(image_a), convert_to_gray(image_b))
        except (DimensionMismatch, InvalidImage) as e:
            return jsonify({'error': str(e)}), 422
        return jsonify({'ssim': index})

    return app


def run_server(host='127.0.0.1', port=5000, debug=False):
    """
    Run the optimization server.

    Args:
        host: Host to bind to
        port: Port to bind to
        debug: Enable debug mode
    """
    app = create_app()
    app.run(host=host, port=port, debug=debug)
