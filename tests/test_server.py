"""
Tests for the HTTP server
"""

import io
import unittest

import numpy as np
from PIL import Image

from webpre.server import create_app


def make_test_image(size=96, seed=0):
    rng = np.random.RandomState(seed)
    x = np.linspace(0, 255, size)
    base = np.add.outer(x, x) / 2
    rgb = np.stack([base, base[::-1], np.full_like(base, 128)], axis=2)
    rgb = rgb + rng.randint(-8, 9, rgb.shape)
    return Image.fromarray(np.clip(rgb, 0, 255).astype(np.uint8))


def encode(image, fmt='PNG', **kwargs):
    buffer = io.BytesIO()
    image.save(buffer, fmt, **kwargs)
    return buffer.getvalue()


class TestServer(unittest.TestCase):
    """Test the Flask endpoints."""

    def setUp(self):
        self.app = create_app()
        self.app.testing = True
        self.client = self.app.test_client()
        self.png = encode(make_test_image())

    def test_health(self):
        response = self.client.get('/health')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), {'status': 'ok'})

    def test_optimize_upload(self):
        response = self.client.post(
            '/optimize?target=0.9',
            data={'image': (io.BytesIO(self.png), 'source.png')},
            content_type='multipart/form-data',
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.mimetype, 'image/webp')
        self.assertEqual(response.headers['X-Webpre-Action'], 'best')
        self.assertEqual(response.headers['X-Webpre-Original-Size'], str(len(self.png)))
        self.assertLess(len(response.data), len(self.png))
        self.assertEqual(response.data[8:12], b'WEBP')

    def test_optimize_raw_body_equal_bounds(self):
        webp = encode(make_test_image(), 'WEBP', quality=90)
        response = self.client.post('/optimize?min=50&max=50', data=webp,
                                    content_type='application/octet-stream')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers['X-Webpre-Action'], 'copy')
        self.assertEqual(response.data, webp)

    def test_optimize_jpeg(self):
        response = self.client.post('/optimize?target=0.9&format=jpeg', data=self.png,
                                    content_type='application/octet-stream')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.mimetype, 'image/jpeg')

    def test_optimize_invalid_settings(self):
        for query in ('max=101', 'min=-1', 'target=2', 'loops=0', 'format=gif'):
            response = self.client.post(f'/optimize?{query}', data=self.png)
            self.assertEqual(response.status_code, 400, query)
            self.assertIn('error', response.get_json())

    def test_optimize_no_image(self):
        response = self.client.post('/optimize')
        self.assertEqual(response.status_code, 400)

    def test_optimize_garbage(self):
        response = self.client.post('/optimize', data=b'garbage bytes',
                                    content_type='application/octet-stream')
        self.assertEqual(response.status_code, 415)

    def test_similarity(self):
        response = self.client.post(
            '/similarity',
            data={'a': (io.BytesIO(self.png), 'a.png'), 'b': (io.BytesIO(self.png), 'b.png')},
            content_type='multipart/form-data',
        )
        self.assertEqual(response.status_code, 200)
        self.assertAlmostEqual(response.get_json()['ssim'], 1.0, places=9)

    def test_similarity_mismatch(self):
        other = encode(make_test_image(size=64))
        response = self.client.post(
            '/similarity',
            data={'a': (io.BytesIO(self.png), 'a.png'), 'b': (io.BytesIO(other), 'b.png')},
            content_type='multipart/form-data',
        )
        self.assertEqual(response.status_code, 422)

    def test_similarity_missing_field(self):
        response = self.client.post(
            '/similarity',
            data={'a': (io.BytesIO(self.png), 'a.png')},
            content_type='multipart/form-data',
        )
        self.assertEqual(response.status_code, 400)


if __name__ == '__main__':
    unittest.main()
