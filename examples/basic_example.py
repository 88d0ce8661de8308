"""
Example: find the smallest WebP that keeps a target SSIM
"""

import os

import numpy as np
from PIL import Image

from webpre import WebPCodec, QualitySearch, optimize, similarity
from webpre.ssim import convert_to_gray

# Create a sample image
print("Creating sample image...")
width, height = 512, 512
image_array = np.zeros((height, width, 3), dtype=np.uint8)

# Create a gradient pattern
for y in range(height):
    for x in range(width):
        image_array[y, x] = [x % 256, y % 256, (x + y) % 256]

sample_image = Image.fromarray(image_array)
sample_image.save('/tmp/sample_original.png')
original_size = os.path.getsize('/tmp/sample_original.png')
print(f"Sample image saved to /tmp/sample_original.png ({original_size / 1024:.2f}KB)")

# Run the search by hand to see every trial
print("\nSearching...")
search = QualitySearch(
    WebPCodec(),
    target=0.999,  # Minimum SSIM to keep
    loops=6,       # Maximum number of trial encodes
    callback=lambda attempt, t: print(
        f"[{attempt}] Quality = {t.quality}, SSIM = {t.similarity:.5f}, Size = {t.size / 1024:.2f}KB"
    ),
)
outcome = search.run(sample_image, original_size, min_quality=40, max_quality=95)
print(f"Stopped after {outcome.attempts} attempts ({outcome.stop_reason})")
if outcome.best is not None:
    print(f"Best quality: {outcome.best.quality}")

# Or let optimize() handle reading, selection and writing
print("\nOptimizing file...")
selection = optimize('/tmp/sample_original.png', '/tmp/sample_optimized.webp', encode_gray=False)
print(f"Wrote /tmp/sample_optimized.webp: {selection.kind}, {selection.size / 1024:.2f}KB")

# Compare quality
written = Image.open('/tmp/sample_optimized.webp')
index = similarity(convert_to_gray(sample_image), convert_to_gray(written))
print(f"\nSSIM against original: {index:.5f}")
