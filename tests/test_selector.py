"""
Tests for result selection and reporting
"""

import unittest

from webpre.search import EXHAUSTED, LOOPS, UNREACHABLE, SearchOutcome, TrialResult
from webpre.selector import BEST, COPY, FALLBACK, choose, format_report


def outcome(best=None, fallback=None, attempts=1, stop_reason=LOOPS):
    return SearchOutcome(best, fallback, attempts, stop_reason, 40, 95)


class TestChoose(unittest.TestCase):
    """Test the selection policy."""

    def setUp(self):
        self.best = TrialResult(80, 0.9995, 60000, b'best-payload')
        self.fallback = TrialResult(95, 0.998, 120000, b'fallback-payload')

    def test_best_wins(self):
        selection = choose(outcome(self.best, self.fallback), 100000, is_target_format=True)
        self.assertEqual(selection.kind, BEST)
        self.assertEqual(selection.quality, 80)
        self.assertEqual(selection.size, 60000)
        self.assertEqual(selection.payload, b'best-payload')

    def test_copy_when_already_target_format(self):
        selection = choose(outcome(None, self.fallback, stop_reason=UNREACHABLE), 100000,
                           is_target_format=True)
        self.assertEqual(selection.kind, COPY)
        self.assertIsNone(selection.payload)
        self.assertEqual(selection.size, 100000)

    def test_fallback_otherwise(self):
        selection = choose(outcome(None, self.fallback), 100000, is_target_format=False)
        self.assertEqual(selection.kind, FALLBACK)
        self.assertEqual(selection.quality, 95)
        self.assertEqual(selection.payload, b'fallback-payload')

    def test_empty_fallback_uses_retry(self):
        retried = TrialResult(60, 0.97, 30000, b'retried')
        empty = outcome(attempts=0, stop_reason=EXHAUSTED)
        selection = choose(empty, 100000, is_target_format=False, retry=lambda: retried)
        self.assertEqual(selection.kind, FALLBACK)
        self.assertEqual(selection.payload, b'retried')

    def test_empty_fallback_copies_target_format(self):
        empty = outcome(attempts=0, stop_reason=EXHAUSTED)
        selection = choose(empty, 100000, is_target_format=True)
        self.assertEqual(selection.kind, COPY)

    def test_empty_fallback_without_retry(self):
        empty = outcome(attempts=0, stop_reason=EXHAUSTED)
        with self.assertRaises(ValueError):
            choose(empty, 100000, is_target_format=False)


class TestFormatReport(unittest.TestCase):
    """Test report formatting."""

    def test_best_report(self):
        best = TrialResult(80, 0.9995, 60000, b'x')
        lines = format_report(choose(outcome(best), 100000, is_target_format=False))
        self.assertEqual(lines[0], "Final image:")
        self.assertEqual(lines[1], "Quality = 80, SSIM = 0.99950, Size = 58.59KB")
        self.assertEqual(lines[2], "60.0% of original, saved 39.06KB")

    def test_fallback_report(self):
        fallback = TrialResult(95, 0.998, 120000, b'x')
        lines = format_report(choose(outcome(None, fallback), 100000, is_target_format=False))
        self.assertIn("falling back to closest match", lines[0])
        self.assertEqual(lines[3], "120.0% of original, saved -19.53KB")

    def test_copy_report(self):
        lines = format_report(choose(outcome(), 2048, is_target_format=True))
        self.assertIn("copying original image", lines[0])
        self.assertEqual(lines[1], "Size = 2.00KB")


if __name__ == '__main__':
    unittest.main()
