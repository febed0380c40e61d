import math
import unittest
from unittest.mock import patch

from tests._test_path import SRC  # noqa: F401
from tests._images import sharp_png

from printcheck.core.errors import DecodeFailure, ImageProcessingError
from printcheck.core.models import AssessmentConfig, ValidationRequest
from printcheck.validation import assessor
from printcheck.validation import service as s


def _assert_no_metrics(test, res):
    test.assertIsNone(res.effective_dpi)
    test.assertIsNone(res.width_pct)
    test.assertIsNone(res.height_pct)


class TestInputChecks(unittest.TestCase):
    def test_empty_file(self):
        res = s.validate_upload(b"", "image/jpeg", 2.0, 2.0, 300)
        self.assertFalse(res.valid)
        self.assertEqual(res.message, "File is empty")
        _assert_no_metrics(self, res)

    def test_invalid_file_type(self):
        res = s.validate_upload(b"hello", "text/plain", 2.0, 2.0, 300)
        self.assertFalse(res.valid)
        self.assertEqual(res.message, "Invalid file type: must be an image")
        _assert_no_metrics(self, res)

    def test_missing_content_type(self):
        res = s.validate_upload(sharp_png(600, 600), None, 2.0, 2.0)
        self.assertEqual(res.message, "Invalid file type: must be an image")

    def test_invalid_dimensions(self):
        for x, y in [(0, 2.0), (2.0, 0), (-1.0, 2.0), (2.0, -0.5), (math.nan, 2.0), (2.0, math.inf)]:
            res = s.validate_upload(b"dummy", "image/jpeg", x, y, 300)
            self.assertFalse(res.valid)
            self.assertEqual(res.message, "Invalid physical dimensions: must be positive inches")
            _assert_no_metrics(self, res)

    def test_checks_run_in_order(self):
        # empty wins over a bad type, bad type wins over bad inches
        self.assertEqual(s.validate_upload(b"", "text/plain", 0, 0).message, "File is empty")
        self.assertEqual(
            s.validate_upload(b"x", "text/plain", 0, 0).message, "Invalid file type: must be an image"
        )


class TestDecodeFailures(unittest.TestCase):
    def test_unreadable_image(self):
        res = s.validate_upload(b"not an image", "image/png", 2.0, 2.0)
        self.assertFalse(res.valid)
        self.assertEqual(res.message, "Invalid image format")
        _assert_no_metrics(self, res)

    def test_zero_dimensions(self):
        with patch.object(s, "extract_metadata", side_effect=DecodeFailure(DecodeFailure.ZERO_DIMENSION)):
            res = s.validate_upload(b"\x89PNG", "image/png", 2.0, 2.0)
        self.assertEqual(res.message, "Image has zero dimensions")
        _assert_no_metrics(self, res)

    def test_blur_decode_failure_is_a_processing_error(self):
        with patch.object(assessor, "blur_variance", side_effect=DecodeFailure(DecodeFailure.UNREADABLE)):
            with self.assertRaises(ImageProcessingError):
                s.validate_upload(sharp_png(600, 600), "image/png", 2.0, 2.0, 300)


class TestEndToEnd(unittest.TestCase):
    def test_valid_image(self):
        res = s.validate_upload(sharp_png(600, 600), "image/png", 2.0, 2.0, 300)
        self.assertTrue(res.valid)
        self.assertEqual(res.effective_dpi, 300.0)
        self.assertEqual((res.width_pct, res.height_pct), (100.0, 100.0))

    def test_insufficient_resolution(self):
        res = s.validate_upload(sharp_png(450, 450), "image/png", 2.0, 2.0, 300)
        self.assertFalse(res.valid)
        self.assertEqual((res.width_pct, res.height_pct), (75.0, 75.0))
        self.assertTrue(
            res.message.startswith(
                "Insufficient resolution for 2.0x2.0 inches @ 300 DPI: 450x450 px (75.0% x 75.0%"
            )
        )

    def test_config_is_passed_through(self):
        cfg = AssessmentConfig(default_target_dpi=200, min_pct=50.0)
        res = s.validate_request(
            ValidationRequest(data=sharp_png(300, 300), content_type="image/png", x_inches=2.0, y_inches=2.0),
            cfg,
        )
        self.assertTrue(res.valid)
        self.assertEqual(res.width_pct, 75.0)
        self.assertIn("@ 200 DPI", res.message)
