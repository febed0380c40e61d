import unittest
from unittest.mock import MagicMock, patch

import numpy as np

from tests._test_path import SRC  # noqa: F401
from tests._images import encode, flat, sharp_png

from printcheck.core.errors import DecodeFailure
from printcheck.imaging import metadata as md


class TestExtractMetadata(unittest.TestCase):
    def test_png_dimensions(self):
        m = md.extract_metadata(sharp_png(640, 480))
        self.assertEqual((m.width_px, m.height_px), (640, 480))
        self.assertEqual(m.format, "PNG")

    def test_jpeg_dimensions_rgb(self):
        arr = np.zeros((30, 50, 3), dtype=np.uint8)
        arr[:, :, 0] = 200
        m = md.extract_metadata(encode(arr, fmt="JPEG"))
        self.assertEqual((m.width_px, m.height_px), (50, 30))
        self.assertEqual(m.format, "JPEG")

    def test_format_sniffed_from_content(self):
        # Nothing here knows a file name; PNG magic alone identifies it.
        data = encode(flat(7, 3))
        self.assertTrue(data.startswith(b"\x89PNG"))
        self.assertEqual(md.extract_metadata(data).format, "PNG")

    def test_garbage_is_unreadable(self):
        with self.assertRaises(DecodeFailure) as ctx:
            md.extract_metadata(b"definitely not an image")
        self.assertEqual(ctx.exception.reason, DecodeFailure.UNREADABLE)

    def test_empty_is_unreadable(self):
        with self.assertRaises(DecodeFailure) as ctx:
            md.extract_metadata(b"")
        self.assertEqual(ctx.exception.reason, DecodeFailure.UNREADABLE)

    def test_truncated_png_is_unreadable(self):
        data = sharp_png(200, 200)
        with self.assertRaises(DecodeFailure) as ctx:
            md.extract_metadata(data[: len(data) // 2])
        self.assertEqual(ctx.exception.reason, DecodeFailure.UNREADABLE)

    def test_zero_dimension(self):
        fake = MagicMock()
        fake.__enter__.return_value = fake
        fake.__exit__.return_value = False
        fake.size = (0, 10)
        fake.format = "PNG"
        with patch.object(md.Image, "open", return_value=fake):
            with self.assertRaises(DecodeFailure) as ctx:
                md.extract_metadata(b"\x89PNG fake")
        self.assertEqual(ctx.exception.reason, DecodeFailure.ZERO_DIMENSION)
