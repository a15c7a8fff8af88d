"""
Test configuration and utilities for the order composer test suite.
"""

import io
import os
import tempfile
import unittest
from pathlib import Path

import fitz  # PyMuPDF
from PIL import Image

from order_composer.document.asset_resolver import SourceAsset


class TestConfig:
    """Configuration constants for tests."""

    A4 = (595, 842)
    LETTER = (612, 792)

    # Not a PDF, not an image
    GARBAGE_BYTES = b"this is definitely not a document"


class TestUtils:
    """Utility functions for tests."""

    @staticmethod
    def make_pdf_bytes(page_sizes=(TestConfig.A4,), rotation=0, cropbox=None):
        """Build a PDF with one labelled page per size, optionally rotated or cropped."""
        pdf_doc = fitz.open()
        for idx, (width, height) in enumerate(page_sizes, 1):
            page = pdf_doc.new_page(width=width, height=height)
            page.insert_text((72, 72), f"Page {idx}")
            if cropbox is not None:
                page.set_cropbox(fitz.Rect(cropbox))
            if rotation:
                page.set_rotation(rotation)
        data = pdf_doc.tobytes()
        pdf_doc.close()
        return data

    @staticmethod
    def make_image_bytes(width, height, image_format="PNG", color="blue"):
        """Build a solid-colour raster image."""
        buffer = io.BytesIO()
        Image.new('RGB', (width, height), color=color).save(buffer, format=image_format)
        return buffer.getvalue()

    @staticmethod
    def make_split_image_bytes(width, height, left="red", right="blue"):
        """Build a PNG whose left and right halves differ in colour."""
        image = Image.new('RGB', (width, height), color=left)
        image.paste(right, (width // 2, 0, width, height))
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    @staticmethod
    def pdf_source(page_sizes=(TestConfig.A4,)):
        return SourceAsset(TestUtils.make_pdf_bytes(page_sizes), 'application/pdf')

    @staticmethod
    def png_source(width, height, color="blue"):
        return SourceAsset(TestUtils.make_image_bytes(width, height, "PNG", color), 'image/png')

    @staticmethod
    def jpeg_source(width, height, color="red"):
        return SourceAsset(TestUtils.make_image_bytes(width, height, "JPEG", color), 'image/jpeg')


class BaseTestCase(unittest.TestCase):
    """Base test case with common functionality."""

    def setUp(self):
        """Set up common test fixtures."""
        self._temp_dir = tempfile.TemporaryDirectory()
        self.temp_dir = self._temp_dir.name

    def tearDown(self):
        """Clean up test fixtures."""
        self._temp_dir.cleanup()

    def write_temp_file(self, filename, content):
        """Write bytes to a file inside the temp directory."""
        path = os.path.join(self.temp_dir, filename)
        Path(path).write_bytes(content)
        return path

    def open_pdf(self, data):
        """Open PDF bytes, closing the document when the test ends."""
        pdf_doc = fitz.open(stream=data, filetype="pdf")
        self.addCleanup(pdf_doc.close)
        return pdf_doc

    def assertRectAlmostEqual(self, actual, expected, places=1):
        """Assert two rectangles match coordinate by coordinate."""
        for a, e in zip(tuple(actual), tuple(expected)):
            self.assertAlmostEqual(a, e, places=places, msg=f"{tuple(actual)} != {tuple(expected)}")

    def assertFileExists(self, filepath):
        """Assert that a file exists."""
        self.assertTrue(os.path.exists(filepath), f"File does not exist: {filepath}")


def discover_and_run_tests():
    """Discover and run all tests in the tests directory."""
    test_dir = Path(__file__).parent
    loader = unittest.TestLoader()
    suite = loader.discover(str(test_dir), pattern='test_*.py', top_level_dir=str(test_dir.parent))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return result.wasSuccessful()


if __name__ == '__main__':
    discover_and_run_tests()
