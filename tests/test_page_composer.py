"""
Unit tests for the PageComposer and Serializer.
"""

import unittest
from unittest.mock import MagicMock

import fitz  # PyMuPDF

from order_composer.core.config import Anchor
from order_composer.core.errors import MissingPrimaryDocument, SerializationError
from order_composer.document.asset_resolver import AssetResolver, ImageAsset
from order_composer.document.image_embedder import ImageEmbedder
from order_composer.layout.layout_engine import ResolvedPlacement
from order_composer.pdf.page_composer import OutputDocument, PageComposer
from order_composer.pdf.serializer import Serializer
from tests.test_config import BaseTestCase, TestConfig, TestUtils


class TestPageComposer(BaseTestCase):
    """Test cases for PageComposer."""

    def setUp(self):
        super().setUp()
        self.resolver = AssetResolver()
        self.embedder = ImageEmbedder()
        self.composer = PageComposer(self.embedder)

    def primary(self, pages=2, size=TestConfig.A4):
        return self.resolver.resolve(TestUtils.make_pdf_bytes([size] * pages), 'application/pdf')

    def compose(self, *args, **kwargs):
        output = self.composer.compose(*args, **kwargs)
        self.addCleanup(output.close)
        return output

    def test_copies_primary_pages(self):
        output = self.compose(self.primary(pages=4), [])
        self.assertEqual(output.page_count, 4)
        self.assertEqual(output.page_sizes, [(595, 842)] * 4)
        self.assertIn("Page 3", output.document[2].get_text())

    def test_missing_primary(self):
        with self.assertRaises(MissingPrimaryDocument):
            self.composer.compose(None, [])

    def test_overlays_drawn_on_first_page_only(self):
        logo = self.embedder.embed(ImageAsset(TestUtils.make_image_bytes(800, 200), 'image/png'))
        placement = ResolvedPlacement('logo', Anchor.TOP_LEFT, 40, 762, 200, 50)

        output = self.compose(self.primary(), [(placement, logo)])

        infos = output.document[0].get_image_info()
        self.assertEqual(len(infos), 1)
        self.assertRectAlmostEqual(infos[0]['bbox'], (40, 30, 240, 80))
        self.assertEqual(output.document[1].get_image_info(), [])
        self.assertIn("Page 1", output.document[0].get_text())

        image_ops = [op for op in output.operations_on(0) if op.kind == 'image']
        self.assertEqual([op.source for op in image_ops], ['logo'])

    def test_append_secondary_document(self):
        secondary = self.resolver.resolve(
            TestUtils.make_pdf_bytes([TestConfig.LETTER] * 3), 'application/pdf')

        output = self.compose(self.primary(pages=2), [], secondary)

        self.assertEqual(output.page_count, 5)
        self.assertEqual(output.page_sizes[2:], [(612, 792)] * 3)
        self.assertIn("Page 1", output.document[2].get_text())

    def test_append_secondary_image(self):
        label = self.embedder.embed(ImageAsset(TestUtils.make_image_bytes(1000, 1500, "JPEG"), 'image/jpeg'))

        output = self.compose(self.primary(pages=2), [], label)

        self.assertEqual(output.page_count, 3)
        self.assertEqual(output.page_sizes[2], (1000, 1500))
        infos = output.document[2].get_image_info()
        self.assertEqual(len(infos), 1)
        self.assertRectAlmostEqual(infos[0]['bbox'], (0, 0, 1000, 1500))

    def test_empty_primary_gets_blank_page(self):
        primary = MagicMock()
        primary.page_count = 0
        empty_doc = fitz.open()
        primary.open.return_value = empty_doc

        output = self.compose(primary, [])

        self.assertEqual(output.page_count, 1)
        self.assertEqual(output.page_sizes, [(595, 842)])

    def test_to_page_rect(self):
        placement = ResolvedPlacement('coupon', Anchor.BOTTOM_LEFT, 40, 30, 180, 120)
        rect = PageComposer.to_page_rect(fitz.Rect(0, 0, 595, 842), placement)
        self.assertRectAlmostEqual(rect, (40, 692, 220, 812))


class TestSerializer(BaseTestCase):
    """Test cases for Serializer."""

    def setUp(self):
        super().setUp()
        self.serializer = Serializer()

    def test_finalize(self):
        pdf_doc = fitz.open(stream=TestUtils.make_pdf_bytes([TestConfig.A4] * 2), filetype="pdf")
        with OutputDocument(pdf_doc) as output:
            data = self.serializer.finalize(output)

        self.assertTrue(data.startswith(b"%PDF"))
        result = self.open_pdf(data)
        self.assertEqual(result.page_count, 2)
        self.assertEqual(result.metadata['producer'], 'order-composer')

    def test_closed_document(self):
        pdf_doc = fitz.open()
        pdf_doc.new_page()
        output = OutputDocument(pdf_doc)
        output.close()
        with self.assertRaises(SerializationError):
            self.serializer.finalize(output)

    def test_write_failure(self):
        document = MagicMock()
        document.is_closed = False
        document.page_count = 1
        document.tobytes.side_effect = RuntimeError("disk full")

        with self.assertRaises(SerializationError):
            self.serializer.finalize(OutputDocument(document))

    def test_page_count_mismatch(self):
        document = MagicMock()
        document.is_closed = False
        document.page_count = 3
        document.tobytes.return_value = TestUtils.make_pdf_bytes()

        with self.assertRaises(SerializationError):
            self.serializer.finalize(OutputDocument(document))


if __name__ == '__main__':
    unittest.main()
