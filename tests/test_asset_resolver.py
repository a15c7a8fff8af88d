"""
Unit tests for the AssetResolver.
"""

import unittest

from order_composer.core.errors import (
    DecodeError,
    InvalidPrimaryFormat,
    MissingPrimaryDocument,
    MissingRequiredInput,
    UnsupportedMediaType,
)
from order_composer.document.asset_resolver import (
    AssetKind,
    AssetResolver,
    DocumentAsset,
    ImageAsset,
    SourceAsset,
)
from tests.test_config import TestConfig, TestUtils


class TestAssetResolver(unittest.TestCase):
    """Test cases for AssetResolver."""

    def setUp(self):
        self.resolver = AssetResolver()

    def test_classify(self):
        cases = {
            'image/png': AssetKind.IMAGE,
            'image/jpeg': AssetKind.IMAGE,
            'image/jpg': AssetKind.IMAGE,
            'IMAGE/PNG; charset=binary': AssetKind.IMAGE,
            'application/pdf': AssetKind.DOCUMENT,
            'image/gif': AssetKind.UNSUPPORTED,
            'text/plain': AssetKind.UNSUPPORTED,
            '': AssetKind.UNSUPPORTED,
            None: AssetKind.UNSUPPORTED,
        }
        for media_type, expected in cases.items():
            with self.subTest(media_type=media_type):
                self.assertIs(self.resolver.classify(media_type), expected)

    def test_resolve_image(self):
        data = TestUtils.make_image_bytes(10, 10)
        asset = self.resolver.resolve(data, 'Image/PNG')
        self.assertIsInstance(asset, ImageAsset)
        self.assertEqual(asset.media_type, 'image/png')
        self.assertIs(asset.data, data)

    def test_resolve_document(self):
        data = TestUtils.make_pdf_bytes([TestConfig.A4, TestConfig.LETTER])
        original = bytes(data)

        asset = self.resolver.resolve(data, 'application/pdf')

        self.assertIsInstance(asset, DocumentAsset)
        self.assertEqual(asset.page_count, 2)
        self.assertEqual(asset.page_sizes, ((595, 842), (612, 792)))
        self.assertEqual(data, original)

    def test_document_open_returns_fresh_view(self):
        asset = self.resolver.resolve(TestUtils.make_pdf_bytes([TestConfig.A4] * 3), 'application/pdf')
        with asset.open() as first, asset.open() as second:
            self.assertIsNot(first, second)
            self.assertEqual(first.page_count, 3)
            first.delete_page(0)
            self.assertEqual(second.page_count, 3)
        self.assertEqual(asset.page_count, 3)

    def test_resolve_unsupported(self):
        with self.assertRaises(UnsupportedMediaType) as ctx:
            self.resolver.resolve(b"GIF89a", 'image/gif')
        self.assertEqual(ctx.exception.media_type, 'image/gif')

    def test_resolve_malformed_pdf(self):
        with self.assertRaises(DecodeError):
            self.resolver.resolve(TestConfig.GARBAGE_BYTES, 'application/pdf')
        with self.assertRaises(DecodeError):
            self.resolver.resolve(b"", 'application/pdf')

    def test_resolve_source_keeps_pixel_hints(self):
        source = SourceAsset(TestUtils.make_image_bytes(4, 3), 'image/png', 4, 3)
        asset = self.resolver.resolve_source(source)
        self.assertEqual((asset.pixel_width, asset.pixel_height), (4, 3))

    def test_primary_missing(self):
        with self.assertRaises(MissingPrimaryDocument):
            self.resolver.resolve_primary(None)
        with self.assertRaises(MissingRequiredInput):
            self.resolver.resolve_primary(SourceAsset(b"", 'application/pdf'))

    def test_primary_must_be_pdf(self):
        with self.assertRaises(InvalidPrimaryFormat):
            self.resolver.resolve_primary(TestUtils.png_source(10, 10))

    def test_primary_malformed(self):
        with self.assertRaises(InvalidPrimaryFormat) as ctx:
            self.resolver.resolve_primary(SourceAsset(TestConfig.GARBAGE_BYTES, 'application/pdf'))
        self.assertIsInstance(ctx.exception, DecodeError)

    def test_primary_valid(self):
        asset = self.resolver.resolve_primary(TestUtils.pdf_source([TestConfig.A4] * 3))
        self.assertEqual(asset.page_count, 3)


if __name__ == '__main__':
    unittest.main()
