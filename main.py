#!/usr/bin/env python3
"""
Order Composer - Main CLI entry point.

Composes an order PDF, static overlay images and a shipping label into one PDF.
"""

import argparse
import sys
from pathlib import Path

from order_composer import __version__
from order_composer.core.composer import DocumentComposer
from order_composer.core.config import Config
from order_composer.core.errors import ComposerError
from order_composer.document.asset_resolver import SourceAsset
from order_composer.utils.logging_config import setup_logging, get_logger
from order_composer.utils.validators import Validators

STATIC_SLOTS = ('logo', 'coupon', 'feedback', 'social')


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description=f'Order Composer v{__version__} - Compose an order PDF with overlays and a shipping label',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s order.pdf combined.pdf --logo logo.png
  %(prog)s order.pdf combined.pdf --logo logo.png --coupon coupon.jpg --secondary label.pdf
  %(prog)s order.pdf combined.pdf --secondary label.png --verbose

Layout:
  logo       - top-left of the first page (max 200 x 100 pt)
  coupon     - bottom-left of the first page (max 180 x 120 pt)
  social     - bottom-center of the first page (max 180 x 120 pt)
  feedback   - bottom-right of the first page (max 180 x 120 pt)
  secondary  - PDF pages appended as-is, or an image on its own page
        """)

    parser.add_argument('primary_file', help='Primary (order) PDF file path')
    parser.add_argument('output_file', help='Output PDF file path')
    for slot in STATIC_SLOTS:
        parser.add_argument(f'--{slot}', help=f'{slot.capitalize()} image (JPEG or PNG)')
    parser.add_argument('--secondary', help='Shipping label to append (PDF, JPEG or PNG)')
    parser.add_argument('--verbose', '-v', '--debug', action='store_true', help='Enable verbose logging (DEBUG level)')
    parser.add_argument('--log-file', help='Log to file in addition to console')
    parser.add_argument('--version', action='version', version=f'Order Composer v{__version__}')

    args = parser.parse_args(argv)

    setup_logging(log_file=args.log_file, verbose=args.verbose)

    logger = get_logger()
    logger.info("=" * 60)
    logger.info("Order Composer v%s - Starting composition", __version__)
    logger.info("=" * 60)

    return handle_composition(args, logger)


def load_source(path: str, logger) -> SourceAsset:
    """Read a file into a SourceAsset, inferring its media type from the extension."""
    result = Validators.validate_input_file(path)
    if not result['valid']:
        raise ValueError(result['error_message'])

    logger.info("  %s (%s, %.2f MB)", result['resolved_path'], result['media_type'], result['file_size_mb'])
    data = Path(result['resolved_path']).read_bytes()

    # Check the content matches the extension before composing
    if result['media_type'] == Config.PDF_MEDIA_TYPE:
        content = Validators.validate_pdf_bytes(data)
        if not content['valid']:
            raise ValueError(f"{result['resolved_path']}: {content['error_message']}")
        logger.debug("    %d page(s)", content['page_count'])
    else:
        content = Validators.validate_image_bytes(data)
        if not content['valid']:
            raise ValueError(f"{result['resolved_path']}: {content['error_message']}")
        if content['media_type'] != result['media_type']:
            raise ValueError(
                f"{result['resolved_path']}: extension says {result['media_type']} "
                f"but the file contains {content['media_type']} data")
        logger.debug("    %d x %d px", content['width'], content['height'])

    return SourceAsset(data=data, media_type=result['media_type'])


def handle_composition(args, logger) -> int:
    """Load the inputs, compose, and write the output PDF."""
    output_result = Validators.validate_output_path(args.output_file)
    if not output_result['valid']:
        logger.error("❌ %s", output_result['error_message'])
        return 1
    if output_result['file_exists']:
        logger.warning("⚠️ Output file exists and will be overwritten.")

    try:
        logger.info("Inputs:")
        primary = load_source(args.primary_file, logger)
        static_assets = {}
        for slot in STATIC_SLOTS:
            path = getattr(args, slot)
            if path:
                static_assets[slot] = load_source(path, logger)
        secondary = load_source(args.secondary, logger) if args.secondary else None
    except (ValueError, OSError) as e:
        logger.error("❌ %s", e)
        return 1

    try:
        pdf_bytes = DocumentComposer().compose(primary, static_assets, secondary)
    except ComposerError:
        logger.error("=" * 60)
        logger.error("❌ Composition failed!")
        logger.error("=" * 60)
        return 1
    except KeyboardInterrupt:
        logger.warning("\n⚠️ Composition interrupted by user.")
        return 1

    output_path = Path(output_result['resolved_path'])
    try:
        output_path.write_bytes(pdf_bytes)
    except OSError as e:
        logger.error("❌ Cannot write output file: %s", e, exc_info=True)
        return 1

    logger.info("=" * 60)
    logger.info("🎉 Composition completed successfully!")
    logger.info("📄 Output: %s", output_path)
    logger.info("=" * 60)
    return 0


if __name__ == '__main__':
    sys.exit(main())
