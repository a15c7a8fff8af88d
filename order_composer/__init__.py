"""
Order Composer - builds one printable PDF from an order document, static
overlay images and an appended shipping label.

The primary PDF's pages are copied verbatim, static images (logo, coupon,
feedback, social) are drawn on the first page at fixed anchors, and a
secondary PDF or image is appended as extra page(s).
"""

__version__ = "1.0.0"
__author__ = "Order Composer Team"

from .core.composer import DocumentComposer, compose
from .core.config import Anchor, Config, LayoutConfig, SlotSpec
from .core.errors import (
    ComposerError,
    DecodeError,
    InvalidPrimaryFormat,
    LayoutConfigError,
    MissingPrimaryDocument,
    MissingRequiredInput,
    SerializationError,
    UnsupportedMediaType,
)
from .document.asset_resolver import SourceAsset

__all__ = [
    'DocumentComposer', 'compose', 'Anchor', 'Config', 'LayoutConfig', 'SlotSpec',
    'SourceAsset', 'ComposerError', 'MissingRequiredInput', 'MissingPrimaryDocument',
    'UnsupportedMediaType', 'DecodeError', 'InvalidPrimaryFormat',
    'SerializationError', 'LayoutConfigError',
]
