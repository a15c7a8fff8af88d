"""
Classification of input buffers into images and PDF documents.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

import fitz  # PyMuPDF

from ..core.config import Config
from ..core.errors import (
    DecodeError,
    InvalidPrimaryFormat,
    MissingPrimaryDocument,
    UnsupportedMediaType,
)
from ..utils.logging_config import get_module_logger


class AssetKind(Enum):
    IMAGE = 'image'
    DOCUMENT = 'document'
    UNSUPPORTED = 'unsupported'


@dataclass(frozen=True)
class SourceAsset:
    """
    Raw input buffer with its declared media type.

    Pixel dimensions are optional hints; the raster header is authoritative.
    """

    data: bytes
    media_type: str
    pixel_width: Optional[int] = None
    pixel_height: Optional[int] = None


@dataclass(frozen=True)
class ImageAsset:
    """A raster input (JPEG or PNG)."""

    data: bytes
    media_type: str
    pixel_width: Optional[int] = None
    pixel_height: Optional[int] = None


@dataclass(frozen=True)
class DocumentAsset:
    """A parsed PDF input, described by its page geometry."""

    data: bytes
    page_sizes: Tuple[Tuple[float, float], ...]

    @property
    def page_count(self) -> int:
        return len(self.page_sizes)

    def open(self) -> fitz.Document:
        """Open a fresh read-only view of the document."""
        return fitz.open(stream=self.data, filetype="pdf")


ResolvedAsset = Union[ImageAsset, DocumentAsset]


class AssetResolver:
    """Resolves declared media types into image or document assets."""

    def __init__(self):
        self.logger = get_module_logger(__name__)

    @staticmethod
    def classify(declared_type: Optional[str]) -> AssetKind:
        media_type = Config.normalize_media_type(declared_type)
        if media_type in Config.SUPPORTED_IMAGE_MEDIA_TYPES:
            return AssetKind.IMAGE
        if media_type == Config.PDF_MEDIA_TYPE:
            return AssetKind.DOCUMENT
        return AssetKind.UNSUPPORTED

    def resolve(self, data: bytes, declared_type: Optional[str]) -> ResolvedAsset:
        """
        Resolve a buffer into an ImageAsset or DocumentAsset.

        Args:
            data: Raw file bytes
            declared_type: Declared media type, e.g. 'image/png'

        Returns:
            ImageAsset for supported rasters, DocumentAsset for PDFs

        Raises:
            UnsupportedMediaType: If the type is neither raster nor PDF
            DecodeError: If PDF bytes cannot be parsed
        """
        kind = self.classify(declared_type)
        media_type = Config.normalize_media_type(declared_type)

        if kind is AssetKind.IMAGE:
            self.logger.debug("  > Resolved %d bytes as image (%s)", len(data), media_type)
            return ImageAsset(data=data, media_type=media_type)
        if kind is AssetKind.DOCUMENT:
            return self._resolve_document(data)
        raise UnsupportedMediaType(declared_type)

    def resolve_source(self, source: SourceAsset) -> ResolvedAsset:
        """Resolve a SourceAsset, carrying over its pixel dimension hints."""
        resolved = self.resolve(source.data, source.media_type)
        if isinstance(resolved, ImageAsset):
            return ImageAsset(
                data=resolved.data,
                media_type=resolved.media_type,
                pixel_width=source.pixel_width,
                pixel_height=source.pixel_height,
            )
        return resolved

    def resolve_primary(self, source: Optional[SourceAsset]) -> DocumentAsset:
        """
        Resolve the primary input, which must be a PDF.

        Raises:
            MissingPrimaryDocument: If no primary buffer is supplied
            InvalidPrimaryFormat: If the primary is not a parseable PDF
        """
        if source is None or not source.data:
            raise MissingPrimaryDocument("A primary PDF document is required")

        if self.classify(source.media_type) is not AssetKind.DOCUMENT:
            raise InvalidPrimaryFormat(
                f"Primary document must be a PDF, got '{source.media_type}'")

        try:
            return self._resolve_document(source.data)
        except DecodeError as e:
            raise InvalidPrimaryFormat(f"Primary document is not a valid PDF: {e}") from e

    def _resolve_document(self, data: bytes) -> DocumentAsset:
        """Read page geometry from PDF bytes without modifying them."""
        if not data:
            raise DecodeError("PDF buffer is empty")

        try:
            with fitz.open(stream=data, filetype="pdf") as pdf_doc:
                if not pdf_doc.is_pdf:
                    raise DecodeError("Buffer is not a PDF document")
                page_sizes = tuple(
                    (page.rect.width, page.rect.height) for page in pdf_doc
                )
        except DecodeError:
            raise
        except Exception as e:
            raise DecodeError(f"Cannot parse PDF: {e}") from e

        self.logger.debug("  > Resolved PDF with %d page(s)", len(page_sizes))
        return DocumentAsset(data=data, page_sizes=page_sizes)
