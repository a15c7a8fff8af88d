"""
Page assembly: primary pages, first-page overlays and appended secondary content.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

import fitz  # PyMuPDF

from ..core.config import Config
from ..core.errors import DecodeError, MissingPrimaryDocument
from ..document.asset_resolver import DocumentAsset
from ..document.image_embedder import EmbeddedImage, ImageEmbedder
from ..layout.layout_engine import ResolvedPlacement
from ..utils.logging_config import get_pdf_logger


@dataclass(frozen=True)
class DrawOperation:
    """A draw performed on an output page."""

    page_index: int
    kind: str  # 'image' or 'page'
    rect: Tuple[float, float, float, float]
    source: str


@dataclass
class OutputDocument:
    """The in-progress composed document and the draws applied to it."""

    document: fitz.Document
    operations: List[DrawOperation] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return self.document.page_count

    @property
    def page_sizes(self) -> List[Tuple[float, float]]:
        return [(page.rect.width, page.rect.height) for page in self.document]

    def operations_on(self, page_index: int) -> List[DrawOperation]:
        return [op for op in self.operations if op.page_index == page_index]

    def close(self) -> None:
        if not self.document.is_closed:
            self.document.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


Secondary = Union[DocumentAsset, EmbeddedImage]


class PageComposer:
    """
    Builds the output document.

    Secondary content uses the append-as-page policy: a PDF secondary has all
    of its pages appended after the primary's, an image secondary gets one new
    page sized to its pixel dimensions with the image at full size.
    """

    def __init__(self, embedder: ImageEmbedder):
        self.embedder = embedder
        self.logger = get_pdf_logger()

    def compose(self, primary: Optional[DocumentAsset],
                placements: Sequence[Tuple[ResolvedPlacement, EmbeddedImage]],
                secondary: Optional[Secondary] = None) -> OutputDocument:
        """
        Compose the output document.

        Args:
            primary: The base document
            placements: Resolved placements with the image drawn at each
            secondary: Optional EmbeddedImage or DocumentAsset to append

        Returns:
            OutputDocument owning a new fitz.Document

        Raises:
            MissingPrimaryDocument: If primary is None
            DecodeError: If a source cannot be read while composing
        """
        if primary is None:
            raise MissingPrimaryDocument("A primary PDF document is required")

        output = OutputDocument(document=fitz.open())
        try:
            self._copy_primary(output, primary)
            self._draw_overlays(output, placements)
            if secondary is not None:
                self._append_secondary(output, secondary)
        except Exception:
            output.close()
            raise

        self.logger.info("  > Composed %d page(s) with %d draw operation(s)",
                         output.page_count, len(output.operations))
        return output

    def _copy_primary(self, output: OutputDocument, primary: DocumentAsset) -> None:
        """Copy every primary page, in order, into the output."""
        try:
            with primary.open() as source_doc:
                if source_doc.page_count:
                    output.document.insert_pdf(source_doc)
        except Exception as e:
            raise DecodeError(f"Cannot copy primary pages: {e}") from e

        if output.page_count == 0:
            width, height = Config.DEFAULT_PAGE_SIZE
            self.logger.warning("  > ⚠️ Primary document has no pages, adding a blank %dx%d page", width, height)
            output.document.new_page(width=width, height=height)

        for page_index in range(output.page_count):
            page = output.document[page_index]
            output.operations.append(DrawOperation(
                page_index, 'page', tuple(page.rect), 'primary'))
        self.logger.debug("  > Copied %d primary page(s)", primary.page_count)

    def _draw_overlays(self, output: OutputDocument,
                       placements: Sequence[Tuple[ResolvedPlacement, EmbeddedImage]]) -> None:
        """
        Draw every placement on page 0, above the existing content.

        Placements are laid out on the page as displayed. On a rotated page
        each rectangle is mapped back to unrotated coordinates and the image
        is counter-rotated so it appears upright.
        """
        if not placements:
            return

        first_page = output.document[0]
        derotate = first_page.derotation_matrix
        for placement, embedded in placements:
            rect = self.to_page_rect(first_page.rect, placement)
            self._draw_image(first_page, embedded, rect * derotate, rotate=first_page.rotation)
            output.operations.append(DrawOperation(0, 'image', tuple(rect), placement.asset_ref))
            self.logger.debug("  > Drew %s at (%.1f, %.1f, %.1f, %.1f)",
                              placement.asset_ref, rect.x0, rect.y0, rect.x1, rect.y1)

    def _append_secondary(self, output: OutputDocument, secondary: Secondary) -> None:
        if isinstance(secondary, DocumentAsset):
            self._append_document(output, secondary)
        elif isinstance(secondary, EmbeddedImage):
            self._append_image_page(output, secondary)
        else:
            raise TypeError(f"Unsupported secondary content: {type(secondary).__name__}")

    def _append_document(self, output: OutputDocument, secondary: DocumentAsset) -> None:
        start = output.page_count
        try:
            with secondary.open() as source_doc:
                if source_doc.page_count:
                    output.document.insert_pdf(source_doc)
        except Exception as e:
            raise DecodeError(f"Cannot append secondary document: {e}") from e

        for page_index in range(start, output.page_count):
            page = output.document[page_index]
            output.operations.append(DrawOperation(
                page_index, 'page', tuple(page.rect), 'secondary'))
        self.logger.info("  > Appended %d secondary page(s)", output.page_count - start)

    def _append_image_page(self, output: OutputDocument, secondary: EmbeddedImage) -> None:
        # One pixel maps to one point
        page = output.document.new_page(width=secondary.width, height=secondary.height)
        self._draw_image(page, secondary, page.rect)
        output.operations.append(DrawOperation(
            page.number, 'image', tuple(page.rect), 'secondary'))
        self.logger.info("  > Appended secondary image page (%d x %d)", secondary.width, secondary.height)

    def _draw_image(self, page: fitz.Page, embedded: EmbeddedImage, rect: fitz.Rect,
                    rotate: int = 0) -> None:
        try:
            self.embedder.draw(page, embedded, rect, rotate=rotate)
        except Exception as e:
            raise DecodeError(f"Cannot draw {embedded.media_type} image: {e}") from e

    @staticmethod
    def to_page_rect(page_rect: fitz.Rect, placement: ResolvedPlacement) -> fitz.Rect:
        """Convert a bottom-left origin placement to a top-left origin page rectangle."""
        y0 = page_rect.y0 + page_rect.height - placement.top
        x0 = page_rect.x0 + placement.x
        return fitz.Rect(x0, y0, x0 + placement.width, y0 + placement.height)
