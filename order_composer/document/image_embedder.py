"""
Raster embedding with per-call deduplication by content.
"""

import hashlib
import io
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import fitz  # PyMuPDF
from PIL import Image, UnidentifiedImageError

from ..core.config import Config
from ..core.errors import DecodeError
from ..utils.logging_config import get_module_logger
from .asset_resolver import ImageAsset


@dataclass(frozen=True)
class EmbeddedImage:
    """
    An image registered with the output document.

    Attributes:
        key: SHA-256 digest of the raster bytes, used as the handle
        width: Intrinsic width in pixels
        height: Intrinsic height in pixels
        media_type: Normalized media type
        data: Raster bytes
    """

    key: str
    width: int
    height: int
    media_type: str
    data: bytes

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


class ImageEmbedder:
    """
    Registers raster images for one composition call and its output document.

    Image xrefs are only valid inside the document they were written to, so
    drawing into a different document starts a fresh xref table.
    """

    def __init__(self):
        self.logger = get_module_logger(__name__)
        self._embedded: Dict[str, EmbeddedImage] = {}
        self._xrefs: Dict[str, int] = {}
        self._target: Optional[fitz.Document] = None

    def __len__(self) -> int:
        return len(self._embedded)

    def embed(self, image: ImageAsset) -> EmbeddedImage:
        """
        Register an image, reading its size from the raster header.

        Embedding byte-identical content twice returns the first EmbeddedImage.

        Raises:
            DecodeError: If the bytes are not a valid raster of the declared type
        """
        key = hashlib.sha256(image.data).hexdigest()
        if key in self._embedded:
            self.logger.debug("  > Reusing embedded image %s", key[:12])
            return self._embedded[key]

        width, height = self._read_dimensions(image)

        if image.pixel_width and image.pixel_height and \
                (image.pixel_width, image.pixel_height) != (width, height):
            self.logger.warning("  > ⚠️ Declared size %dx%d differs from header size %dx%d, using header",
                                image.pixel_width, image.pixel_height, width, height)

        embedded = EmbeddedImage(key=key, width=width, height=height,
                                 media_type=image.media_type, data=image.data)
        self._embedded[key] = embedded
        self.logger.debug("  > Embedded %s image %dx%d (%s)", image.media_type, width, height, key[:12])
        return embedded

    def draw(self, page: fitz.Page, embedded: EmbeddedImage, rect: fitz.Rect,
             rotate: int = 0) -> int:
        """
        Draw an embedded image into a rectangle on a page.

        The image stream is written to the document on first use; later draws
        in the same document reference the same xref.

        Args:
            page: Target page
            embedded: Image returned by embed()
            rect: Target rectangle in unrotated page coordinates
            rotate: Counter-clockwise image rotation in multiples of 90

        Returns:
            The xref of the image object
        """
        if not self._is_target(page.parent):
            self._target = page.parent
            self._xrefs.clear()

        xref = self._xrefs.get(embedded.key)
        if xref:
            page.insert_image(rect, xref=xref, keep_proportion=False, overlay=True, rotate=rotate)
        else:
            xref = page.insert_image(rect, stream=embedded.data, keep_proportion=False,
                                     overlay=True, rotate=rotate)
            self._xrefs[embedded.key] = xref
        return xref

    def _is_target(self, document) -> bool:
        if self._target is None:
            return False
        try:
            return document == self._target
        except ReferenceError:
            # Page parents may be weak proxies of a collected document
            return False

    def _read_dimensions(self, image: ImageAsset) -> Tuple[int, int]:
        """Read width and height from the JPEG or PNG header."""
        expected_format = Config.PIL_FORMATS.get(image.media_type)
        if not image.data:
            raise DecodeError(f"Empty {image.media_type} buffer")

        try:
            with Image.open(io.BytesIO(image.data)) as img:
                actual_format = img.format
                width, height = img.size
                img.verify()
        except Image.DecompressionBombError as e:
            raise DecodeError(f"Refusing oversized {image.media_type} image: {e}") from e
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            raise DecodeError(f"Cannot decode {image.media_type} image: {e}") from e

        if expected_format and actual_format != expected_format:
            raise DecodeError(
                f"Declared {image.media_type} but bytes contain {actual_format or 'unknown'} data")
        if width <= 0 or height <= 0:
            raise DecodeError(f"Image has invalid dimensions {width}x{height}")

        return width, height
