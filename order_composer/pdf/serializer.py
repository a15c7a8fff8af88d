"""
Serialization of a composed document to PDF bytes.
"""

import fitz  # PyMuPDF

from ..core.config import Config
from ..core.errors import SerializationError
from ..utils.logging_config import get_pdf_logger
from .page_composer import OutputDocument


class Serializer:
    """Writes an OutputDocument to bytes, all or nothing."""

    def __init__(self):
        self.logger = get_pdf_logger()

    def finalize(self, output: OutputDocument) -> bytes:
        """
        Serialize the composed document.

        The result is re-opened and its page count checked before it is
        returned.

        Raises:
            SerializationError: If the document cannot be written or the
                written bytes do not round-trip
        """
        if output.document.is_closed:
            raise SerializationError("Output document is already closed")

        expected_pages = output.page_count
        try:
            output.document.set_metadata({
                'producer': Config.PDF_PRODUCER,
                'creator': Config.PDF_CREATOR,
            })
            pdf_bytes = output.document.tobytes(**Config.SAVE_OPTIONS)
        except Exception as e:
            raise SerializationError(f"Cannot serialize composed document: {e}") from e

        try:
            with fitz.open(stream=pdf_bytes, filetype="pdf") as check_doc:
                written_pages = check_doc.page_count
        except Exception as e:
            raise SerializationError(f"Serialized document does not parse: {e}") from e

        if written_pages != expected_pages:
            raise SerializationError(
                f"Serialized document has {written_pages} page(s), expected {expected_pages}")

        self.logger.info("  > Serialized %d page(s), %.1f KB", written_pages, len(pdf_bytes) / 1024)
        return pdf_bytes
