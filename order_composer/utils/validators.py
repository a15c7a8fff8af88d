"""
Validation utilities for input files and in-memory buffers.
"""

import io
import os
from typing import Any, Dict

import fitz  # PyMuPDF
from PIL import Image, UnidentifiedImageError

from ..core.config import Config


class Validators:
    """Utility class for validating files, paths and buffers."""

    @staticmethod
    def validate_input_file(input_path: str) -> Dict[str, Any]:
        """
        Validate an input file and guess its media type from the extension.

        Args:
            input_path: Path to a PDF, JPEG or PNG file

        Returns:
            Dict with validation results including the media type and size
        """
        result = {
            'valid': False,
            'resolved_path': None,
            'media_type': None,
            'error_message': None,
            'file_size_mb': 0.0
        }

        resolved_path = os.path.abspath(input_path)

        if not os.path.exists(resolved_path):
            result['error_message'] = f"File not found: {resolved_path}"
            return result

        if not os.path.isfile(resolved_path):
            result['error_message'] = f"Path is not a file: {resolved_path}"
            return result

        extension = os.path.splitext(resolved_path)[1].lower()
        media_type = Config.EXTENSION_MEDIA_TYPES.get(extension)
        if media_type is None:
            result['error_message'] = f"Unsupported file type '{extension}': {resolved_path}"
            return result

        try:
            result['file_size_mb'] = os.path.getsize(resolved_path) / (1024 * 1024)
        except OSError:
            result['file_size_mb'] = 0.0

        result['valid'] = True
        result['resolved_path'] = resolved_path
        result['media_type'] = media_type
        return result

    @staticmethod
    def validate_output_path(output_path: str) -> Dict[str, Any]:
        """
        Validate an output file path.

        Args:
            output_path: Desired output file path

        Returns:
            Dict with validation results
        """
        result = {
            'valid': False,
            'resolved_path': None,
            'error_message': None,
            'directory_exists': False,
            'file_exists': False
        }

        resolved_path = os.path.abspath(output_path)
        directory = os.path.dirname(resolved_path)

        if not resolved_path.lower().endswith('.pdf'):
            result['error_message'] = f"Output file must have a .pdf extension: {resolved_path}"
            return result

        if not os.path.isdir(directory):
            try:
                os.makedirs(directory, exist_ok=True)
            except OSError as e:
                result['error_message'] = f"Cannot create output directory: {e}"
                return result
        result['directory_exists'] = True

        result['file_exists'] = os.path.exists(resolved_path)
        if not os.access(directory, os.W_OK):
            result['error_message'] = f"Cannot write to output location: {directory}"
            return result

        result['valid'] = True
        result['resolved_path'] = resolved_path
        return result

    @staticmethod
    def validate_pdf_bytes(data: bytes) -> Dict[str, Any]:
        """
        Check that a buffer opens as a PDF and report its page count.

        A PDF with no pages is valid; the composer gives it a blank page.

        Returns:
            Dict with 'valid', 'page_count' and 'error_message'
        """
        result = {
            'valid': False,
            'page_count': 0,
            'error_message': None
        }

        if not data:
            result['error_message'] = "PDF buffer is empty"
            return result

        try:
            with fitz.open(stream=data, filetype="pdf") as pdf_doc:
                result['page_count'] = pdf_doc.page_count
        except Exception as e:
            result['error_message'] = f"Invalid PDF data: {e}"
            return result

        result['valid'] = True
        return result

    @staticmethod
    def validate_image_bytes(data: bytes) -> Dict[str, Any]:
        """
        Check that a buffer is a JPEG or PNG and report its header size.

        Returns:
            Dict with 'valid', 'media_type', 'width', 'height' and 'error_message'
        """
        result = {
            'valid': False,
            'media_type': None,
            'width': 0,
            'height': 0,
            'error_message': None
        }

        if not data:
            result['error_message'] = "Image buffer is empty"
            return result

        try:
            with Image.open(io.BytesIO(data)) as img:
                image_format = img.format
                result['width'], result['height'] = img.size
        except Image.DecompressionBombError as e:
            result['error_message'] = f"Image is too large: {e}"
            return result
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            result['error_message'] = f"Invalid image data: {e}"
            return result

        if image_format == 'JPEG':
            result['media_type'] = 'image/jpeg'
        elif image_format == 'PNG':
            result['media_type'] = 'image/png'
        else:
            result['error_message'] = f"Unsupported image format: {image_format}"
            return result

        result['valid'] = True
        return result
