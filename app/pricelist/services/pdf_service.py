"""
PDF processing service using pypdf.

Handles text extraction from PDF documents for AI processing.
"""

import io
import logging
from typing import BinaryIO

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from ..errors import PDFExtractionError

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"


def is_pdf(data: bytes) -> bool:
    """Check the PDF header magic bytes."""
    return data[:4] == PDF_MAGIC


class PDFService:
    """
    Service for PDF processing operations.

    Uses pypdf to read PDF pages and pull out their text layer.
    """

    def __init__(self, page_separator: str = "\n\n"):
        """
        Initialize the PDF service.

        Args:
            page_separator: Text placed between the text of consecutive pages.
        """
        self.page_separator = page_separator

    def extract_text(self, file_bytes: bytes | BinaryIO) -> str:
        """
        Extract the plain text of every page.

        Args:
            file_bytes: PDF file as bytes or file-like object.

        Returns:
            Text of all pages, pages without text skipped.

        Raises:
            PDFExtractionError: If the file is empty, not a PDF, or unreadable.
        """
        # Ensure we have bytes
        if hasattr(file_bytes, "read"):
            pdf_bytes = file_bytes.read()
        else:
            pdf_bytes = file_bytes

        if not pdf_bytes:
            raise PDFExtractionError("Empty PDF file provided")

        if not is_pdf(pdf_bytes):
            raise PDFExtractionError(
                "Invalid PDF file: does not start with PDF header"
            )

        try:
            reader = PdfReader(io.BytesIO(pdf_bytes))
            parts: list[str] = []
            for page in reader.pages:
                text = (page.extract_text() or "").strip()
                if text:
                    parts.append(text)

        except PdfReadError as e:
            logger.error("PDF read error: %s", e)
            raise PDFExtractionError(f"Invalid or corrupted PDF file: {e}") from e

        except Exception as e:
            logger.exception("Unexpected error during PDF text extraction")
            raise PDFExtractionError(f"PDF text extraction failed: {e}") from e

        logger.info(
            "Extracted %d characters from %d page(s)",
            sum(len(p) for p in parts),
            len(reader.pages),
        )
        return self.page_separator.join(parts)
