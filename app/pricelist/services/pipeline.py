"""
Extraction pipeline: acquire a PDF, prepare its content, extract a price list.

Each call owns exactly one temporary document, removed before the call
returns or raises.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import UploadFile

from ..config import Settings
from ..errors import PipelineError, ValidationError
from .ai_service import DocumentContent, Extractor
from .documents import TemporaryDocument, save_upload, temporary_document, write_document
from .pdf_service import PDFService, is_pdf
from .renderer import Renderer

logger = logging.getLogger(__name__)


class PriceListPipeline:
    """Sequences acquisition and extraction for one request at a time."""

    def __init__(
        self,
        renderer: Renderer,
        extractor: Extractor,
        settings: Settings,
        pdf_service: PDFService | None = None,
    ):
        self.renderer = renderer
        self.extractor = extractor
        self.settings = settings
        self.pdf_service = pdf_service or PDFService()

    @property
    def upload_dir(self) -> Path:
        return self.settings.upload_dir

    @asynccontextmanager
    async def acquire(self, url: str) -> AsyncIterator[TemporaryDocument]:
        """Render ``url`` and hold the PDF as a temporary document for the scope."""
        pdf_bytes = await self.renderer.render_to_pdf(url)
        await asyncio.to_thread(self.upload_dir.mkdir, parents=True, exist_ok=True)
        document = await write_document(self.upload_dir, pdf_bytes, prefix="temp")
        async with temporary_document(document):
            yield document

    async def extract_from_url(self, url: str) -> str:
        """
        Render a web page and extract its price list.

        Raises:
            PipelineError: If rendering, text extraction or the AI call fails,
                or the pipeline exceeds its time budget.
        """

        async def run() -> str:
            async with self.acquire(url) as document:
                return await self._extract(document)

        return await self._with_timeout(run())

    async def extract_from_upload(self, upload: UploadFile) -> str:
        """
        Save an uploaded PDF and extract its price list.

        Raises:
            ValidationError: If the upload is empty, too large or not a PDF.
            PipelineError: If text extraction or the AI call fails, or the
                pipeline exceeds its time budget.
        """

        async def run() -> str:
            await asyncio.to_thread(self.upload_dir.mkdir, parents=True, exist_ok=True)
            saved = await save_upload(upload, self.upload_dir, self.settings.max_upload_bytes)
            async with temporary_document(saved) as document:
                if document.size == 0:
                    raise ValidationError("Empty file provided")
                header = await asyncio.to_thread(_read_header, document.path)
                if not is_pdf(header):
                    raise ValidationError("Only PDF files are accepted")
                return await self._extract(document)

        return await self._with_timeout(run())

    async def prepare_content(self, document: TemporaryDocument) -> DocumentContent:
        """Read the document and, in text mode, extract its text layer."""
        pdf_bytes = await asyncio.to_thread(document.read_bytes)
        content = DocumentContent(filename=document.filename, pdf_bytes=pdf_bytes)

        if self.settings.extraction_mode == "text":
            content.text = await asyncio.to_thread(self.pdf_service.extract_text, pdf_bytes)
            if not content.text:
                logger.warning("No text layer found in %s", document.filename)

        return content

    async def _extract(self, document: TemporaryDocument) -> str:
        content = await self.prepare_content(document)
        return await self.extractor.extract_price_list(content)

    async def _with_timeout(self, coro) -> str:
        try:
            return await asyncio.wait_for(coro, timeout=self.settings.pipeline_timeout_seconds)
        except asyncio.TimeoutError as e:
            raise PipelineError(
                f"Pipeline timed out after {self.settings.pipeline_timeout_seconds}s"
            ) from e


def _read_header(path: Path, size: int = 4) -> bytes:
    with path.open("rb") as handle:
        return handle.read(size)
