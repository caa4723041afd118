"""
Services package for the price list extraction application.

Contains:
- documents: temporary document lifecycle
- pdf_service: PDF text extraction
- renderer: headless browser page to PDF rendering
- ai_service: OpenAI integration for price list extraction
- pipeline: orchestration of the above for one request
"""

from .ai_service import AIService, DocumentContent, Extractor
from .pdf_service import PDFService
from .pipeline import PriceListPipeline
from .renderer import PlaywrightRenderer, Renderer

__all__ = [
    "AIService",
    "DocumentContent",
    "Extractor",
    "PDFService",
    "PlaywrightRenderer",
    "PriceListPipeline",
    "Renderer",
]
