"""
Web page to PDF rendering with a headless browser (Playwright).
"""

import logging
from typing import Protocol

from playwright.async_api import async_playwright

from ..errors import DocumentAcquisitionError

logger = logging.getLogger(__name__)


class Renderer(Protocol):
    """Anything that can turn a URL into PDF bytes."""

    async def render_to_pdf(self, url: str) -> bytes: ...


class PlaywrightRenderer:
    """
    Renders pages with a fresh headless Chromium per call.

    No browser is shared between requests; each call launches its own
    instance and closes it before returning or raising.
    """

    def __init__(
        self,
        navigation_timeout_ms: int = 30_000,
        page_format: str = "A4",
    ):
        """
        Initialize the renderer.

        Args:
            navigation_timeout_ms: Upper bound for reaching network idle.
            page_format: Paper format passed to the PDF printer.
        """
        self.navigation_timeout_ms = navigation_timeout_ms
        self.page_format = page_format

    async def render_to_pdf(self, url: str) -> bytes:
        """
        Load ``url`` and print it to PDF.

        Raises:
            DocumentAcquisitionError: On navigation timeout, network failure
                or render failure.
        """
        logger.info("Rendering %s to PDF", url)
        try:
            async with async_playwright() as playwright:
                browser = await playwright.chromium.launch(headless=True)
                try:
                    context = await browser.new_context()
                    page = await context.new_page()
                    await page.goto(
                        url,
                        wait_until="networkidle",
                        timeout=self.navigation_timeout_ms,
                    )
                    pdf_bytes = await page.pdf(
                        format=self.page_format,
                        print_background=True,
                    )
                finally:
                    await browser.close()
        except Exception as e:
            logger.error("Rendering %s failed: %s", url, e)
            raise DocumentAcquisitionError("Failed to acquire document") from e

        logger.info("Rendered %s (%d bytes)", url, len(pdf_bytes))
        return pdf_bytes
