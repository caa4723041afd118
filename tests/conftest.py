"""Pytest configuration and fixtures."""

import io
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from pypdf import PdfWriter

from app.pricelist.config import Settings
from app.pricelist.errors import DocumentAcquisitionError
from app.pricelist.main import create_app
from app.pricelist.security import RateLimiter
from app.pricelist.services.ai_service import DocumentContent

TEST_TOKEN = "test-token"

PRICE_LIST = "| Item | Price |\n|------|-------|\n| Widget | $9.99 |"


def make_pdf_bytes(pages: int = 1) -> bytes:
    """Build a small valid PDF with blank pages."""
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=612, height=792)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


class FakeRenderer:
    """Renderer that returns canned bytes and records requested URLs."""

    def __init__(self, pdf_bytes: bytes | None = None, error: Exception | None = None):
        self.pdf_bytes = pdf_bytes if pdf_bytes is not None else make_pdf_bytes()
        self.error = error
        self.calls: list[str] = []

    async def render_to_pdf(self, url: str) -> bytes:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.pdf_bytes


class FakeExtractor:
    """Extractor that returns a canned price list and records documents."""

    def __init__(self, result: str = PRICE_LIST, error: Exception | None = None):
        self.result = result
        self.error = error
        self.documents: list[DocumentContent] = []

    async def extract_price_list(self, document: DocumentContent) -> str:
        self.documents.append(document)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    """Directory for temporary documents."""
    return tmp_path / "uploads"


@pytest.fixture
def settings(upload_dir: Path) -> Settings:
    """Settings isolated from the environment."""
    return Settings(
        bearer_token=TEST_TOKEN,
        openai_api_key="",
        upload_dir=upload_dir,
        extraction_mode="text",
        max_upload_bytes=50 * 1024 * 1024,
        rate_limit_max_requests=100,
        rate_limit_window_seconds=900,
    )


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def rate_limiter(settings: Settings) -> RateLimiter:
    return RateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )


@pytest.fixture
def client(
    settings: Settings,
    renderer: FakeRenderer,
    extractor: FakeExtractor,
    rate_limiter: RateLimiter,
) -> Generator[TestClient, None, None]:
    """Create a test client for an application wired with fakes."""
    app = create_app(
        settings=settings,
        renderer=renderer,
        extractor=extractor,
        rate_limiter=rate_limiter,
    )
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {TEST_TOKEN}"}


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """A minimal valid single-page PDF."""
    return make_pdf_bytes()


@pytest.fixture
def invalid_file_bytes() -> bytes:
    """Create invalid (non-PDF) file bytes for testing."""
    return b"This is not a PDF file"


@pytest.fixture
def failing_renderer() -> FakeRenderer:
    return FakeRenderer(error=DocumentAcquisitionError("Failed to acquire document"))
