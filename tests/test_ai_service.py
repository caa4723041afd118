"""Tests for the AI price list extraction service."""

import base64
import logging
from types import SimpleNamespace

import pytest

from app.pricelist.errors import AIServiceError
from app.pricelist.services.ai_service import (
    MOCK_PRICE_LIST,
    SYSTEM_PROMPT,
    USER_PROMPT,
    AIService,
    DocumentContent,
    build_messages,
)


class FakeCompletions:
    """Stands in for ``client.chat.completions``."""

    def __init__(self, content: str | None = "| Item | Price |", error: Exception | None = None, choices=True):
        self.content = content
        self.error = error
        self.choices = choices
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if not self.choices:
            return SimpleNamespace(choices=[])
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def make_service(completions: FakeCompletions, **kwargs) -> AIService:
    service = AIService(api_key="test-key", **kwargs)
    service._client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return service


@pytest.fixture
def text_document() -> DocumentContent:
    return DocumentContent(filename="prices.pdf", pdf_bytes=b"%PDF-1.4", text="Widget $9.99")


@pytest.fixture
def file_document() -> DocumentContent:
    return DocumentContent(filename="prices.pdf", pdf_bytes=b"%PDF-1.4 raw")


class TestBuildMessages:
    """Tests for request message construction."""

    def test_text_mode_inlines_text(self, text_document: DocumentContent):
        messages = build_messages(text_document)

        assert messages[0] == {"role": "system", "content": SYSTEM_PROMPT}
        assert messages[1]["role"] == "user"
        assert messages[1]["content"] == f"{USER_PROMPT}\n\nWidget $9.99"

    def test_file_mode_embeds_pdf(self, file_document: DocumentContent):
        messages = build_messages(file_document)
        parts = messages[1]["content"]

        assert parts[0] == {"type": "text", "text": USER_PROMPT}
        assert parts[1]["type"] == "file"
        assert parts[1]["file"]["filename"] == "prices.pdf"
        data_url = parts[1]["file"]["file_data"]
        assert data_url.startswith("data:application/pdf;base64,")
        encoded = data_url.split(",", 1)[1]
        assert base64.b64decode(encoded) == b"%PDF-1.4 raw"

    def test_prompt_asks_for_markdown_price_list(self):
        assert "price list" in USER_PROMPT
        assert "Markdown" in USER_PROMPT


class TestAIServiceMock:
    """Tests for AI service in mock mode."""

    def test_mock_mode_enabled_without_api_key(self):
        """Empty string is falsy, so mock mode is enabled."""
        service = AIService(api_key="", use_mock=False)
        assert service.use_mock is True

    def test_mock_mode_enabled_explicitly(self):
        service = AIService(api_key="fake-key", use_mock=True)
        assert service.use_mock is True

    def test_real_mode_with_api_key(self):
        service = AIService(api_key="fake-key")
        assert service.use_mock is False

    @pytest.mark.asyncio
    async def test_extract_price_list_mock(self, text_document: DocumentContent):
        service = AIService(api_key="")
        result = await service.extract_price_list(text_document)
        assert result == MOCK_PRICE_LIST
        assert "DEVELOPMENT MODE" in result

    def test_client_without_key_raises(self):
        service = AIService(api_key="")
        with pytest.raises(AIServiceError):
            service.client


class TestAIServiceExtraction:
    """Tests for calls to the completion API."""

    @pytest.mark.asyncio
    async def test_returns_first_choice_content(self, text_document: DocumentContent):
        completions = FakeCompletions(content="| Widget | $9.99 |")
        service = make_service(completions, model="gpt-4o", max_tokens=1234)

        result = await service.extract_price_list(text_document)

        assert result == "| Widget | $9.99 |"
        call = completions.calls[0]
        assert call["model"] == "gpt-4o"
        assert call["max_tokens"] == 1234
        assert call["messages"] == build_messages(text_document)

    @pytest.mark.asyncio
    async def test_api_error_is_wrapped(self, text_document: DocumentContent):
        completions = FakeCompletions(error=ConnectionError("network down"))
        service = make_service(completions)

        with pytest.raises(AIServiceError) as exc_info:
            await service.extract_price_list(text_document)

        assert "Failed to extract price list" in str(exc_info.value)
        assert "network down" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_failure_logged_once_without_traceback(self, text_document: DocumentContent, caplog):
        service = make_service(FakeCompletions(error=ConnectionError("network down")))

        with caplog.at_level(logging.ERROR, logger="app.pricelist.services.ai_service"):
            with pytest.raises(AIServiceError):
                await service.extract_price_list(text_document)

        records = [r for r in caplog.records if r.name == "app.pricelist.services.ai_service"]
        assert len(records) == 1
        assert "network down" in records[0].getMessage()
        assert records[0].exc_info is None

    @pytest.mark.asyncio
    async def test_no_retry_on_failure(self, text_document: DocumentContent):
        completions = FakeCompletions(error=RuntimeError("500 from upstream"))
        service = make_service(completions)

        with pytest.raises(AIServiceError):
            await service.extract_price_list(text_document)

        assert len(completions.calls) == 1

    @pytest.mark.asyncio
    async def test_empty_choices_raise(self, text_document: DocumentContent):
        service = make_service(FakeCompletions(choices=False))
        with pytest.raises(AIServiceError):
            await service.extract_price_list(text_document)

    @pytest.mark.asyncio
    async def test_null_content_raises(self, text_document: DocumentContent):
        service = make_service(FakeCompletions(content=None))
        with pytest.raises(AIServiceError):
            await service.extract_price_list(text_document)
