"""
AI service for price list extraction.

Sends document content to the OpenAI chat completions API with a fixed
instruction and returns the Markdown the model produces.
"""

import base64
import logging
import os
from dataclasses import dataclass
from typing import Any, Protocol

from ..errors import AIServiceError

logger = logging.getLogger(__name__)


# =============================================================================
# Prompts
# =============================================================================

SYSTEM_PROMPT = "You are a helpful assistant that extracts price lists from documents."

USER_PROMPT = "Extract a price list from this document in Markdown format:"

MOCK_PRICE_LIST = """| Item | Price |
|------|-------|
| MOCK-ITEM-001 | $10.00 |
| MOCK-ITEM-002 | $25.50 |

_DEVELOPMENT MODE: Using mock data. Set OPENAI_API_KEY for real extraction._"""


@dataclass
class DocumentContent:
    """
    Document as handed to an extractor.

    ``text`` is set when the PDF text layer was extracted; otherwise the raw
    PDF bytes are sent to the model.
    """

    filename: str
    pdf_bytes: bytes
    text: str | None = None


class Extractor(Protocol):
    """Anything that can turn a document into a Markdown price list."""

    async def extract_price_list(self, document: DocumentContent) -> str: ...


def build_messages(document: DocumentContent) -> list[dict[str, Any]]:
    """Build the chat messages for one extraction request."""
    if document.text is not None:
        user_content: str | list[dict[str, Any]] = f"{USER_PROMPT}\n\n{document.text}"
    else:
        encoded = base64.b64encode(document.pdf_bytes).decode("utf-8")
        user_content = [
            {"type": "text", "text": USER_PROMPT},
            {
                "type": "file",
                "file": {
                    "filename": document.filename,
                    "file_data": f"data:application/pdf;base64,{encoded}",
                },
            },
        ]

    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user_content},
    ]


class AIService:
    """
    Service for AI-powered price list extraction.

    Uses OpenAI's GPT-4o model. Without an API key the service runs in mock
    mode and returns a placeholder table.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4o",
        max_tokens: int = 4096,
        timeout: float = 120.0,
        use_mock: bool = False,
    ):
        """
        Initialize the AI service.

        Args:
            api_key: OpenAI API key. If None, reads OPENAI_API_KEY.
            model: OpenAI model to use.
            max_tokens: Upper bound on generated tokens.
            timeout: Request timeout in seconds.
            use_mock: If True, return mock data instead of calling OpenAI.
        """
        if api_key is None:
            api_key = os.getenv("OPENAI_API_KEY")

        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.use_mock = use_mock or not self.api_key
        self._client = None

        if self.use_mock:
            logger.warning(
                "AI Service running in MOCK MODE. Set OPENAI_API_KEY in .env for real extraction."
            )

    @property
    def client(self):
        """Lazy-load the OpenAI client."""
        if self._client is None:
            if not self.api_key:
                raise AIServiceError(
                    "OpenAI API key not provided. Set OPENAI_API_KEY environment variable."
                )
            from openai import AsyncOpenAI

            self._client = AsyncOpenAI(api_key=self.api_key, timeout=self.timeout)
        return self._client

    async def extract_price_list(self, document: DocumentContent) -> str:
        """
        Extract a Markdown price list from a document.

        Args:
            document: Extracted text or raw PDF bytes of the document.

        Returns:
            Text of the first response choice.

        Raises:
            AIServiceError: If the API call fails or returns no content.
        """
        if self.use_mock:
            logger.info("Returning mock price list for %s", document.filename)
            return MOCK_PRICE_LIST

        mode = "text" if document.text is not None else "file"
        logger.info(
            "Requesting price list for %s (model=%s, mode=%s)",
            document.filename,
            self.model,
            mode,
        )

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=build_messages(document),
                max_tokens=self.max_tokens,
            )
            if not response.choices:
                raise AIServiceError("No choices returned")
            content = response.choices[0].message.content
        except Exception as e:
            logger.error("Price list extraction failed: %s", e)
            raise AIServiceError(f"Failed to extract price list: {e}") from e

        if content is None:
            raise AIServiceError("Failed to extract price list: empty response")

        logger.info(
            "Received price list for %s (%d characters)",
            document.filename,
            len(content),
        )
        return content
