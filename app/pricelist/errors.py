"""
Exceptions raised by the price list service.

Every error carries the HTTP status it maps to; the application's exception
handler renders them as ``{"error": message}`` JSON bodies.
"""

from typing import Any


class APIError(Exception):
    """Base class for errors that become an HTTP error response."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        detail: Any = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.detail = detail
        self.headers = headers


class ValidationError(APIError):
    """Raised for missing or invalid request input, including blocked URLs."""

    status_code = 400


class PayloadTooLargeError(ValidationError):
    """Raised when an upload exceeds the configured size limit."""

    status_code = 413


class AuthError(APIError):
    """Raised when bearer authentication fails (401 missing, 403 invalid)."""

    status_code = 401


class RateLimitError(APIError):
    """Raised when a client exceeds its request quota."""

    status_code = 429


class PipelineError(APIError):
    """Raised when acquiring or extracting a document fails."""

    status_code = 500


class DocumentAcquisitionError(PipelineError):
    """Raised when a URL cannot be rendered to PDF."""

    pass


class PDFExtractionError(PipelineError):
    """Raised when text cannot be extracted from a PDF."""

    pass


class AIServiceError(PipelineError):
    """Raised when the AI completion call fails."""

    pass
