"""
Pydantic models for the price list API.

Response field names follow the public JSON contract (``priceList``), so
models use aliases where the Python name differs.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ExtractUrlRequest(BaseModel):
    """Body of POST /api/extract-url."""

    url: str | None = Field(
        default=None,
        description="Address of the page to render and extract",
        examples=["https://example.com/prices"],
    )


class ExtractionResponse(BaseModel):
    """Successful extraction result."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(default=True)
    price_list: str = Field(
        ...,
        alias="priceList",
        description="Price list in Markdown format",
    )


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""

    error: str
    detail: Any | None = None


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str = Field(default="ok")
