"""
Router for price list extraction endpoints.

Handles:
- Extraction from a web page URL
- Extraction from an uploaded PDF
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile

from ..dependencies import (
    enforce_rate_limit,
    get_pipeline,
    limit_upload_size,
    require_bearer_token,
)
from ..errors import PipelineError, ValidationError
from ..models import ErrorResponse, ExtractionResponse, ExtractUrlRequest
from ..security import is_allowed_url
from ..services.pipeline import PriceListPipeline

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["extract"],
    dependencies=[Depends(enforce_rate_limit), Depends(require_bearer_token)],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


@router.post("/extract-url", response_model=ExtractionResponse)
async def extract_url(
    pipeline: Annotated[PriceListPipeline, Depends(get_pipeline)],
    payload: ExtractUrlRequest | None = None,
) -> ExtractionResponse:
    """
    Render a web page to PDF and extract its price list.

    The URL must be http(s) and must not point at loopback or private
    network hosts.
    """
    url = payload.url.strip() if payload is not None and payload.url else None
    if not url:
        raise ValidationError("URL is required")

    if not is_allowed_url(url):
        logger.warning("Rejected URL %r", url)
        raise ValidationError("Invalid URL or URL not allowed")

    try:
        price_list = await pipeline.extract_from_url(url)
    except Exception:
        logger.exception("Error processing URL %s", url)
        raise PipelineError("Failed to process URL")

    return ExtractionResponse(success=True, price_list=price_list)


@router.post(
    "/extract-file",
    response_model=ExtractionResponse,
    dependencies=[Depends(limit_upload_size)],
    responses={413: {"model": ErrorResponse}},
)
async def extract_file(
    pipeline: Annotated[PriceListPipeline, Depends(get_pipeline)],
    file: Annotated[UploadFile | None, File(description="PDF file to analyze")] = None,
) -> ExtractionResponse:
    """Extract the price list from an uploaded PDF."""
    if file is None:
        raise ValidationError("File is required")

    try:
        price_list = await pipeline.extract_from_upload(file)
    except ValidationError:
        raise
    except Exception:
        logger.exception("Error processing file %s", file.filename)
        raise PipelineError("Failed to process file")

    return ExtractionResponse(success=True, price_list=price_list)
