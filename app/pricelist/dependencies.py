"""
FastAPI dependencies.

Collaborators are constructed in ``create_app`` and stored on
``app.state``; these functions hand them to route handlers, and can be
overridden with ``app.dependency_overrides`` in tests.
"""

import logging
from typing import Annotated

from fastapi import Depends, Header, Request, Response

from .config import Settings
from .errors import PayloadTooLargeError
from .security import RateLimiter, RateLimitStatus, verify_bearer_token
from .services.pipeline import PriceListPipeline

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_pipeline(request: Request) -> PriceListPipeline:
    return request.app.state.pipeline


def client_key(request: Request) -> str:
    """Identify the calling client by address."""
    if request.client is None:
        return "unknown"
    return request.client.host


def enforce_rate_limit(
    request: Request,
    response: Response,
    limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
) -> None:
    """Count the request and attach ``RateLimit-*`` headers."""
    status = limiter.check(client_key(request))
    request.state.rate_limit = status
    response.headers.update(status.headers())


def rate_limit_headers(request: Request) -> dict[str, str]:
    """Headers for the request's rate-limit status, if it was counted."""
    status: RateLimitStatus | None = getattr(request.state, "rate_limit", None)
    if status is None:
        return {}
    return status.headers()


def require_bearer_token(
    settings: Annotated[Settings, Depends(get_app_settings)],
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Reject requests without the configured bearer token."""
    verify_bearer_token(authorization, settings.bearer_token)


def limit_upload_size(
    request: Request,
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> None:
    """Refuse uploads whose declared length is over the limit."""
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit():
        if int(content_length) > settings.max_upload_bytes:
            logger.warning(
                "Rejected upload of %s bytes (limit %d)",
                content_length,
                settings.max_upload_bytes,
            )
            raise PayloadTooLargeError("File too large")
