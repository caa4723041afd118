"""
FastAPI application for the price list extraction service.

Provides endpoints for:
- Extracting a price list from a web page URL
- Extracting a price list from an uploaded PDF
- Health checks
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from . import __version__
from .config import Settings, get_settings
from .dependencies import rate_limit_headers
from .errors import APIError
from .models import HealthResponse
from .routers import extract
from .security import RateLimiter
from .services.ai_service import AIService, Extractor
from .services.pdf_service import PDFService
from .services.pipeline import PriceListPipeline
from .services.renderer import PlaywrightRenderer, Renderer

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    renderer: Renderer | None = None,
    extractor: Extractor | None = None,
    rate_limiter: RateLimiter | None = None,
) -> FastAPI:
    """
    Build the application with explicitly constructed collaborators.

    Any collaborator left as None is built from ``settings``.
    """
    settings = settings or get_settings()
    renderer = renderer or PlaywrightRenderer(
        navigation_timeout_ms=settings.navigation_timeout_ms,
    )
    extractor = extractor or AIService(
        api_key=settings.openai_api_key or "",
        model=settings.openai_model,
        max_tokens=settings.openai_max_tokens,
        timeout=settings.openai_timeout_seconds,
    )
    rate_limiter = rate_limiter or RateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler for startup/shutdown."""
        logger.info("Starting Price List Extraction Service...")
        settings.upload_dir.mkdir(parents=True, exist_ok=True)
        if not settings.bearer_token:
            logger.warning("BEARER_TOKEN is not set; all API requests will be rejected")
        logger.info("Temporary documents stored in %s", settings.upload_dir)
        yield
        logger.info("Shutting down Price List Extraction Service...")

    app = FastAPI(
        title="Price List Extraction API",
        description="Extract Markdown price lists from web pages and PDFs using AI",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.rate_limiter = rate_limiter
    app.state.pipeline = PriceListPipeline(
        renderer=renderer,
        extractor=extractor,
        settings=settings,
        pdf_service=PDFService(),
    )

    # =========================================================================
    # Health Endpoints
    # =========================================================================

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="ok")

    # =========================================================================
    # Include Routers
    # =========================================================================

    app.include_router(extract.router)

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        """Render service errors as JSON error bodies."""
        content = {"error": exc.message}
        if exc.detail is not None:
            content["detail"] = exc.detail
        return JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers={**rate_limit_headers(request), **(exc.headers or {})},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        """Handle malformed request bodies."""
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": "Invalid request body",
                "detail": [
                    {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
                    for err in exc.errors()
                ],
            },
            headers=rate_limit_headers(request),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        """Handle anything that escaped the route handlers."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    return app


app = create_app()
