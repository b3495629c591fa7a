"""
API module for the image compression service.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from image_compress.api.compress import router as compress_router
from image_compress.api.dependencies import ServiceContainer
from image_compress.api.health import router as health_router
from image_compress.api.middleware import (
    add_body_size_limit,
    add_request_logging,
    add_request_timeout,
    add_unhandled_errors,
    internal_error_response
)
from image_compress.config import SERVICE_VERSION, Settings
from image_compress.exceptions import ImageCompressError
from image_compress.models.compression import ErrorResponse

# Set up logging
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Service settings (read from the environment when omitted)

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Image Compress API {SERVICE_VERSION} starting")
        settings.log_summary()
        yield
        logger.info("Image Compress API shutting down")

    app = FastAPI(
        title="Image Compress API",
        description="""
    API for compressing images:
    - Single image compression to JPEG, PNG or WEBP at a chosen quality
    - Batch compression returned as a ZIP archive
    - Image inspection (dimensions and detected format)

    All processing happens in memory.
    """,
        version=SERVICE_VERSION,
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.services = ServiceContainer(settings)

    # The last middleware added runs first, so CORS headers reach every response
    add_unhandled_errors(app)
    add_request_timeout(app, settings.request_timeout)
    add_body_size_limit(app, settings.request_body_limit)
    add_request_logging(app)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(health_router)
    app.include_router(compress_router)

    @app.exception_handler(ImageCompressError)
    async def image_compress_exception_handler(request: Request, exc: ImageCompressError):
        """Translate service errors into JSON responses with their status code."""
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}", exc_info=exc)
        else:
            logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
        body = ErrorResponse(detail=exc.message, error=exc.code, index=exc.index)
        return JSONResponse(
            status_code=exc.status_code,
            content=body.model_dump(exclude_none=True)
        )

    # Global exception handler, for failures outside the middleware stack
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler for unexpected errors."""
        return internal_error_response(exc)

    return app


__all__ = ['create_app']
