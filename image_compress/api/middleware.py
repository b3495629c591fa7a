"""
HTTP middleware: request ids, access logging, body size limits and request timeouts.
"""
import time
import uuid
import asyncio
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

# Set up logging
logger = logging.getLogger("image_compress.access")

REQUEST_ID_HEADER = "X-Request-ID"


def add_request_logging(app: FastAPI) -> None:
    """Tag each request with an id and log method, path, status and duration."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            f"{request.method} {request.url.path} {response.status_code} "
            f"{duration_ms:.1f}ms request_id={request_id}"
        )
        return response


def add_request_timeout(app: FastAPI, timeout: float) -> None:
    """Abort requests that run longer than ``timeout`` seconds with a 504."""

    @app.middleware("http")
    async def enforce_timeout(request: Request, call_next):
        try:
            return await asyncio.wait_for(call_next(request), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Request timed out after {timeout}s: {request.method} {request.url.path}")
            return JSONResponse(
                status_code=504,
                content={"detail": "Request timed out", "error": "timeout"}
            )


class BodySizeLimitMiddleware:
    """
    Reject request bodies larger than ``max_body_size`` bytes with a 413.

    A declared ``Content-Length`` over the limit is refused before the body is
    read. Bodies without one (chunked uploads) are counted as they stream in
    and the read is aborted once the limit is passed.
    """

    def __init__(self, app: ASGIApp, max_body_size: int):
        self.app = app
        self.max_body_size = max_body_size

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length", "")
        if content_length.isdigit() and int(content_length) > self.max_body_size:
            logger.warning(
                f"Request body of {content_length} bytes rejected "
                f"(limit {self.max_body_size}): {scope['method']} {scope['path']}"
            )
            response = JSONResponse(
                status_code=413,
                content={
                    "detail": f"Request body exceeds {self.max_body_size} bytes",
                    "error": "request_too_large",
                }
            )
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_size:
                    logger.warning(
                        f"Streamed request body passed {self.max_body_size} bytes: "
                        f"{scope['method']} {scope['path']}"
                    )
                    raise HTTPException(
                        status_code=413,
                        detail=f"Request body exceeds {self.max_body_size} bytes"
                    )
            return message

        await self.app(scope, limited_receive, send)


def add_body_size_limit(app: FastAPI, max_body_size: int) -> None:
    """Bound the size of every request body."""
    app.add_middleware(BodySizeLimitMiddleware, max_body_size=max_body_size)


def internal_error_response(exc: Exception) -> JSONResponse:
    """Log an unexpected exception and build the generic 500 response."""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred", "error": "internal_error"}
    )


def add_unhandled_errors(app: FastAPI) -> None:
    """Turn exceptions escaping a route into a 500 inside the middleware stack."""

    @app.middleware("http")
    async def catch_unhandled(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            return internal_error_response(e)
