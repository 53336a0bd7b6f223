"""API middleware: CORS, request logging, and error handling.

Middleware is a stack (last added, first executed).  ``create_app`` adds
:class:`ErrorHandlingMiddleware` before :class:`RequestLoggingMiddleware`,
so request logging sees the final status code after an application error
has been turned into a JSON body.
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from notemaster.api.schemas import ErrorResponse
from notemaster.utils.errors import NoteMasterError
from notemaster.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

# Exception class name -> HTTP status.  User-actionable rejections get 4xx,
# provider and store failures a 502 so clients know to try again later.
_STATUS_BY_ERROR: dict[str, int] = {
    "ValueError": 400,
    "UnsupportedFormatError": 415,
    "ExtractionError": 422,
    "UploadTooLargeError": 413,
    "DuplicateDocumentError": 409,
    "DocumentNotFoundError": 404,
    "EmbeddingProviderError": 502,
    "IndexUpsertError": 502,
    "IndexQueryError": 502,
    "IndexDeleteError": 502,
    "BlobStoreError": 502,
    "DocumentStoreError": 502,
}


def status_for_error(error_type: str | None) -> int:
    """Return the HTTP status for an error class name (500 when unknown)."""
    return _STATUS_BY_ERROR.get(error_type or "", 500)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware.  Defaults to ``["*"]`` for development."""
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn uncaught ``NoteMasterError`` subclasses into JSON error bodies.

    The client sees the exception class name and message; provider details
    and stack traces stay in the server log.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except NoteMasterError as exc:
            error_type = type(exc).__name__
            _logger.error(
                "application_error",
                error_type=error_type,
                message=exc.message,
                provider=exc.provider_name,
                path=str(request.url.path),
            )
            body = ErrorResponse(error=error_type, detail=exc.message)
            return JSONResponse(
                status_code=status_for_error(error_type),
                content=body.model_dump(),
            )
