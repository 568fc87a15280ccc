"""Request context middleware for the Kaayko store API.

Every request gets a correlation ID, a log context naming the store
backend it is served from, one access log line, and the standard
error envelope if a handler blows up.
"""

import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from kaayko.infrastructure.config import settings

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"


def internal_error_response(request_id: str) -> JSONResponse:
    """Build the 500 envelope for an unhandled exception."""
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "INTERNAL_ERROR",
            "message": "An internal error occurred",
            "details": [],
            "request_id": request_id,
        },
    )


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind request context, log the request and contain failures.

    The request ID is taken from ``X-Request-ID`` when the client sends
    one and generated otherwise. It is stored on ``request.state`` for
    the exception handlers and echoed on every response, error
    responses included.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            store_backend=settings.store_backend,
        )

        started = time.perf_counter()
        try:
            try:
                response = await call_next(request)
            except Exception as e:
                logger.exception(
                    "Unhandled exception",
                    path=request.url.path,
                    method=request.method,
                    error=str(e),
                )
                response = internal_error_response(request_id)

            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
        finally:
            structlog.contextvars.unbind_contextvars("request_id", "store_backend")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def setup_middleware(app: FastAPI) -> None:
    """Install the request context middleware.

    Args:
        app: FastAPI application instance.
    """
    app.add_middleware(RequestContextMiddleware)
