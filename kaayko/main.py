"""Kaayko store API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from kaayko.api.cart import router as cart_router
from kaayko.api.health import router as health_router
from kaayko.api.middleware import setup_middleware
from kaayko.api.products import router as products_router
from kaayko.api.products import tags_router
from kaayko.application.product_view_state import get_view_state_coordinator
from kaayko.domain.exceptions import (
    CartLineNotFoundError,
    DomainError,
    InvalidSelectionError,
    ProductNotFoundError,
    RemoteUnavailableError,
)
from kaayko.infrastructure.config import settings
from kaayko.infrastructure.logging import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    configure_logging(settings)
    logger.info(
        "Starting Kaayko store API",
        version=settings.api_version,
        debug=settings.debug,
        store_backend=settings.store_backend,
        realtime_updates=settings.realtime_updates,
    )

    coordinator = get_view_state_coordinator()
    await coordinator.start()
    logger.info(
        "Product view started",
        phase=coordinator.state.phase.value,
        product_count=len(coordinator.state.all_products),
    )

    yield

    logger.info("Shutting down Kaayko store API")
    coordinator.stop()
    await coordinator.repository.images.close()


app = FastAPI(
    title="Kaayko Store API",
    description="Product catalog, voting and cart backend for the Kaayko store",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request context (request ID, log context, error envelope)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(products_router)
app.include_router(tags_router)
app.include_router(cart_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


DOMAIN_ERROR_STATUS: dict[type[DomainError], tuple[int, str]] = {
    ProductNotFoundError: (status.HTTP_404_NOT_FOUND, "PRODUCT_NOT_FOUND"),
    CartLineNotFoundError: (status.HTTP_404_NOT_FOUND, "CART_LINE_NOT_FOUND"),
    InvalidSelectionError: (status.HTTP_422_UNPROCESSABLE_ENTITY, "INVALID_SELECTION"),
    RemoteUnavailableError: (status.HTTP_503_SERVICE_UNAVAILABLE, "REMOTE_UNAVAILABLE"),
}


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", [])
    else:
        error_code = "ERROR"
        message = str(detail)
        details = []

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details,
            "request_id": request_id,
        },
    )


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Handle domain errors that escaped a router."""
    request_id = getattr(request.state, "request_id", None)
    status_code, error_code = status.HTTP_400_BAD_REQUEST, "DOMAIN_ERROR"
    for error_type, mapping in DOMAIN_ERROR_STATUS.items():
        if isinstance(exc, error_type):
            status_code, error_code = mapping
            break

    logger.warning(
        "Domain error in handler",
        path=request.url.path,
        error_code=error_code,
        error=exc.message,
    )

    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": exc.message,
            "details": [],
            "request_id": request_id,
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )

    return JSONResponse(
        status_code=500,
        content={
            "error_code": "INTERNAL_ERROR",
            "message": "An internal error occurred",
            "details": [],
            "request_id": request_id,
        },
    )
