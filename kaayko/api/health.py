"""Health check endpoints.

Provides endpoints for monitoring service health and readiness.
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check service health.

    Returns:
        Health status with service name and version.
    """
    from kaayko.infrastructure.config import settings

    return HealthResponse(
        status="healthy",
        service="kaayko-store",
        version=settings.api_version,
    )


@router.get("/ready")
async def readiness_check() -> JSONResponse:
    """Check if the product view has finished its first load.

    Returns:
        Readiness status with the view phase; 503 until the first load
        completes.
    """
    from kaayko.application.product_view_state import get_view_state_coordinator
    from kaayko.domain.state_machines import ViewPhase

    state = get_view_state_coordinator().state
    ready = state.phase is ViewPhase.READY
    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if ready else "starting",
            "phase": state.phase.value,
            "error_message": state.error_message,
        },
    )
