"""Health check router."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..core.dependencies import BookingStoreDependency, SettingsDependency
from ..core.config import Settings
from ..core.observability import SERVICE_NAME, SERVICE_VERSION
from ..schemas.health import HealthResponse, HealthStatus, StatusResponse
from ..services.booking_store import BookingStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/", response_model=StatusResponse)
async def root_status() -> JSONResponse:
    """Liveness probe used by the booking frontend."""
    return JSONResponse(
        status_code=200,
        content=StatusResponse().model_dump()
    )


@router.get("/health", response_model=HealthResponse)
async def health_check(
    store: BookingStore = BookingStoreDependency,
    app_settings: Settings = SettingsDependency,
) -> JSONResponse:
    """
    Health check endpoint.

    Returns service status and the number of bookings held in memory.
    """
    response_data = HealthResponse(
        status=HealthStatus.HEALTHY,
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
        environment=app_settings.environment,
        active_bookings=len(store),
    )

    logger.debug(
        "Health check requested",
        extra={"active_bookings": response_data.active_bookings}
    )

    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )
