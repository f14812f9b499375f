"""Booking router for ride booking and cancellation."""

import logging
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse

from ..core.dependencies import (
    BookingServiceDependency,
    CancellationServiceDependency,
    MessageRendererDependency,
)
from ..core.exceptions import BookingNotFoundError, NotificationDeliveryError
from ..schemas.booking import BookRideFailure, BookRideRequest, BookRideResponse
from ..schemas.common import Problem
from ..services.booking_service import BookingService
from ..services.cancellation_service import CancellationService
from ..services.identifiers import is_well_formed_token
from ..services.templates import MessageRenderer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["booking"])

# Define dependencies to avoid B008 linting errors
TOKEN_QUERY = Query(None, description="Cancellation token from the confirmation email")


def _booking_failure(renderer: MessageRenderer) -> JSONResponse:
    """Generic failure body; causes stay in the logs."""
    return JSONResponse(
        status_code=500,
        content=BookRideFailure(error=renderer.t("booking_failed")).model_dump()
    )


@router.post(
    "/book-ride",
    response_model=BookRideResponse,
    responses={400: {"model": Problem}, 500: {"model": BookRideFailure}},
)
async def book_ride(
    request: BookRideRequest,
    booking_service: BookingService = BookingServiceDependency,
    renderer: MessageRenderer = MessageRendererDependency,
) -> JSONResponse:
    """
    Book a ride.

    Records the booking and emails a confirmation with a cancellation link to
    the customer and a notification to the administrator.
    """
    try:
        receipt = await booking_service.book_ride(request)

    except NotificationDeliveryError as e:
        logger.error(
            "Booking notification failed",
            extra={
                "failed_notifications": e.failed,
                "error_id": e.error_id,
            }
        )
        return _booking_failure(renderer)

    except Exception as e:
        logger.error(
            "Unexpected error in ride booking",
            extra={
                "ride_type": request.ride_type.value,
                "error": str(e)
            },
            exc_info=True
        )
        return _booking_failure(renderer)

    response_data = BookRideResponse(
        message=renderer.t("booked_message"),
        booking_number=receipt.booking_number,
    )
    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(by_alias=True)
    )


@router.get(
    "/cancel-ride",
    response_class=HTMLResponse,
    responses={404: {"description": "Booking not found or already cancelled"},
               500: {"description": "Cancellation emails could not be sent"}},
)
async def cancel_ride(
    token: Optional[str] = TOKEN_QUERY,
    cancellation_service: CancellationService = CancellationServiceDependency,
    renderer: MessageRenderer = MessageRendererDependency,
):
    """
    Cancel a ride through the link from the confirmation email.

    Unknown, malformed and already used tokens all answer 404 with the same
    message. When an email fails the booking stays active and the link can be
    opened again.
    """
    not_found = PlainTextResponse(renderer.t("not_found"), status_code=404)

    if not is_well_formed_token(token):
        logger.info("Cancellation requested with missing or malformed token")
        return not_found

    try:
        record = await cancellation_service.cancel_ride(token)

    except BookingNotFoundError:
        return not_found

    except NotificationDeliveryError as e:
        logger.error(
            "Cancellation notification failed",
            extra={
                "failed_notifications": e.failed,
                "error_id": e.error_id,
            }
        )
        return PlainTextResponse(renderer.t("cancel_failed"), status_code=500)

    except Exception as e:
        logger.error(
            "Unexpected error in ride cancellation",
            extra={"error": str(e)},
            exc_info=True
        )
        return PlainTextResponse(renderer.t("cancel_failed"), status_code=500)

    return HTMLResponse(renderer.cancellation_page(record), status_code=200)
