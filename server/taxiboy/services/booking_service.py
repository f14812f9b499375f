"""Booking service for business logic operations."""

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

from ..core.exceptions import NotificationDeliveryError
from ..core.observability import metrics_collector
from ..models.booking import BookingRecord
from ..schemas.booking import BookRideRequest
from .booking_store import BookingStore
from .identifiers import generate_booking_number, generate_cancellation_token
from .notifications import NotificationDispatcher
from .templates import MessageRenderer

logger = logging.getLogger(__name__)

CANCEL_PATH = "/api/cancel-ride"


def build_cancellation_url(base_url: str, token: str) -> str:
    """Cancellation link for a token against the service's public address."""
    return f"{base_url.rstrip('/')}{CANCEL_PATH}?{urlencode({'token': token})}"


@dataclass(frozen=True)
class BookingReceipt:
    """Outcome of a successful booking."""

    booking_number: str
    cancellation_token: str
    cancellation_url: str
    record: BookingRecord


class BookingService:
    """Service for booking-related operations."""

    def __init__(
        self,
        store: BookingStore,
        dispatcher: NotificationDispatcher,
        renderer: MessageRenderer,
        base_url: str,
        booking_number_prefix: str = "TB",
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.renderer = renderer
        self.base_url = base_url
        self.booking_number_prefix = booking_number_prefix

    def _generate_booking_number(self) -> str:
        """Generate a booking number not used by any active booking."""
        booking_number = generate_booking_number(self.booking_number_prefix)
        while self.store.has_booking_number(booking_number):
            booking_number = generate_booking_number(self.booking_number_prefix)
        return booking_number

    async def book_ride(self, request: BookRideRequest) -> BookingReceipt:
        """
        Record a ride request and send the confirmation emails.

        The record is stored before any email is sent and is kept when
        delivery fails, so a customer who received the link can still cancel.

        Args:
            request: Validated booking request

        Returns:
            Receipt with the booking number and cancellation link

        Raises:
            NotificationDeliveryError: If the customer or admin email failed
        """
        booking_number = self._generate_booking_number()
        token = generate_cancellation_token()
        cancellation_url = build_cancellation_url(self.base_url, token)

        record = BookingRecord(
            booking_number=booking_number,
            pickup_location=request.pickup_location,
            destination=request.destination,
            ride_type=request.ride_type,
            date_time=request.date_time,
            vehicle_type=request.vehicle_type,
            name=request.name,
            phone=request.phone,
            email=str(request.email),
        )

        self.store.put(token, record)
        metrics_collector.set_active_bookings(len(self.store))

        logger.info(
            "Booking recorded",
            extra={
                "booking_number": booking_number,
                "ride_type": record.ride_type.value,
                "vehicle_type": record.vehicle_type,
            }
        )

        messages = [
            self.renderer.customer_confirmation(record, cancellation_url),
            self.renderer.admin_confirmation(record),
        ]

        try:
            await self.dispatcher.dispatch(messages, operation="book_ride")
        except NotificationDeliveryError as e:
            metrics_collector.record_notification_failure("book_ride")
            logger.warning(
                "Booking kept after notification failure",
                extra={
                    "booking_number": booking_number,
                    "failed_notifications": e.failed,
                }
            )
            raise

        metrics_collector.record_ride_booked(record.ride_type.value)

        logger.info(
            "Booking confirmed successfully",
            extra={
                "booking_number": booking_number,
                "created_at": record.created_at,
            }
        )

        return BookingReceipt(
            booking_number=booking_number,
            cancellation_token=token,
            cancellation_url=cancellation_url,
            record=record,
        )
