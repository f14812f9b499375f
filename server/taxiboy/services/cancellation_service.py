"""Cancellation service for token-based ride cancellation."""

import logging

from ..core.exceptions import BookingNotFoundError, NotificationDeliveryError
from ..core.observability import metrics_collector
from ..models.booking import BookingRecord
from .booking_store import BookingStore
from .notifications import NotificationDispatcher
from .templates import MessageRenderer

logger = logging.getLogger(__name__)


class CancellationService:
    """Service for cancelling bookings through their cancellation link."""

    def __init__(self, store: BookingStore, dispatcher: NotificationDispatcher, renderer: MessageRenderer):
        self.store = store
        self.dispatcher = dispatcher
        self.renderer = renderer

    async def cancel_ride(self, token: str) -> BookingRecord:
        """
        Cancel the booking a token belongs to.

        The record is removed only after both cancellation emails were sent.
        On failure it stays in the store and the same link can be reopened.

        Args:
            token: Cancellation token from the link

        Returns:
            The cancelled booking record

        Raises:
            BookingNotFoundError: If no active booking matches the token
            NotificationDeliveryError: If an email could not be delivered
        """
        record = self.store.claim(token)
        if record is None:
            logger.info("Cancellation requested for unknown or inactive token")
            raise BookingNotFoundError()

        messages = [
            self.renderer.customer_cancellation(record),
            self.renderer.admin_cancellation(record),
        ]

        delivered = False
        try:
            await self.dispatcher.dispatch(messages, operation="cancel_ride")
            delivered = True
        except NotificationDeliveryError as e:
            metrics_collector.record_notification_failure("cancel_ride")
            logger.warning(
                "Cancellation not completed, booking kept for retry",
                extra={
                    "booking_number": record.booking_number,
                    "failed_notifications": e.failed,
                }
            )
            raise
        finally:
            if delivered:
                self.store.delete(token)
            else:
                self.store.release(token)

        metrics_collector.record_ride_cancelled()
        metrics_collector.set_active_bookings(len(self.store))

        logger.info(
            "Booking cancelled successfully",
            extra={"booking_number": record.booking_number}
        )

        return record
