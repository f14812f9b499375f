"""Service layer package."""

from .booking_service import BookingReceipt, BookingService
from .booking_store import BookingStore
from .cancellation_service import CancellationService
from .notifications import MailMessage, MailSender, NotificationDispatcher, SmtpMailSender
from .templates import MessageRenderer

__all__ = [
    "BookingReceipt",
    "BookingService",
    "BookingStore",
    "CancellationService",
    "MailMessage",
    "MailSender",
    "MessageRenderer",
    "NotificationDispatcher",
    "SmtpMailSender",
]
