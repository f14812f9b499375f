"""FastAPI dependencies for the booking store, mail transport and services."""

from fastapi import Depends, Request

from .config import Settings, settings
from ..services.booking_service import BookingService
from ..services.booking_store import BookingStore
from ..services.cancellation_service import CancellationService
from ..services.notifications import MailSender, NotificationDispatcher
from ..services.templates import MessageRenderer


def get_settings() -> Settings:
    """Settings dependency."""
    return settings


def get_booking_store(request: Request) -> BookingStore:
    """
    Booking store dependency.

    The store is created by the application lifespan and lives on app state.
    """
    return request.app.state.booking_store


def get_mail_sender(request: Request) -> MailSender:
    """Mail transport dependency."""
    return request.app.state.mail_sender


def get_message_renderer(app_settings: Settings = Depends(get_settings)) -> MessageRenderer:
    """Message renderer configured from settings."""
    return MessageRenderer(
        company_name=app_settings.company_name,
        language=app_settings.mail_language,
        display_timezone=app_settings.display_timezone,
        sender=app_settings.email_user,
        admin_recipient=app_settings.admin_recipient,
    )


def get_dispatcher(
    sender: MailSender = Depends(get_mail_sender),
    app_settings: Settings = Depends(get_settings),
) -> NotificationDispatcher:
    """Notification dispatcher with the configured delivery timeout."""
    return NotificationDispatcher(sender, timeout_seconds=app_settings.mail_timeout_seconds)


def get_booking_service(
    store: BookingStore = Depends(get_booking_store),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    renderer: MessageRenderer = Depends(get_message_renderer),
    app_settings: Settings = Depends(get_settings),
) -> BookingService:
    """Booking service dependency."""
    return BookingService(
        store=store,
        dispatcher=dispatcher,
        renderer=renderer,
        base_url=app_settings.public_base_url,
        booking_number_prefix=app_settings.booking_number_prefix,
    )


def get_cancellation_service(
    store: BookingStore = Depends(get_booking_store),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    renderer: MessageRenderer = Depends(get_message_renderer),
) -> CancellationService:
    """Cancellation service dependency."""
    return CancellationService(store=store, dispatcher=dispatcher, renderer=renderer)


BookingStoreDependency = Depends(get_booking_store)
BookingServiceDependency = Depends(get_booking_service)
CancellationServiceDependency = Depends(get_cancellation_service)
SettingsDependency = Depends(get_settings)
MessageRendererDependency = Depends(get_message_renderer)
