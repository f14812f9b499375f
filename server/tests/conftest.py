"""Test configuration and fixtures."""

import asyncio
import os

# Deterministic settings for every test run
os.environ["ENVIRONMENT"] = "development"
os.environ["MAIL_LANGUAGE"] = "en"
os.environ["DISPLAY_TIMEZONE"] = "UTC"
os.environ["BASE_URL"] = "https://rides.test"
os.environ["EMAIL_USER"] = "dispatch@taxiboy.test"
os.environ["BOOKING_NUMBER_PREFIX"] = "TB"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from taxiboy.core.dependencies import get_booking_store, get_mail_sender
from taxiboy.services.booking_service import BookingService
from taxiboy.services.booking_store import BookingStore
from taxiboy.services.cancellation_service import CancellationService
from taxiboy.services.notifications import MailMessage, MailSender, NotificationDispatcher
from taxiboy.services.templates import MessageRenderer


class RecordingMailSender(MailSender):
    """Mail transport double that keeps delivered messages in memory."""

    def __init__(self):
        self.sent: list[MailMessage] = []
        self.attempts: list[MailMessage] = []
        self.fail_roles: set[str] = set()
        self.delay = 0.0

    async def send(self, message: MailMessage) -> None:
        self.attempts.append(message)
        if self.delay:
            await asyncio.sleep(self.delay)
        if message.role in self.fail_roles:
            raise ConnectionError("SMTP relay unavailable")
        self.sent.append(message)

    def sent_to(self, role: str) -> list[MailMessage]:
        return [message for message in self.sent if message.role == role]


@pytest.fixture
def mail_sender():
    """Recording mail transport."""
    return RecordingMailSender()


@pytest.fixture
def booking_store():
    """Fresh in-memory booking store."""
    return BookingStore()


@pytest.fixture
def renderer():
    """English message renderer."""
    return MessageRenderer(
        company_name="TaxiBoy",
        language="en",
        display_timezone="UTC",
        sender="dispatch@taxiboy.test",
        admin_recipient="admin@taxiboy.test",
    )


@pytest.fixture
def dispatcher(mail_sender):
    """Dispatcher with a short timeout."""
    return NotificationDispatcher(mail_sender, timeout_seconds=2.0)


@pytest.fixture
def booking_service(booking_store, dispatcher, renderer):
    """Booking service wired to the in-memory doubles."""
    return BookingService(
        store=booking_store,
        dispatcher=dispatcher,
        renderer=renderer,
        base_url="https://rides.test",
    )


@pytest.fixture
def cancellation_service(booking_store, dispatcher, renderer):
    """Cancellation service wired to the in-memory doubles."""
    return CancellationService(store=booking_store, dispatcher=dispatcher, renderer=renderer)


@pytest.fixture
def test_app(booking_store, mail_sender):
    """Create a test FastAPI application."""
    from taxiboy.main import create_app

    app = create_app()

    # Override the lifespan-owned collaborators
    app.dependency_overrides[get_booking_store] = lambda: booking_store
    app.dependency_overrides[get_mail_sender] = lambda: mail_sender

    yield app

    # Clean up
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_booking_data():
    """Booking form payload for an immediate ride."""
    return {
        "pickupLocation": "Hauptbahnhof, Platz 1",
        "destination": "Airport Terminal 2",
        "dateTime": "As soon as possible",
        "phone": "+49 170 1234567",
        "email": "jamie.doe@mailbox.org",
        "type": "immediate",
        "vehicleType": "Sedan",
        "name": "Jamie Doe",
    }


@pytest.fixture
def scheduled_booking_data(sample_booking_data):
    """Booking form payload for a scheduled ride."""
    return {
        **sample_booking_data,
        "type": "scheduled",
        "dateTime": "2025-03-01T10:00:00Z",
    }
