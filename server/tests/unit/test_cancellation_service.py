"""Unit tests for the cancellation service."""

import asyncio

import pytest
import pytest_asyncio

from taxiboy.core.exceptions import BookingNotFoundError, NotificationDeliveryError
from taxiboy.schemas.booking import BookRideRequest
from taxiboy.services.identifiers import generate_cancellation_token


@pytest_asyncio.fixture
async def booked(booking_service, mail_sender, sample_booking_data):
    """A confirmed booking with the booking emails already cleared."""
    receipt = await booking_service.book_ride(BookRideRequest(**sample_booking_data))
    mail_sender.sent.clear()
    mail_sender.attempts.clear()
    return receipt


@pytest.mark.asyncio
async def test_cancel_ride(cancellation_service, booking_store, mail_sender, booked):
    """Test a successful cancellation."""
    record = await cancellation_service.cancel_ride(booked.cancellation_token)

    assert record.booking_number == booked.booking_number
    assert not booking_store.has(booked.cancellation_token)

    customer = mail_sender.sent_to("customer")
    admin = mail_sender.sent_to("admin")
    assert customer[0].subject == f"TaxiBoy - Booking Cancellation Confirmation #{booked.booking_number}"
    assert admin[0].subject == f"[ADMIN] Booking Cancelled #{booked.booking_number}"


@pytest.mark.asyncio
async def test_cancel_twice_reports_not_found(cancellation_service, mail_sender, booked):
    """Test that a used link behaves like an unknown one."""
    await cancellation_service.cancel_ride(booked.cancellation_token)
    mail_sender.attempts.clear()

    with pytest.raises(BookingNotFoundError):
        await cancellation_service.cancel_ride(booked.cancellation_token)

    assert mail_sender.attempts == []


@pytest.mark.asyncio
async def test_unknown_token_sends_nothing(cancellation_service, booking_store, mail_sender):
    """Test that never-issued tokens are rejected without side effects."""
    token = generate_cancellation_token()

    for _ in range(2):
        with pytest.raises(BookingNotFoundError) as exc_info:
            await cancellation_service.cancel_ride(token)
        assert exc_info.value.status_code == 404

    assert mail_sender.attempts == []
    assert len(booking_store) == 0


@pytest.mark.asyncio
async def test_failed_send_keeps_booking_for_retry(cancellation_service, booking_store, mail_sender, booked):
    """Test that the link can be reopened after a delivery failure."""
    mail_sender.fail_roles = {"customer"}

    with pytest.raises(NotificationDeliveryError):
        await cancellation_service.cancel_ride(booked.cancellation_token)

    assert booking_store.has(booked.cancellation_token)

    mail_sender.fail_roles = set()
    record = await cancellation_service.cancel_ride(booked.cancellation_token)

    assert record.booking_number == booked.booking_number
    assert not booking_store.has(booked.cancellation_token)


@pytest.mark.asyncio
async def test_interrupted_cancellation_releases_claim(cancellation_service, booking_store, mail_sender, booked):
    """Test that a cancelled request does not lock the booking forever."""
    mail_sender.delay = 5.0

    task = asyncio.create_task(cancellation_service.cancel_ride(booked.cancellation_token))
    await asyncio.sleep(0.05)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    assert booking_store.has(booked.cancellation_token)
    assert booking_store.claim(booked.cancellation_token) is not None
