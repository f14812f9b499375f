"""Booking record model definitions."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

ASAP = "As soon as possible"


class RideType(str, Enum):
    """Ride type enumeration."""
    IMMEDIATE = "immediate"
    SCHEDULED = "scheduled"


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with a ``Z`` suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class BookingRecord:
    """
    Stored state for one active ride request.

    The cancellation token is deliberately not an attribute: it is the key the
    record is stored under, and holding the record never reveals it.
    """

    booking_number: str
    pickup_location: str
    destination: str
    ride_type: RideType
    date_time: str
    vehicle_type: str
    name: str
    phone: str
    email: str
    created_at: str = field(default_factory=utc_now_iso)

    @property
    def is_asap(self) -> bool:
        """Return True if the ride should be dispatched immediately."""
        return self.ride_type == RideType.IMMEDIATE or self.date_time == ASAP
