"""Models module exporting the in-memory domain models."""

from .booking import ASAP, BookingRecord, RideType

__all__ = [
    "ASAP",
    "BookingRecord",
    "RideType",
]
