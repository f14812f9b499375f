"""Booking-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from ..models.booking import ASAP, RideType

# Labels sent by the booking form before ride types were normalised
RIDE_TYPE_LABELS = {
    "immediate ride": RideType.IMMEDIATE,
    "sofortfahrt": RideType.IMMEDIATE,
    "sofortige fahrt": RideType.IMMEDIATE,
    "scheduled ride": RideType.SCHEDULED,
    "geplante fahrt": RideType.SCHEDULED,
}


def parse_requested_time(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z``."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


class BookRideRequest(BaseModel):
    """Request schema for booking a ride."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    pickup_location: str = Field(..., alias="pickupLocation", min_length=1, max_length=300, description="Pickup address")
    destination: str = Field(..., min_length=1, max_length=300, description="Destination address")
    ride_type: RideType = Field(RideType.IMMEDIATE, alias="type", description="Immediate or scheduled ride")
    date_time: str = Field(ASAP, alias="dateTime", max_length=64, description="ISO 8601 pickup time or 'As soon as possible'")
    vehicle_type: str = Field(..., alias="vehicleType", min_length=1, max_length=64, description="Requested vehicle type")
    name: str = Field(..., min_length=1, max_length=128, description="Customer name")
    phone: str = Field(..., min_length=3, max_length=32, pattern=r"^\+?[0-9 ()/.-]+$", description="Customer phone number")
    email: EmailStr = Field(..., description="Customer email address")

    @field_validator("ride_type", mode="before")
    @classmethod
    def normalise_ride_type(cls, v):
        """Accept the legacy form labels as well as the enum values."""
        if isinstance(v, str):
            return RIDE_TYPE_LABELS.get(v.strip().lower(), v.strip().lower())
        return v

    @field_validator("date_time", mode="before")
    @classmethod
    def default_blank_date_time(cls, v):
        """Treat a missing or blank pickup time as 'as soon as possible'."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return ASAP
        return v

    @model_validator(mode="after")
    def check_scheduled_time(self) -> "BookRideRequest":
        """Scheduled rides need a parseable pickup time."""
        if self.ride_type == RideType.SCHEDULED and self.date_time != ASAP:
            try:
                parse_requested_time(self.date_time)
            except ValueError as e:
                raise ValueError(
                    f"dateTime must be an ISO 8601 timestamp or '{ASAP}'"
                ) from e
        return self


class BookRideResponse(BaseModel):
    """Successful booking response schema."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(True, description="Always true for a successful booking")
    message: str = Field(..., description="Human-readable confirmation")
    booking_number: str = Field(..., alias="bookingNumber", description="Human-facing booking number")


class BookRideFailure(BaseModel):
    """Failed booking response schema."""

    success: bool = Field(False, description="Always false for a failed booking")
    error: str = Field(..., description="Generic, user-visible error message")
