"""Booking number and cancellation token generation."""

import re
import secrets
import time
from typing import Optional

DEFAULT_PREFIX = "TB"
TOKEN_BYTES = 32

TOKEN_PATTERN = re.compile(r"^[0-9a-f]{64}$")
BOOKING_NUMBER_PATTERN = re.compile(r"^(?P<prefix>[A-Za-z]+)(?P<timestamp>\d{6})(?P<random>\d{3})$")


def generate_booking_number(prefix: str = DEFAULT_PREFIX, now_ms: Optional[int] = None) -> str:
    """
    Generate a short, human-readable booking number.

    The number is the prefix, the last six digits of the current epoch time in
    milliseconds and a zero-padded random number below 1000. Two bookings
    within the same millisecond window can collide; callers that need
    uniqueness check against active bookings and regenerate.
    """
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    timestamp = str(now_ms)[-6:].rjust(6, "0")
    return f"{prefix}{timestamp}{secrets.randbelow(1000):03d}"


def generate_cancellation_token() -> str:
    """Generate an unguessable, URL-safe cancellation token (256 bits, hex)."""
    return secrets.token_hex(TOKEN_BYTES)


def is_well_formed_token(value: Optional[str]) -> bool:
    """Return True if value has the shape of a generated cancellation token."""
    return bool(value) and TOKEN_PATTERN.match(value) is not None
