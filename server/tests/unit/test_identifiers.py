"""Unit tests for booking number and token generation."""

from urllib.parse import quote, urlencode

from taxiboy.services.identifiers import (
    BOOKING_NUMBER_PATTERN,
    generate_booking_number,
    generate_cancellation_token,
    is_well_formed_token,
)


def test_booking_number_structure():
    """Test prefix, time component and random component."""
    number = generate_booking_number("TB", now_ms=1_740_823_200_123)

    match = BOOKING_NUMBER_PATTERN.match(number)
    assert match is not None
    assert match.group("prefix") == "TB"
    assert match.group("timestamp") == "200123"
    assert 0 <= int(match.group("random")) < 1000
    assert len(number) == 11


def test_booking_number_pads_short_timestamps():
    """Test that a clock value with fewer than six digits is zero padded."""
    number = generate_booking_number("TB", now_ms=42)
    assert number[2:8] == "000042"


def test_booking_number_custom_prefix():
    """Test a configured prefix."""
    assert generate_booking_number("RIDE").startswith("RIDE")


def test_cancellation_token_shape():
    """Test that tokens are 64 lowercase hex characters."""
    token = generate_cancellation_token()
    assert len(token) == 64
    assert is_well_formed_token(token)
    int(token, 16)


def test_cancellation_token_is_url_safe():
    """Test that URL-query encoding leaves the token unchanged."""
    token = generate_cancellation_token()
    assert quote(token, safe="") == token
    assert urlencode({"token": token}) == f"token={token}"


def test_cancellation_tokens_are_distinct():
    """Test that many tokens never repeat."""
    tokens = {generate_cancellation_token() for _ in range(1000)}
    assert len(tokens) == 1000


def test_is_well_formed_token_rejects_bad_values():
    """Test the boundary check used by the cancellation endpoint."""
    assert not is_well_formed_token(None)
    assert not is_well_formed_token("")
    assert not is_well_formed_token("abc")
    assert not is_well_formed_token("G" * 64)
    assert not is_well_formed_token("A" * 64)
    assert not is_well_formed_token("a" * 65)
