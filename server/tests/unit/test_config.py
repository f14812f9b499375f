"""Unit tests for application settings."""

import pytest
from pydantic import ValidationError

from taxiboy.core.config import Settings


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_public_base_url_falls_back_to_localhost():
    """Test the development cancellation link address."""
    assert make_settings(base_url=None, port=4000).public_base_url == "http://localhost:4000"


def test_public_base_url_strips_trailing_slash():
    """Test that configured URLs can have a path appended."""
    assert make_settings(base_url="https://rides.example.org/").public_base_url == "https://rides.example.org"


def test_allowed_origins_include_frontend_url():
    """Test the CORS allow-list."""
    config = make_settings(
        cors_origins="http://localhost:5173, http://127.0.0.1:5173",
        frontend_url="https://book.taxiboy.test/",
    )
    assert config.allowed_origins == [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "https://book.taxiboy.test",
    ]


def test_admin_recipient_defaults_to_mail_user():
    """Test the admin address fallback."""
    config = make_settings(email_user="dispatch@taxiboy.test", admin_email=None)
    assert config.admin_recipient == "dispatch@taxiboy.test"
    assert make_settings(admin_email="ops@taxiboy.test").admin_recipient == "ops@taxiboy.test"


def test_mail_configured_requires_both_credentials():
    """Test credential detection."""
    assert not make_settings(email_user="dispatch@taxiboy.test", email_password=None).mail_configured
    assert make_settings(email_user="dispatch@taxiboy.test", email_password="secret").mail_configured


def test_values_are_normalised():
    """Test environment, log level and language normalisation."""
    config = make_settings(environment="Production", log_level="debug", mail_language="DE")
    assert config.environment == "production"
    assert config.is_production
    assert not config.debug
    assert config.log_level == "DEBUG"
    assert config.mail_language == "de"


@pytest.mark.parametrize("field, value", [
    ("environment", "qa"),
    ("log_level", "verbose"),
    ("mail_language", "fr"),
    ("mail_timeout_seconds", 0),
])
def test_invalid_values_rejected(field, value):
    """Test that invalid settings fail fast."""
    with pytest.raises(ValidationError):
        make_settings(**{field: value})
