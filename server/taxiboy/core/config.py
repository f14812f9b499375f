"""Configuration settings for the FastAPI application."""

from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode

DEFAULT_FRONTEND_ORIGINS = ["http://localhost:5173", "http://127.0.0.1:5173"]


class Settings(BaseSettings):
    """Application settings with Pydantic validation."""

    # Environment settings
    environment: str = Field(
        default="development",
        description="Application environment"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Application log level"
    )

    # Server settings
    host: str = Field(
        default="0.0.0.0",
        description="Server host"
    )

    port: int = Field(
        default=3001,
        description="Server port"
    )

    base_url: str | None = Field(
        default=None,
        description="Public base address used to build cancellation links"
    )

    # CORS settings
    frontend_url: str | None = Field(
        default=None,
        description="Deployed frontend origin added to the CORS allow-list"
    )

    cors_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_FRONTEND_ORIGINS),
        description="Allowed CORS origins"
    )

    # Mail transport settings
    email_user: str | None = Field(
        default=None,
        description="Mail account used as sender and SMTP login"
    )

    email_password: str | None = Field(
        default=None,
        description="App password for the mail account"
    )

    admin_email: str | None = Field(
        default=None,
        description="Recipient of admin notifications (defaults to email_user)"
    )

    smtp_host: str = Field(
        default="smtp.gmail.com",
        description="SMTP server host"
    )

    smtp_port: int = Field(
        default=465,
        description="SMTP server port"
    )

    smtp_use_ssl: bool = Field(
        default=True,
        description="Use implicit TLS (SMTPS); STARTTLS is used otherwise"
    )

    mail_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Upper bound for delivering a single message"
    )

    # Message rendering settings
    mail_language: str = Field(
        default="en",
        description="Language of emails and the cancellation page"
    )

    display_timezone: str = Field(
        default="UTC",
        description="Time zone used to display scheduled pickup times"
    )

    company_name: str = Field(
        default="TaxiBoy",
        description="Company name shown in messages"
    )

    booking_number_prefix: str = Field(
        default="TB",
        min_length=1,
        max_length=8,
        description="Fixed prefix of human-facing booking numbers"
    )

    # Observability settings
    otlp_endpoint: str | None = Field(
        default=None,
        description="OTLP collector endpoint; export is disabled when unset"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        valid_environments = ["development", "staging", "production"]
        if v.lower() not in valid_environments:
            raise ValueError(f"Environment must be one of: {valid_environments}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level value."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("mail_language")
    @classmethod
    def validate_mail_language(cls, v: str) -> str:
        """Validate mail language value."""
        valid_languages = ["en", "de"]
        if v.lower() not in valid_languages:
            raise ValueError(f"Mail language must be one of: {valid_languages}")
        return v.lower()

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("base_url", "frontend_url")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        """Normalise URLs so paths can be appended."""
        if v:
            return v.rstrip("/")
        return v or None

    @property
    def debug(self) -> bool:
        """Return True if in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Return True if in production mode."""
        return self.environment == "production"

    @property
    def public_base_url(self) -> str:
        """Base address of this service as seen from a customer's mailbox."""
        return self.base_url or f"http://localhost:{self.port}"

    @property
    def allowed_origins(self) -> list[str]:
        """CORS allow-list including the configured frontend URL."""
        origins = list(self.cors_origins)
        if self.frontend_url and self.frontend_url not in origins:
            origins.append(self.frontend_url)
        return origins

    @property
    def admin_recipient(self) -> str | None:
        """Address that receives admin notifications."""
        return self.admin_email or self.email_user

    @property
    def mail_configured(self) -> bool:
        """Return True if transport credentials are present."""
        return bool(self.email_user and self.email_password)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Global settings instance
settings = Settings()
