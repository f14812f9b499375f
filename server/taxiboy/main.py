"""FastAPI application initialization and configuration."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.exceptions import (
    ProblemDetailsException,
    generic_exception_handler,
    problem_details_handler,
    request_validation_handler,
)
from .core.middleware import install_access_log_filter, setup_middleware
from .core.observability import (
    SERVICE_VERSION,
    instrument_fastapi,
    metrics_collector,
    setup_metrics,
    setup_structured_logging,
    setup_tracing,
)
from .routers import booking, health, metrics
from .services.booking_store import BookingStore
from .services.notifications import MailSender, SmtpMailSender

# Configure structured logging
setup_structured_logging()

# Configure traditional logging for compatibility
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
install_access_log_filter()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Handles startup and shutdown events for the FastAPI application.
    """
    # Startup
    logger.info("Starting FastAPI application")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.debug}")

    try:
        setup_tracing()
        setup_metrics()
        logger.info("Observability setup completed")
    except Exception as e:
        logger.error(f"Failed to initialize application: {e}")
        raise

    if not settings.mail_configured:
        logger.warning("EMAIL_USER/EMAIL_PASSWORD not set; every notification will fail")

    logger.info(f"Cancellation links point to {settings.public_base_url}")
    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down FastAPI application")

    # Bookings live in process memory only
    app.state.booking_store.clear()
    metrics_collector.set_active_bookings(0)

    logger.info("Application shutdown complete")


def create_app(
    booking_store: Optional[BookingStore] = None,
    mail_sender: Optional[MailSender] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        booking_store: Store to use instead of a fresh in-memory store
        mail_sender: Mail transport to use instead of SMTP

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title="TaxiBoy Booking API",
        description="Ride booking requests with email confirmations and token-based cancellation links",
        version=SERVICE_VERSION,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.state.booking_store = booking_store if booking_store is not None else BookingStore()
    app.state.mail_sender = mail_sender if mail_sender is not None else SmtpMailSender(settings)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # Setup custom middleware
    setup_middleware(app, enable_logging=True)

    # Instrument FastAPI with OpenTelemetry
    instrument_fastapi(app)

    # Register exception handlers
    app.add_exception_handler(ProblemDetailsException, problem_details_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Register API routers
    app.include_router(health.router)
    app.include_router(booking.router)
    app.include_router(metrics.router)

    logger.info("FastAPI application created and configured")

    return app


# Create the application instance
app = create_app()


def server_options() -> dict:
    """
    Options passed to uvicorn by ``run``.

    uvicorn's own access log is off: ``LoggingMiddleware`` writes a path-only
    line per request, while uvicorn would log the query string and with it
    the cancellation token.
    """
    return {
        "host": settings.host,
        "port": settings.port,
        "log_level": settings.log_level.lower(),
        "access_log": False,
    }


def run() -> None:
    """Console entry point."""
    import uvicorn

    uvicorn.run("taxiboy.main:app", reload=settings.debug, **server_options())


if __name__ == "__main__":
    run()
