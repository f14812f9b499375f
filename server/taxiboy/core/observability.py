"""Observability setup for OpenTelemetry, metrics, and structured logging."""

import logging

from opentelemetry import trace, metrics
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from prometheus_client import Counter, Gauge, Histogram, generate_latest, CollectorRegistry
import structlog

from .config import settings

SERVICE_NAME = "taxiboy-booking-api"
SERVICE_VERSION = "1.0.0"

# Prometheus metrics
REGISTRY = CollectorRegistry()

# Request metrics
REQUEST_COUNT = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status_code'],
    registry=REGISTRY
)

REQUEST_DURATION = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=REGISTRY
)

# Business metrics
RIDES_BOOKED = Counter(
    'rides_booked_total',
    'Total ride bookings accepted',
    ['ride_type'],
    registry=REGISTRY
)

RIDES_CANCELLED = Counter(
    'rides_cancelled_total',
    'Total ride bookings cancelled',
    registry=REGISTRY
)

NOTIFICATION_FAILURES = Counter(
    'notification_failures_total',
    'Notification dispatches that failed',
    ['operation'],
    registry=REGISTRY
)

ACTIVE_BOOKINGS = Gauge(
    'active_bookings',
    'Number of bookings held in memory',
    registry=REGISTRY
)


def setup_structured_logging():
    """Configure structured logging with structlog."""

    def add_trace_context(logger, method_name, event_dict):
        """Add trace context to log events."""
        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            event_dict['trace_id'] = format(ctx.trace_id, '032x')
            event_dict['span_id'] = format(ctx.span_id, '016x')
        return event_dict

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_trace_context,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _resource() -> Resource:
    return Resource.create({
        "service.name": SERVICE_NAME,
        "service.version": SERVICE_VERSION,
        "environment": settings.environment,
    })


def setup_tracing():
    """Setup OpenTelemetry tracing."""

    # Setup tracer provider
    provider = TracerProvider(resource=_resource())

    # Setup OTLP exporter (if OTLP endpoint is configured)
    if settings.otlp_endpoint:
        otlp_exporter = OTLPSpanExporter(endpoint=settings.otlp_endpoint)
        provider.add_span_processor(BatchSpanProcessor(otlp_exporter))

    trace.set_tracer_provider(provider)
    return trace.get_tracer(__name__)


def setup_metrics():
    """Setup OpenTelemetry metrics."""

    # Setup OTLP metric exporter (if configured)
    if settings.otlp_endpoint:
        otlp_exporter = OTLPMetricExporter(endpoint=settings.otlp_endpoint)
        reader = PeriodicExportingMetricReader(exporter=otlp_exporter, export_interval_millis=60000)
        metrics.set_meter_provider(MeterProvider(resource=_resource(), metric_readers=[reader]))

    return metrics.get_meter(__name__)


def strip_query_from_span(span, scope):
    """
    Remove the query string from server span attributes.

    Cancellation links carry their secret token in the query, so span
    attributes keep the path only.
    """
    if span is None or not span.is_recording():
        return

    attributes = getattr(span, "attributes", None) or {}
    url = attributes.get("http.url")
    if url:
        span.set_attribute("http.url", url.split("?", 1)[0])
    if attributes.get("url.query"):
        span.set_attribute("url.query", "")
    if attributes.get("http.target"):
        span.set_attribute("http.target", scope.get("path", ""))


def instrument_fastapi(app, tracer_provider=None):
    """Instrument FastAPI with OpenTelemetry."""
    FastAPIInstrumentor.instrument_app(
        app,
        tracer_provider=tracer_provider,
        server_request_hook=strip_query_from_span,
    )


class MetricsCollector:
    """Collector for business metrics."""

    @staticmethod
    def record_http_request(method: str, endpoint: str, status_code: int, duration_seconds: float):
        """Record one completed HTTP request."""
        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status_code=str(status_code)).inc()
        REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration_seconds)

    @staticmethod
    def record_ride_booked(ride_type: str):
        """Record an accepted booking."""
        RIDES_BOOKED.labels(ride_type=ride_type).inc()

    @staticmethod
    def record_ride_cancelled():
        """Record a completed cancellation."""
        RIDES_CANCELLED.inc()

    @staticmethod
    def record_notification_failure(operation: str):
        """Record a failed notification dispatch."""
        NOTIFICATION_FAILURES.labels(operation=operation).inc()

    @staticmethod
    def set_active_bookings(count: int):
        """Set the number of bookings held in memory."""
        ACTIVE_BOOKINGS.set(count)


def get_prometheus_metrics():
    """Get Prometheus metrics for the /metrics endpoint."""
    return generate_latest(REGISTRY)


# Global metrics collector instance
metrics_collector = MetricsCollector()


class StructuredLogger:
    """Structured logger with business context."""

    def __init__(self, name: str):
        self.logger = structlog.get_logger(name)

    def info(self, message: str, **kwargs):
        """Log info message with context."""
        self.logger.info(message, **kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with context."""
        self.logger.error(message, **kwargs)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(name)
