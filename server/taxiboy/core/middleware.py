"""Request correlation and access logging middleware."""

import logging
import re
import time
import uuid
from typing import Callable, Iterable, Optional

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .observability import metrics_collector

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Client supplied IDs end up in logs and response headers
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

QUIET_PATHS = frozenset({"/", "/health", "/metrics", "/favicon.ico"})


def _route_label(request: Request) -> str:
    """Route template for metric labels, e.g. ``/api/cancel-ride``."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Attach a correlation ID to every request and response.

    A well-formed ``X-Request-ID`` from the caller (for example the booking
    frontend) is reused; anything else is replaced with a fresh UUID.
    """

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        incoming = request.headers.get(self.header_name, "")
        request_id = incoming if _REQUEST_ID_PATTERN.match(incoming) else str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers[self.header_name] = request_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Log one line per booking API request and record HTTP metrics.

    Only the path is logged. The cancellation link carries its secret token in
    the query string, so neither the query nor the full URL reaches the logs.
    """

    def __init__(self, app: ASGIApp, quiet_paths: Optional[Iterable[str]] = None):
        super().__init__(app)
        self.quiet_paths = frozenset(quiet_paths) if quiet_paths is not None else QUIET_PATHS

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        start_time = time.perf_counter()

        response = await call_next(request)

        duration = time.perf_counter() - start_time
        status_code = response.status_code
        metrics_collector.record_http_request(request.method, _route_label(request), status_code, duration)

        if path in self.quiet_paths:
            return response

        log_data = {
            "request_id": getattr(request.state, "request_id", None),
            "method": request.method,
            "path": path,
            "status_code": status_code,
            "duration_ms": round(duration * 1000, 2),
        }
        if status_code >= 500:
            logger.error("Request failed", extra=log_data)
        elif status_code >= 400:
            logger.warning("Request rejected", extra=log_data)
        else:
            logger.info("Request handled", extra=log_data)

        return response


class AccessLogQueryFilter(logging.Filter):
    """
    Drop query strings from uvicorn access log records.

    uvicorn passes ``(client, method, path_with_query, http_version, status)``
    as the record arguments.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        args = record.args
        if isinstance(args, tuple) and len(args) >= 3 and isinstance(args[2], str):
            record.args = args[:2] + (args[2].split("?", 1)[0],) + args[3:]
        return True


def install_access_log_filter(logger_name: str = "uvicorn.access") -> None:
    """Attach the query filter to the server access logger once."""
    access_logger = logging.getLogger(logger_name)
    if not any(isinstance(f, AccessLogQueryFilter) for f in access_logger.filters):
        access_logger.addFilter(AccessLogQueryFilter())


def setup_middleware(app: FastAPI, enable_logging: bool = True) -> None:
    """
    Install the middleware stack.

    Middleware added last runs first, so the request ID is set before the
    access log reads it.
    """
    if enable_logging:
        app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
