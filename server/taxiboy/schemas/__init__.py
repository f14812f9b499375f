"""Pydantic schemas for request/response validation."""

from .booking import BookRideFailure, BookRideRequest, BookRideResponse
from .common import Problem, Violation
from .health import HealthResponse, HealthStatus, StatusResponse

__all__ = [
    "BookRideFailure",
    "BookRideRequest",
    "BookRideResponse",
    "HealthResponse",
    "HealthStatus",
    "Problem",
    "StatusResponse",
    "Violation",
]
