"""Custom exceptions following RFC 9457 Problem Details for HTTP APIs."""

from typing import Any, Dict, List, Optional
from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import logging
import uuid
from datetime import datetime, timezone


logger = logging.getLogger(__name__)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ProblemDetailsException(HTTPException):
    """
    Base exception class following RFC 9457 Problem Details for HTTP APIs.

    https://tools.ietf.org/rfc/rfc9457.txt
    """

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: Optional[str] = None,
        instance: Optional[str] = None,
        extensions: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize Problem Details exception.

        Args:
            status_code: HTTP status code
            title: Short, human-readable summary of the problem type
            detail: Human-readable explanation specific to this occurrence
            type_uri: URI reference that identifies the problem type
            instance: URI reference that identifies the specific occurrence
            extensions: Additional problem-specific information
            headers: HTTP headers to include in response
        """
        self.status_code = status_code
        self.title = title
        self.type_uri = type_uri or f"about:blank#{status_code}"
        self.instance = instance
        self.extensions = extensions or {}

        # Create the problem details object
        self.problem_details = {
            "type": self.type_uri,
            "title": self.title,
            "status": self.status_code,
        }

        if detail:
            self.problem_details["detail"] = detail

        if self.instance:
            self.problem_details["instance"] = self.instance

        # Add extensions
        self.problem_details.update(self.extensions)

        super().__init__(
            status_code=status_code,
            detail=self.problem_details,
            headers=headers
        )
        # HTTPException stores the payload in `detail`; keep the message too
        self.message = detail


class ValidationError(ProblemDetailsException):
    """Exception for request validation errors."""

    def __init__(
        self,
        detail: str = "The request data failed validation",
        violations: Optional[List[Dict[str, str]]] = None,
        instance: Optional[str] = None,
    ):
        extensions: Dict[str, Any] = {
            "success": False,
            "error": detail,
        }
        if violations:
            extensions["violations"] = violations

        super().__init__(
            status_code=400,
            title="Validation Error",
            detail=detail,
            type_uri="https://taxiboy.example/problems/validation-error",
            instance=instance,
            extensions=extensions,
        )


class NotFoundError(ProblemDetailsException):
    """Exception for resource not found errors."""

    def __init__(
        self,
        resource_type: str = "resource",
        detail: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not detail:
            detail = f"The requested {resource_type} could not be found"

        super().__init__(
            status_code=404,
            title="Resource Not Found",
            detail=detail,
            type_uri="https://taxiboy.example/problems/resource-not-found",
            instance=instance,
            extensions={"resource_type": resource_type},
        )


class InternalServerError(ProblemDetailsException):
    """Exception for internal server errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred while processing the request",
        error_id: Optional[str] = None,
        instance: Optional[str] = None,
        extensions: Optional[Dict[str, Any]] = None,
    ):
        if not error_id:
            error_id = str(uuid.uuid4())

        merged = {
            "error_id": error_id,
            "timestamp": _utc_timestamp(),
        }
        merged.update(extensions or {})

        super().__init__(
            status_code=500,
            title="Internal Server Error",
            detail=detail,
            type_uri="https://taxiboy.example/problems/internal-server-error",
            instance=instance,
            extensions=merged,
        )
        self.error_id = error_id


# Business logic exceptions

class BookingNotFoundError(NotFoundError):
    """
    Raised when a cancellation token matches no active booking.

    Unknown, already-cancelled and in-flight tokens are reported the same way
    so the response reveals nothing about a token's history.
    """

    def __init__(self, instance: Optional[str] = None):
        super().__init__(
            resource_type="booking",
            detail="Booking not found or already cancelled.",
            instance=instance,
        )


class NotificationDeliveryError(InternalServerError):
    """Raised when one or more notification messages could not be delivered."""

    def __init__(
        self,
        failed: Optional[List[str]] = None,
        detail: str = "Notification delivery failed",
    ):
        self.failed = list(failed or [])
        super().__init__(
            detail=detail,
            extensions={"failed_notifications": self.failed},
        )


def violations_from_validation_error(exc: RequestValidationError) -> List[Dict[str, str]]:
    """Flatten FastAPI validation errors into path/message pairs."""
    violations = []
    for error in exc.errors():
        # Drop the leading "body"/"query" location marker
        location = [str(part) for part in error.get("loc", ())[1:]]
        violations.append({
            "path": ".".join(location) or "body",
            "message": error.get("msg", "Invalid value"),
        })
    return violations


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    """
    Exception handler for Problem Details exceptions.

    Args:
        request: FastAPI request object
        exc: Problem Details exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.problem_details,
        headers=exc.headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Convert request validation failures to a 400 Problem Details response.

    Args:
        request: FastAPI request object
        exc: Validation error raised while parsing the request

    Returns:
        JSONResponse: Problem Details with field-level violations
    """
    violations = violations_from_validation_error(exc)
    logger.info(
        "Request validation failed",
        extra={
            "path": request.url.path,
            "violations": violations,
        }
    )
    error = ValidationError(
        detail="Invalid booking request. Please check the highlighted fields.",
        violations=violations,
        instance=request.url.path,
    )
    return await problem_details_handler(request, error)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Generic exception handler that converts unhandled exceptions to Problem Details format.

    Args:
        request: FastAPI request object
        exc: Unhandled exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    error_id = str(uuid.uuid4())
    logger.error(
        "Unhandled exception",
        extra={"error_id": error_id, "path": request.url.path},
        exc_info=exc,
    )

    problem_details = {
        "type": "https://taxiboy.example/problems/internal-server-error",
        "title": "Internal Server Error",
        "status": 500,
        "detail": "An unexpected error occurred while processing the request",
        "instance": request.url.path,
        "error_id": error_id,
        "timestamp": _utc_timestamp(),
    }

    return JSONResponse(
        status_code=500,
        content=problem_details,
    )
