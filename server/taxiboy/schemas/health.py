"""Health-related Pydantic schemas."""

from enum import Enum

from pydantic import BaseModel, Field


class HealthStatus(str, Enum):
    """Health status enumeration."""
    HEALTHY = "healthy"


class StatusResponse(BaseModel):
    """Root liveness response schema."""

    status: str = Field("Server is running", description="Liveness message")


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: HealthStatus = Field(..., description="Service status")
    service: str = Field(..., description="Service name")
    version: str = Field("1.0.0", description="API version")
    environment: str = Field(..., description="Deployment environment")
    active_bookings: int = Field(..., ge=0, description="Bookings currently held in memory")
