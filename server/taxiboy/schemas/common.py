"""Common Pydantic schemas."""

from typing import List, Optional
from pydantic import BaseModel, Field


class Violation(BaseModel):
    """Validation error violation."""

    path: str = Field(..., description="JSON path to the invalid field")
    message: str = Field(..., description="Validation error message")


class Problem(BaseModel):
    """RFC 9457 Problem Details response."""

    type: Optional[str] = Field(None, description="Problem type URI")
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., description="HTTP status code")
    detail: Optional[str] = Field(None, description="Human-readable explanation")
    instance: Optional[str] = Field(None, description="URI reference for this occurrence")
    success: Optional[bool] = Field(None, description="Present on booking endpoint errors")
    error: Optional[str] = Field(None, description="User-visible error message")
    violations: Optional[List[Violation]] = Field(None, description="Validation errors")
