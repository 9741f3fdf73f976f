"""
SocialConnect Backend — Response Envelope Schemas
===================================================

What:  The `{success, data?, error?, message?}` envelope shared by every
       endpoint, plus the health-check payloads.
How:   Routes return `ApiResponse[T]` for data-bearing responses and
       `MessageResponse` for acknowledgements. Errors are rendered by the
       global exception handlers in the `ErrorResponse` shape.
"""

from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Successful response carrying a payload."""

    success: bool = Field(default=True)
    data: T
    message: Optional[str] = Field(default=None, description="Human-readable summary")


class MessageResponse(BaseModel):
    """Successful response without a payload (logout, like, follow, ...)."""

    success: bool = Field(default=True)
    message: str


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Fields:
        error: Human-readable description for display to users
        details: Optional extra context (e.g., which field failed validation)
        request_id: Correlation ID for tracing this error in server logs
    """
    success: bool = Field(default=False)
    error: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer health checks."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")


class ApiStatus(BaseModel):
    """Payload of GET /api/test."""
    version: str
    status: str
    timestamp: datetime
