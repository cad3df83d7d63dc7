"""
Salon Booking Backend — Shared Schemas
=========================================

What:  The camelCase base model, the public error envelope, and the health
       payload.
How:   API models inherit from CamelModel: attributes stay snake_case in
       Python while JSON uses camelCase (firstName, accessToken, ...).
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def as_utc(value: datetime) -> datetime:
    """Marks naive timestamps (SQLite returns them) as UTC; converts aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CamelModel(BaseModel):
    """Base for request/response bodies exchanged with the frontend."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(BaseModel):
    """
    Public error envelope returned by every failing request.

    Example:
        {
            "error": "validation_error",
            "message": "Request validation failed",
            "details": {"errors": [{"field": "password", "message": "..."}]},
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class UnauthenticatedResponse(ErrorResponse):
    """401 envelope; `loggedOut` lets clients route the user to the login screen."""
    logged_out: bool = Field(default=True, alias="loggedOut")


class HealthResponse(BaseModel):
    """Returned by GET /health."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
