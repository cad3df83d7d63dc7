"""
Salon Booking Backend — Custom Exception Hierarchy
=====================================================

What:  Application-specific exceptions for every failure a request can hit.
How:   Each exception carries a user-facing message and a context dict that is
       logged server-side only. Handlers registered in main.py translate them
       into the public JSON error envelope.
Who:   Raised by services, stores and the authentication dependency.

Exception Hierarchy:
    SalonError (base)
    ├── ValidationError            → 400 Bad Request
    │   └── DuplicateUserError     → 400 Bad Request (email / phone taken)
    ├── InvalidCredentialsError    → 400 Bad Request (login failed)
    ├── AuthenticationError        → 401 Unauthorized (missing / unknown token)
    ├── NotFoundError              → 404 Not Found
    ├── BookingConflictError       → 409 Conflict
    ├── DatabaseError              → 500 Internal Server Error
    └── RateLimitExceededError     → 429 Too Many Requests
"""

from typing import Any, Dict, Optional


class SalonError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SalonError):
    """
    Raised when client input fails a business rule the schema cannot express.

    HTTP: 400 Bad Request. Schema-level failures (pydantic) are mapped to the
    same status and envelope by the RequestValidationError handler.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class DuplicateUserError(ValidationError):
    """
    Raised when registration collides with an existing user.

    `field` names the colliding attribute (`email` or `mobilePhone`), or is
    None when only the storage constraint reported the collision.
    """

    def __init__(self, field: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        if field == "email":
            message = "A user with this email already exists"
        elif field == "mobilePhone":
            message = "A user with this mobile phone already exists"
        else:
            message = "A user with this email or mobile phone already exists"
        super().__init__(message=message, field=field, context=context)


class InvalidCredentialsError(SalonError):
    """
    Raised when login fails.

    The message is fixed: an unknown email and a wrong password must be
    indistinguishable to the caller.
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Credentials do not match", context=context)


class AuthenticationError(SalonError):
    """
    Raised when a protected endpoint is called without a valid access token.

    HTTP: 401 Unauthorized. The response carries `loggedOut: true` so clients
    can tell "not logged in" apart from other failures.
    """

    def __init__(
        self,
        message: str = "Please log in",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(SalonError):
    """
    Raised when a referenced resource does not exist.

    HTTP: 404 Not Found. Used for booking a treatment id that is unknown or
    malformed, and for an authenticated user that vanished mid-request.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class BookingConflictError(SalonError):
    """
    Raised when double booking is disabled and the user already holds a
    booking for the same treatment on the same date.

    HTTP: 409 Conflict
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="You have already booked this treatment for that date",
            context=context,
        )


class DatabaseError(SalonError):
    """
    Raised when a database operation fails unexpectedly.

    HTTP: 500. The client always gets a generic message; the driver error is
    kept in `context` for the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(SalonError):
    """
    Raised when a client exceeds the per-IP limit on credential endpoints.

    HTTP: 429 Too Many Requests, with a Retry-After header.
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Too many requests. Please wait {retry_after} seconds before retrying."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
