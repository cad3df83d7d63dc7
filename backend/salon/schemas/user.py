"""
Salon Booking Backend — User Request/Response Schemas
========================================================

What:  Registration and login bodies, and the user projections returned by
       /register, /login and /userinfo.
How:   Field rules mirror the User model: names 2-30 characters, a valid email,
       a phone normalized to one canonical string, and a 15-20 character
       password. Projections never include the password hash; only the auth
       projection includes the access token.
"""

import re
import uuid
from datetime import datetime
from typing import Any, List

from pydantic import EmailStr, Field, field_validator

from salon.schemas.booking import BookingItem
from salon.schemas.common import CamelModel, as_utc

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 15
PASSWORD_MAX_LENGTH = 20

# bcrypt only reads the first 72 bytes of its input
PASSWORD_MAX_BYTES = 72

_PHONE_SEPARATORS = re.compile(r"[\s\-.()]")
_PHONE_PATTERN = re.compile(r"^\+?\d{7,15}$")
# Only an opening parenthesis or space may sit between the optional "+" and the first digit
_PHONE_START = re.compile(r"^\+?[\s(]*\d")


def normalize_mobile_phone(value: Any) -> str:
    """
    Returns the canonical phone string or raises ValueError.

    Accepts strings and JSON integers. Separators (spaces, '-', '.', '(' and ')')
    are dropped; a leading '+' is kept; 7 to 15 digits must remain. Negative
    integers and a '-' or '.' ahead of the first digit are rejected.

    >>> normalize_mobile_phone("+46 (70) 123-45-67")
    '+46701234567'
    """
    if isinstance(value, bool):
        raise ValueError("Mobile phone must be a phone number")
    if isinstance(value, int):
        if value < 0:
            raise ValueError("Mobile phone must not be negative")
        value = str(value)
    if not isinstance(value, str):
        raise ValueError("Mobile phone must be a phone number")

    value = value.strip()
    if not _PHONE_START.match(value):
        raise ValueError("Mobile phone must start with a digit or '+' followed by a digit")
    candidate = _PHONE_SEPARATORS.sub("", value)
    if not _PHONE_PATTERN.match(candidate):
        raise ValueError("Mobile phone must contain 7 to 15 digits, optionally starting with '+'")
    return candidate


class RegisterRequest(CamelModel):
    """Body of POST /register."""

    first_name: str = Field(min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    last_name: str = Field(min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    email: EmailStr
    mobile_phone: str = Field(description="Phone number; string or number")
    password: str = Field(
        description=f"{PASSWORD_MIN_LENGTH}-{PASSWORD_MAX_LENGTH} characters",
    )

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("mobile_phone", mode="before")
    @classmethod
    def validate_mobile_phone(cls, v: Any) -> str:
        return normalize_mobile_phone(v)

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, v: Any) -> Any:
        if not isinstance(v, str):
            return v
        if not PASSWORD_MIN_LENGTH <= len(v) <= PASSWORD_MAX_LENGTH:
            raise ValueError(
                f"Password needs to be between {PASSWORD_MIN_LENGTH} "
                f"and {PASSWORD_MAX_LENGTH} characters"
            )
        if len(v.encode("utf-8")) > PASSWORD_MAX_BYTES:
            raise ValueError(f"Password must not exceed {PASSWORD_MAX_BYTES} bytes")
        return v


class LoginRequest(CamelModel):
    """
    Body of POST /login.

    The password is not length-checked here: a policy message would reveal
    more than "Credentials do not match".
    """
    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1, max_length=1024)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class AuthenticatedUser(CamelModel):
    """Projection returned by register and login: identity plus the bearer token."""
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    access_token: str


class AuthResponse(CamelModel):
    message: str
    user: AuthenticatedUser


class UserProfile(CamelModel):
    """Projection returned by /userinfo: no password hash, no token."""
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    mobile_phone: str
    created_at: datetime
    booked_treatments: List[BookingItem] = Field(default_factory=list)

    created_at_utc = field_validator("created_at")(as_utc)


class UserInfoResponse(CamelModel):
    message: str = "This is your user information"
    user: UserProfile
