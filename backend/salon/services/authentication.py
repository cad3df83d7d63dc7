"""
Salon Booking Backend — Authentication Dependency
====================================================

What:  FastAPI dependency resolving the `Authorization` header to a User.
How:   The header carries the raw access token; a "Bearer " prefix is accepted
       and stripped. Missing, empty and unknown tokens all raise
       AuthenticationError, which the global handler turns into
       401 {"error": "unauthenticated", "loggedOut": true}.
Who:   Declared by the protected routes (book, booked list, user info).
"""

import logging
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from salon.database import get_db_session
from salon.exceptions import AuthenticationError
from salon.models.user import User
from salon.services.user_store import UserStore

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


def extract_token(authorization: Optional[str]) -> str:
    """Returns the token carried by an Authorization header value ('' if none)."""
    if not authorization:
        return ""
    value = authorization.strip()
    scheme, _, rest = value.partition(" ")
    if scheme.lower() == BEARER_SCHEME:
        return rest.strip()
    return value


async def get_current_user(
    authorization: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    token = extract_token(authorization)
    if not token:
        raise AuthenticationError(context={"reason": "missing_token"})

    user = await UserStore(db).get_by_token(token)
    if user is None:
        # Never log the presented token
        logger.info("Rejected unknown access token")
        raise AuthenticationError(context={"reason": "unknown_token"})
    return user
