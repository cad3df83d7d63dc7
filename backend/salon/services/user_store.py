"""
Salon Booking Backend — User Store
=====================================

What:  Persistence for users and their bookings.
How:   Wraps one AsyncSession (the request's session). Writes flush and commit
       inside the store so constraint violations surface here, where they
       are translated into application exceptions.
Who:   Route handlers and the authentication dependency.

Error Handling Strategy:
    IntegrityError on insert     → DuplicateUserError (400)
    Any other SQLAlchemyError    → DatabaseError (500, generic message)
    Application exceptions       → propagate unchanged
"""

import logging
import secrets
import uuid
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from salon.exceptions import DatabaseError, DuplicateUserError
from salon.models.booking import Booking
from salon.models.treatment import Treatment
from salon.models.user import User
from salon.services.credentials import token_digest

logger = logging.getLogger(__name__)


class UserStore:
    """User and booking persistence bound to one session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # ── Lookups ───────────────────────────────────────────────────────────

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return await self._scalar(select(User).where(User.id == user_id), "get_by_id")

    async def get_by_email(self, email: str) -> Optional[User]:
        return await self._scalar(
            select(User).where(User.email == email.lower()), "get_by_email"
        )

    async def get_by_mobile_phone(self, mobile_phone: str) -> Optional[User]:
        return await self._scalar(
            select(User).where(User.mobile_phone == mobile_phone), "get_by_mobile_phone"
        )

    async def get_by_token(self, token: str) -> Optional[User]:
        """
        Resolves a presented access token to its user.

        The query matches on the token's SHA-256 digest; the stored token is
        then compared with secrets.compare_digest.
        """
        if not token:
            return None
        user = await self._scalar(
            select(User).where(User.access_token_digest == token_digest(token)),
            "get_by_token",
        )
        if user is None or not secrets.compare_digest(
            user.access_token.encode("utf-8"), token.encode("utf-8")
        ):
            return None
        return user

    # ── Writes ────────────────────────────────────────────────────────────

    async def create(
        self,
        first_name: str,
        last_name: str,
        email: str,
        mobile_phone: str,
        password_hash: str,
        access_token: str,
    ) -> User:
        """
        Inserts a new user.

        Existing email / phone are reported with the colliding field. The
        unique constraints still guard the race between that check and the
        insert; a violation there is reported without a field.

        Raises:
            DuplicateUserError: email or mobile phone already registered
            DatabaseError: any other storage failure
        """
        if await self.get_by_email(email) is not None:
            raise DuplicateUserError(field="email")
        if await self.get_by_mobile_phone(mobile_phone) is not None:
            raise DuplicateUserError(field="mobilePhone")

        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email.lower(),
            mobile_phone=mobile_phone,
            password_hash=password_hash,
            access_token=access_token,
            access_token_digest=token_digest(access_token),
        )
        try:
            self.session.add(user)
            await self.session.flush()
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.info("Registration hit a uniqueness constraint: %s", type(e.orig).__name__)
            raise DuplicateUserError(context={"constraint_error": str(e.orig)})
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Database error creating user: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create user. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("User created: %s", user.id)
        return user

    async def add_booking(
        self,
        user: User,
        treatment: Treatment,
        picked_date: Optional[date] = None,
    ) -> Booking:
        """Appends one booking to the user's list and commits it."""
        booking = Booking(
            user_id=user.id,
            treatment_id=treatment.id,
            treatment=treatment,
            picked_date=picked_date,
        )
        try:
            self.session.add(booking)
            await self.session.flush()
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Database error booking treatment: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to book treatment. Please try again.",
                context={"user_id": str(user.id), "treatment_id": str(treatment.id)},
            )

        logger.info("User %s booked treatment %s (booking %s)", user.id, treatment.id, booking.id)
        return booking

    async def list_bookings(self, user_id: uuid.UUID) -> List[Booking]:
        """The user's bookings in append order, each with its treatment loaded."""
        try:
            result = await self.session.execute(
                select(Booking)
                .where(Booking.user_id == user_id)
                .options(selectinload(Booking.treatment))
                .order_by(Booking.id)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing bookings for %s: %s", user_id, str(e))
            raise DatabaseError(
                message="Could not retrieve bookings. Please try again.",
                context={"user_id": str(user_id)},
            )

    async def has_booking(
        self,
        user_id: uuid.UUID,
        treatment_id: uuid.UUID,
        picked_date: Optional[date],
    ) -> bool:
        query = select(Booking.id).where(
            Booking.user_id == user_id,
            Booking.treatment_id == treatment_id,
        )
        if picked_date is None:
            query = query.where(Booking.picked_date.is_(None))
        else:
            query = query.where(Booking.picked_date == picked_date)
        try:
            result = await self.session.execute(query.limit(1))
            return result.scalar_one_or_none() is not None
        except SQLAlchemyError as e:
            logger.error("Database error checking bookings for %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": str(user_id)})

    # ── Internals ─────────────────────────────────────────────────────────

    async def _scalar(self, query, operation: str) -> Optional[User]:
        try:
            result = await self.session.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error in UserStore.%s: %s", operation, str(e))
            raise DatabaseError(context={"operation": operation})
