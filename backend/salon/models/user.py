"""
Salon Booking Backend — User SQLAlchemy Model
================================================

What:  ORM model for the `users` table.
Who:   Written by registration (insert) and read by login, authentication and
       the user-info route.

Uniqueness:
    email, mobile_phone and access_token are each unique, and the pair
    (email, mobile_phone) carries its own constraint as well.

Credentials:
    password_hash holds a bcrypt hash; the plaintext is never stored.
    access_token is returned on login, so it is kept as issued.
    access_token_digest (SHA-256 hex of the token) is the lookup key used by
    the authentication dependency.
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List

from sqlalchemy import DateTime, String, UniqueConstraint, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from salon.database import Base

if TYPE_CHECKING:
    from salon.models.booking import Booking


class User(Base):
    """
    A registered customer.

    Lifecycle:
        1. Created on registration with a freshly issued access token
        2. Token is never rotated
        3. Only ever mutated by appending bookings (rows in `bookings`)
        4. Never deleted by the API
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    first_name: Mapped[str] = mapped_column(String(30), nullable=False)
    last_name: Mapped[str] = mapped_column(String(30), nullable=False)

    # Stored lower-cased
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)

    # Canonical form: optional leading '+' followed by 7-15 digits
    mobile_phone: Mapped[str] = mapped_column(String(16), nullable=False, unique=True)

    password_hash: Mapped[str] = mapped_column(String(60), nullable=False)

    access_token: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    access_token_digest: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        comment="SHA-256 hex digest of access_token; authentication lookup key",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # lazy="raise": bookings are always loaded through UserStore.list_bookings
    bookings: Mapped[List["Booking"]] = relationship(
        back_populates="user",
        order_by="Booking.id",
        lazy="raise",
    )

    __table_args__ = (
        UniqueConstraint("email", "mobile_phone", name="uq_users_email_mobile_phone"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
