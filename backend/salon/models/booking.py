"""
Salon Booking Backend — Booking SQLAlchemy Model
===================================================

What:  ORM model for the `bookings` table: one row per booked treatment.
Who:   Appended by POST /booktreatment; read by /bookedtreatment and /userinfo.

A booking belongs to exactly one user and has no lifecycle of its own. The
integer primary key increases with every insert, so ordering by it yields the
user's bookings in append order.
"""

import uuid
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from salon.database import Base

if TYPE_CHECKING:
    from salon.models.treatment import Treatment
    from salon.models.user import User


class Booking(Base):
    """A user's selection of a treatment, optionally for a picked date."""

    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    treatment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("treatments.id"),
        nullable=False,
    )

    picked_date: Mapped[Optional[date]] = mapped_column(
        Date,
        nullable=True,
        comment="Date chosen by the client; no server-side slot checking",
    )

    booked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    user: Mapped["User"] = relationship(back_populates="bookings", lazy="raise")
    treatment: Mapped["Treatment"] = relationship(lazy="selectin")

    __table_args__ = (
        Index("idx_bookings_user_id", "user_id", "id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, user_id={self.user_id}, "
            f"treatment_id={self.treatment_id}, picked_date={self.picked_date})>"
        )
