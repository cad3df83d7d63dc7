"""
Salon Booking Backend — Treatment SQLAlchemy Model
=====================================================

What:  ORM model for the `treatments` table, the fixed service catalog.
Who:   Written only by the catalog seeder; read by the treatments and booking
       routes.

Table Design:
    - UUID primary key, generated in Python so SQLite and PostgreSQL behave alike
    - name: unique; the seeder's idempotence key
    - category: short label (cut, wash, cutAndWash, styling)
    - icon: file name the frontend resolves to an image
    - sort_order: catalog position; GET /treatments orders by it
"""

import uuid

from sqlalchemy import Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from salon.database import Base


class Treatment(Base):
    """
    A bookable service offering.

    Lifecycle:
        Seeded at startup from salon.services.catalog.CATALOG; never created,
        updated or deleted through the API.
    """

    __tablename__ = "treatments"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        comment="Display name, unique across the catalog",
    )

    category: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Catalog category label",
    )

    icon: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Icon file name shown by the frontend",
    )

    sort_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Position in the catalog listing",
    )

    __table_args__ = (
        Index("idx_treatments_sort_order", "sort_order"),
    )

    def __repr__(self) -> str:
        return f"<Treatment(id={self.id}, name='{self.name}')>"
