"""
Salon Booking Backend — Treatment Store
==========================================

What:  Read access to the treatment catalog, plus the insert used by the seeder.
How:   Wraps one AsyncSession; SQLAlchemy errors become DatabaseError.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from salon.exceptions import DatabaseError
from salon.models.treatment import Treatment

logger = logging.getLogger(__name__)


class TreatmentStore:
    """Catalog persistence bound to one session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_all(self) -> List[Treatment]:
        """Full catalog in display order."""
        try:
            result = await self.session.execute(
                select(Treatment).order_by(Treatment.sort_order, Treatment.name)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing treatments: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to retrieve treatments")

    async def get(self, treatment_id: str) -> Optional[Treatment]:
        """
        Returns the treatment or None.

        Ids that do not parse as UUIDs cannot exist, so they return None
        rather than raising.
        """
        try:
            key = uuid.UUID(str(treatment_id))
        except ValueError:
            return None
        try:
            result = await self.session.execute(select(Treatment).where(Treatment.id == key))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching treatment %s: %s", treatment_id, str(e))
            raise DatabaseError(context={"treatment_id": str(treatment_id)})

    async def get_by_name(self, name: str) -> Optional[Treatment]:
        try:
            result = await self.session.execute(select(Treatment).where(Treatment.name == name))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching treatment '%s': %s", name, str(e))
            raise DatabaseError(context={"treatment_name": name})

    async def count(self) -> int:
        try:
            result = await self.session.execute(select(func.count(Treatment.id)))
            return result.scalar() or 0
        except SQLAlchemyError as e:
            logger.error("Database error counting treatments: %s", str(e))
            raise DatabaseError()

    async def add(
        self, name: str, category: str, icon: str, sort_order: int
    ) -> Optional[Treatment]:
        """
        Inserts and commits one treatment.

        Returns None when the unique name constraint rejects the row, i.e.
        another process inserted the same treatment first.
        """
        treatment = Treatment(name=name, category=category, icon=icon, sort_order=sort_order)
        try:
            self.session.add(treatment)
            await self.session.flush()
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            logger.info("Treatment '%s' was inserted concurrently", name)
            return None
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Database error inserting treatment '%s': %s", name, str(e))
            raise DatabaseError(context={"treatment_name": name})
        return treatment
