"""
Salon Booking Backend — Booking Schemas
==========================================

What:  Body of POST /booktreatment and the booking shapes returned by
       /booktreatment, /bookedtreatment and /userinfo.
"""

import uuid
from datetime import date, datetime
from typing import List, Optional

from pydantic import Field, field_validator

from salon.schemas.common import CamelModel, as_utc
from salon.schemas.treatment import TreatmentResponse


class BookTreatmentRequest(CamelModel):
    """
    The caller picks both the treatment and the date.

    treatment_id is taken as a plain string: an id that is not a UUID is just
    an unknown treatment (404), not a malformed request.
    """
    treatment_id: str = Field(min_length=1, max_length=64)
    picked_date: Optional[date] = Field(default=None, description="ISO date, e.g. 2026-05-01")


class BookingItem(CamelModel):
    id: int
    treatment_id: uuid.UUID
    treatment: TreatmentResponse
    picked_date: Optional[date] = None
    booked_at: datetime

    booked_at_utc = field_validator("booked_at")(as_utc)


class BookTreatmentResponse(CamelModel):
    message: str = "Treatment booked successfully"
    booking: BookingItem


class BookedTreatmentsResponse(CamelModel):
    bookings: List[BookingItem]
    count: int
