"""
Salon Booking Backend — Booking Routes
=========================================

What:  POST /booktreatment (append a booking) and GET /bookedtreatment
       (list the caller's bookings). Both require a valid access token.
How:   `create_router(allow_double_booking)` fixes the booking policy when
       the router is built.

Booking flow:
    1. Authentication dependency resolves the caller
    2. Caller and treatment are looked up; either missing → 404, nothing written
    3. With double booking disabled, an identical (treatment, date) booking → 409
    4. Booking appended and committed → 200 with the created booking
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from salon.database import get_db_session
from salon.exceptions import BookingConflictError, NotFoundError
from salon.models.user import User
from salon.schemas.booking import (
    BookedTreatmentsResponse,
    BookingItem,
    BookTreatmentRequest,
    BookTreatmentResponse,
)
from salon.schemas.common import ErrorResponse, UnauthenticatedResponse
from salon.services.authentication import get_current_user
from salon.services.treatment_store import TreatmentStore
from salon.services.user_store import UserStore

logger = logging.getLogger(__name__)

UNAUTHENTICATED = {401: {"description": "Missing or unknown access token", "model": UnauthenticatedResponse}}


def create_router(allow_double_booking: bool = True) -> APIRouter:
    router = APIRouter(tags=["Bookings"])

    @router.post(
        "/booktreatment",
        response_model=BookTreatmentResponse,
        responses={
            **UNAUTHENTICATED,
            404: {"description": "User or treatment not found", "model": ErrorResponse},
            409: {"description": "Same treatment already booked for that date", "model": ErrorResponse},
            500: {"description": "Server error", "model": ErrorResponse},
        },
        summary="Book a treatment for the current user",
    )
    async def book_treatment(
        body: BookTreatmentRequest,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_session),
    ) -> BookTreatmentResponse:
        users = UserStore(db)
        user = await users.get_by_id(current_user.id)
        treatment = await TreatmentStore(db).get(body.treatment_id)

        if user is None:
            raise NotFoundError(resource="user", resource_id=str(current_user.id))
        if treatment is None:
            raise NotFoundError(resource="treatment", resource_id=body.treatment_id)

        if not allow_double_booking and await users.has_booking(
            user.id, treatment.id, body.picked_date
        ):
            raise BookingConflictError(
                context={"user_id": str(user.id), "treatment_id": str(treatment.id)}
            )

        booking = await users.add_booking(user, treatment, body.picked_date)
        return BookTreatmentResponse(booking=BookingItem.model_validate(booking))

    @router.get(
        "/bookedtreatment",
        response_model=BookedTreatmentsResponse,
        responses={
            **UNAUTHENTICATED,
            500: {"description": "Server error", "model": ErrorResponse},
        },
        summary="List the current user's bookings",
    )
    async def list_booked_treatments(
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_session),
    ) -> BookedTreatmentsResponse:
        bookings = await UserStore(db).list_bookings(current_user.id)
        return BookedTreatmentsResponse(
            bookings=[BookingItem.model_validate(b) for b in bookings],
            count=len(bookings),
        )

    return router
