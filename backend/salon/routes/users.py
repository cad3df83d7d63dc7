"""GET /userinfo: the caller's own profile and bookings."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from salon.database import get_db_session
from salon.models.user import User
from salon.schemas.booking import BookingItem
from salon.schemas.common import ErrorResponse, UnauthenticatedResponse
from salon.schemas.user import UserInfoResponse, UserProfile
from salon.services.authentication import get_current_user
from salon.services.user_store import UserStore


def create_router() -> APIRouter:
    router = APIRouter(tags=["Users"])

    @router.get(
        "/userinfo",
        response_model=UserInfoResponse,
        responses={
            401: {"description": "Missing or unknown access token", "model": UnauthenticatedResponse},
            500: {"description": "Server error", "model": ErrorResponse},
        },
        summary="Profile of the current user",
    )
    async def get_user_info(
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_session),
    ) -> UserInfoResponse:
        bookings = await UserStore(db).list_bookings(current_user.id)
        profile = UserProfile(
            id=current_user.id,
            first_name=current_user.first_name,
            last_name=current_user.last_name,
            email=current_user.email,
            mobile_phone=current_user.mobile_phone,
            created_at=current_user.created_at,
            booked_treatments=[BookingItem.model_validate(b) for b in bookings],
        )
        return UserInfoResponse(user=profile)

    return router
