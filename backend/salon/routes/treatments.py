"""GET /treatments: the public treatment catalog."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from salon.database import get_db_session
from salon.schemas.common import ErrorResponse
from salon.schemas.treatment import TreatmentListResponse, TreatmentResponse
from salon.services.treatment_store import TreatmentStore


def create_router() -> APIRouter:
    router = APIRouter(tags=["Treatments"])

    @router.get(
        "/treatments",
        response_model=TreatmentListResponse,
        responses={500: {"description": "Server error", "model": ErrorResponse}},
        summary="List the treatment catalog",
    )
    async def list_treatments(
        db: AsyncSession = Depends(get_db_session),
    ) -> TreatmentListResponse:
        treatments = await TreatmentStore(db).list_all()
        return TreatmentListResponse(
            treatments=[TreatmentResponse.model_validate(t) for t in treatments],
            count=len(treatments),
        )

    return router
