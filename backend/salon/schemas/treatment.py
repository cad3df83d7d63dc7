"""Treatment catalog response schemas."""

import uuid
from typing import List

from pydantic import Field

from salon.schemas.common import CamelModel


class TreatmentResponse(CamelModel):
    id: uuid.UUID
    name: str
    category: str
    icon: str
    sort_order: int


class TreatmentListResponse(CamelModel):
    treatments: List[TreatmentResponse] = Field(description="Catalog in display order")
    count: int
